"""
Landing pages — CRUD admin, publication, rendu public et aperçu.
GET  /api/pages/{slug}                  → page publiée (JSON, +1 vue)
GET  /p/{slug}                          → page publiée (HTML, étape 1)
POST /p/{slug}                          → navigation / soumission sans JS
GET  /api/admin/pages                   → liste (token)
POST /api/admin/pages                   → création (token)
GET|PUT|DELETE /api/admin/pages/{id}    → (token)
POST /api/admin/pages/{id}/publish|unpublish
GET  /api/admin/preview/{slug}?editing=1
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ...blocks import BlockRegistry, block_registry
from ...core.document import field_blocks, validate_document
from ...core.schemas import FormFlow, PageDocument
from ...database import (
    db_create_page, db_delete_page, db_get_page, db_get_page_by_slug, db_increment_views,
    db_list_pages, db_publish_page, db_unpublish_page, db_update_page, get_db, page_document,
    set_page_document,
)
from ...errors import ConfigurationError
from ...flow import AnalyticsTracker, CallableSubmissionSink, FormFlowEngine, SubmissionContext
from ...models import LandingPageCreate, LandingPageDB, LandingPageUpdate, PageStatus
from ...renderer import RenderMode, render_landing_page
from ...templates import get_page_template
from .analytics import DbAnalyticsSink
from .common import _check_token, fail, issues_response, ok, page_out
from .submissions import TRACKING_KEYS, store_submission

log = logging.getLogger(__name__)
router = APIRouter(tags=["Pages"])

_TRUE = ("true", "on", "1", "yes")
SESSION_COOKIE = "lp_session"


def _not_found_html() -> HTMLResponse:
    return HTMLResponse("<h1>Page not found</h1>", status_code=404)


def _build_engine(document: PageDocument, **kwargs) -> Optional[FormFlowEngine]:
    """Moteur du formulaire de la page ; None si le formulaire ne peut pas tourner."""
    try:
        return FormFlowEngine(document.form_flow, **kwargs)
    except ConfigurationError as e:
        log.warning("Form not rendered: %s", e)
        return None


def _render(page: LandingPageDB, document: PageDocument, engine: Optional[FormFlowEngine],
            mode: RenderMode = RenderMode.LIVE, action: str = "") -> str:
    return render_landing_page(
        page.meta_title or page.name, document, engine, mode,
        meta_description=page.meta_description, form_action=action,
    )


def _set_default(db: Session, page: LandingPageDB) -> None:
    """Une seule page par défaut."""
    for other in db.query(LandingPageDB).filter(LandingPageDB.is_default.is_(True), LandingPageDB.id != page.id):
        other.is_default = False
    db.commit()


# ── Public ─────────────────────────────────────────────────────────────────

@router.get("/api/pages/{slug}")
def get_published_page(slug: str, db: Session = Depends(get_db)):
    page = db_get_page_by_slug(db, slug)
    if not page or page.status != PageStatus.PUBLISHED.value:
        return fail(404, "Page not found")
    db_increment_views(db, page)
    return ok(page_out(page))


def _tracker(db: Session, page: LandingPageDB, request: Request) -> AnalyticsTracker:
    session_id = request.cookies.get(SESSION_COOKIE) or uuid.uuid4().hex
    return AnalyticsTracker(DbAnalyticsSink(db), landing_page_id=page.id, session_id=session_id, background=False)


def _html(body: str, tracker: AnalyticsTracker) -> HTMLResponse:
    response = HTMLResponse(body)
    response.set_cookie(SESSION_COOKIE, tracker.session_id, httponly=True, samesite="lax")
    return response


@router.get("/p/{slug}", response_class=HTMLResponse)
def view_page(slug: str, request: Request, db: Session = Depends(get_db)):
    page = db_get_page_by_slug(db, slug)
    if not page or page.status != PageStatus.PUBLISHED.value:
        return _not_found_html()
    db_increment_views(db, page)
    tracker = _tracker(db, page, request)
    tracker.page_view()
    document = page_document(page)
    return _html(_render(page, document, _build_engine(document, analytics=tracker)), tracker)


def _coerce(block, raw: Any, registry: BlockRegistry) -> Any:
    """Valeur postée (toujours une chaîne) → valeur attendue par le validateur du bloc."""
    if block.type == "checkbox":
        return raw is not None and str(raw).lower() in _TRUE
    if block.type == "radio-cards":
        for opt in registry.merged_props(block).get("options") or []:
            if isinstance(opt, dict) and str(opt.get("value")) == raw:
                return opt.get("value")
    return raw


def posted_values(flow: FormFlow, form, step: int, registry: BlockRegistry = block_registry) -> Dict[str, Any]:
    """
    Valeurs d'un POST de formulaire, clé = fieldName. Une case non cochée de
    l'étape affichée vaut False (le navigateur ne l'envoie pas).
    """
    values: Dict[str, Any] = {}
    for n, flow_step in enumerate(flow.steps, start=1):
        for block in field_blocks(flow_step.blocks, registry):
            name = registry.field_name_of(block)
            if name in form:
                values[name] = _coerce(block, form.get(name), registry)
            elif n == step and block.type == "checkbox":
                values[name] = False
    return values


def _tracking(request: Request) -> Dict[str, str]:
    params = {k: v for k, v in request.query_params.items() if k in TRACKING_KEYS}
    referrer = request.headers.get("referer")
    if referrer:
        params["referrer"] = referrer
    return params


@router.post("/p/{slug}", response_class=HTMLResponse)
async def post_page(slug: str, request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    # Session SQLAlchemy synchrone : le traitement tourne dans le threadpool
    return await run_in_threadpool(_handle_post, slug, request, form, db)


def _handle_post(slug: str, request: Request, form, db: Session):
    page = db_get_page_by_slug(db, slug)
    if not page or page.status != PageStatus.PUBLISHED.value:
        return _not_found_html()
    document = page_document(page)
    try:
        step = int(form.get("__step") or 1)
    except ValueError:
        step = 1
    action = form.get("__action") or ""
    ip = request.client.host if request.client else None
    tracker = _tracker(db, page, request)

    def sink(values: Dict[str, Any], context: SubmissionContext):
        sub = store_submission(db, page, values, context, ip_address=ip)
        return {"success": True, "id": sub.id}

    engine = _build_engine(
        document,
        sink=CallableSubmissionSink(sink),
        analytics=tracker,
        initial_values=posted_values(document.form_flow, form, step),
    )
    if engine is None:
        return HTMLResponse(_render(page, document, None))
    engine.go_to_step(step)

    if action == "back":
        engine.prev_step()
    elif action == "next":
        engine.next_step()
    elif action == "submit":
        context = SubmissionContext(source_page_id=page.id, tracking_params=_tracking(request))
        result = asyncio.run(engine.submit_form(context))
        if result.ok:
            submit_action = document.form_flow.submit_action
            if submit_action and submit_action.redirect_url:
                return RedirectResponse(submit_action.redirect_url, status_code=303)
        elif result.errors:
            engine.go_to_step(min(engine.step_of(name) or step for name in result.errors))
    else:
        # Carte choisie sans JS : même règle que l'auto-avance
        auto = [b for b in field_blocks(engine.current_step_config.blocks, engine.registry)
                if engine.registry.auto_advance_of(b) and engine.registry.field_name_of(b) in form]
        if auto:
            engine.next_step()

    return _html(_render(page, document, engine), tracker)


# ── Admin ──────────────────────────────────────────────────────────────────

def _document(sections, form_flow, page_type: str, from_template: bool,
              base: Optional[PageDocument] = None) -> PageDocument:
    if from_template and sections is None and form_flow is None:
        return get_page_template(page_type).document
    base = base or PageDocument()
    return PageDocument(
        sections=sections if sections is not None else base.sections,
        form_flow=form_flow if form_flow is not None else base.form_flow,
    )


@router.get("/api/admin/pages")
def list_pages(request: Request, status: Optional[str] = None, db: Session = Depends(get_db)):
    _check_token(request)
    return ok([page_out(p) for p in db_list_pages(db, status)])


@router.post("/api/admin/pages")
def create_page(body: LandingPageCreate, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    if db_get_page_by_slug(db, body.slug):
        return fail(400, "A page with this slug already exists")

    document = _document(body.sections, body.form_flow, body.page_type.value, body.from_template)
    issues = validate_document(document, block_registry)
    if issues:
        return issues_response(issues)

    page = LandingPageDB(
        slug=body.slug, name=body.name, status=body.status.value, page_type=body.page_type.value,
        meta_title=body.meta_title, meta_description=body.meta_description,
        is_default=bool(body.is_default),
    )
    set_page_document(page, document)
    page = db_create_page(db, page)
    if page.is_default:
        _set_default(db, page)
    log.info("Page created: %s (%s)", page.slug, page.id)
    return ok(page_out(page))


@router.get("/api/admin/pages/{page_id}")
def get_page(page_id: str, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    page = db_get_page(db, page_id)
    if not page:
        return fail(404, "Page not found")
    return ok(page_out(page))


@router.put("/api/admin/pages/{page_id}")
def update_page(page_id: str, body: LandingPageUpdate, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    page = db_get_page(db, page_id)
    if not page:
        return fail(404, "Page not found")
    if body.slug and body.slug != page.slug and db_get_page_by_slug(db, body.slug):
        return fail(400, "A page with this slug already exists")

    if body.sections is not None or body.form_flow is not None:
        document = _document(body.sections, body.form_flow, page.page_type, False, base=page_document(page))
        issues = validate_document(document, block_registry)
        if issues:
            return issues_response(issues)
        set_page_document(page, document)

    fields = body.model_dump(exclude_unset=True, exclude={"sections", "form_flow"})
    changes = {k: (v.value if hasattr(v, "value") else v) for k, v in fields.items() if v is not None}
    status = changes.pop("status", None)
    page = db_update_page(db, page, **changes)
    if status == PageStatus.PUBLISHED.value and page.status != status:
        page = db_publish_page(db, page)
    elif status:
        page = db_update_page(db, page, status=status)
    if changes.get("is_default"):
        _set_default(db, page)
    return ok(page_out(page))


@router.delete("/api/admin/pages/{page_id}")
def delete_page(page_id: str, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    page = db_get_page(db, page_id)
    if not page:
        return fail(404, "Page not found")
    db_delete_page(db, page)
    log.info("Page deleted: %s", page_id)
    return ok(message="Page deleted")


@router.post("/api/admin/pages/{page_id}/publish")
def publish_page(page_id: str, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    page = db_get_page(db, page_id)
    if not page:
        return fail(404, "Page not found")
    page = db_publish_page(db, page)
    log.info("Page published: %s", page.slug)
    return ok(page_out(page), "Page published")


@router.post("/api/admin/pages/{page_id}/unpublish")
def unpublish_page(page_id: str, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    page = db_get_page(db, page_id)
    if not page:
        return fail(404, "Page not found")
    page = db_unpublish_page(db, page)
    return ok(page_out(page), "Page unpublished")


@router.get("/api/admin/preview/{slug}", response_class=HTMLResponse)
def preview_page(slug: str, request: Request, editing: int = 0, step: int = 1, db: Session = Depends(get_db)):
    """Aperçu d'une page quel que soit son statut ; ?editing=1 → mode édition, ?step=n."""
    _check_token(request)
    page = db_get_page_by_slug(db, slug)
    if not page:
        return _not_found_html()
    document = page_document(page)
    engine = _build_engine(document)
    if engine is not None:
        engine.go_to_step(step)
    mode = RenderMode.EDITING if editing else RenderMode.LIVE
    return HTMLResponse(_render(page, document, engine, mode))
