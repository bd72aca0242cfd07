"""
Page builder — catalogue des blocs, contrôle et rendu d'un document, templates.
GET  /api/page-builder/catalog              → métadonnées par catégorie
GET  /api/page-builder/blocks/{type}        → config par défaut d'un nouveau bloc
POST /api/page-builder/validate             → {document} → issues
POST /api/page-builder/render               → {document, mode, step} → HTML
GET  /api/templates | /api/templates/{type}
GET  /api/admin/templates?category=         → blocs enregistrés (token)
POST /api/admin/templates                   → enregistre un bloc (token)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...blocks import CATEGORIES, block_registry
from ...core.document import validate_document
from ...core.schemas import CamelModel, PageDocument, PageSection
from ...database import db_create_block_template, db_list_block_templates, get_db, jd, jo
from ...errors import ConfigurationError
from ...flow import FormFlowEngine
from ...models import BlockTemplateCreate, BlockTemplateDB
from ...renderer import RenderMode, render_landing_page
from ...templates import get_all_page_templates, get_page_template
from .common import _check_token, fail, issues_response, ok

log = logging.getLogger(__name__)
router = APIRouter(tags=["Page Builder"])


class RenderRequest(CamelModel):
    document:   PageDocument
    title:      str = "Preview"
    mode:       RenderMode = RenderMode.EDITING
    step:       int = 1


def _meta(m) -> dict:
    return m.model_dump(by_alias=True, exclude_none=True, mode="json")


@router.get("/api/page-builder/catalog")
def catalog(request: Request):
    _check_token(request)
    return ok({cat: [_meta(m) for m in metas] for cat, metas in block_registry.get_by_category().items()})


@router.get("/api/page-builder/blocks/{block_type}")
def default_block(block_type: str, request: Request):
    _check_token(request)
    config = block_registry.create_default_config(block_type)
    if config is None:
        return fail(404, f"Unknown block type: {block_type}")
    return ok(config.dump())


@router.post("/api/page-builder/validate")
def validate(body: PageDocument, request: Request):
    _check_token(request)
    issues = validate_document(body, block_registry, require_steps=True)
    return ok({"valid": not issues, "issues": [i.model_dump(exclude_none=True) for i in issues]})


@router.post("/api/page-builder/render", response_class=HTMLResponse)
def render(body: RenderRequest, request: Request):
    _check_token(request)
    engine: Optional[FormFlowEngine] = None
    try:
        engine = FormFlowEngine(body.document.form_flow)
        engine.go_to_step(body.step)
    except ConfigurationError as e:
        log.info("Preview without form: %s", e)
    return HTMLResponse(render_landing_page(body.title, body.document, engine, body.mode))


@router.get("/api/templates")
def list_templates():
    return ok([t.model_dump(mode="json", by_alias=True, exclude_none=True) for t in get_all_page_templates()])


@router.get("/api/templates/{page_type}")
def get_template(page_type: str):
    try:
        template = get_page_template(page_type)
    except KeyError:
        return fail(404, f"Unknown page type: {page_type}")
    return ok(template.model_dump(mode="json", by_alias=True, exclude_none=True))


# ── Blocs enregistrés ──────────────────────────────────────────────────────

def block_template_out(t: BlockTemplateDB) -> dict:
    return {
        "id": t.id, "name": t.name, "category": t.category, "blockType": t.block_type,
        "defaultConfig": jo(t.default_config), "isSystem": bool(t.is_system),
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


@router.get("/api/admin/templates")
def list_block_templates(request: Request, category: Optional[str] = None, db: Session = Depends(get_db)):
    _check_token(request)
    if category and category not in CATEGORIES:
        return fail(400, f"Unknown category: {category}")
    return ok([block_template_out(t) for t in db_list_block_templates(db, category)])


@router.post("/api/admin/templates")
def create_block_template(body: BlockTemplateCreate, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    if block_registry.get_metadata(body.block_type) is None:
        return fail(400, f"Unknown block type: {body.block_type}")
    # Arbre complet contrôlé comme un bloc de page (types enfants, ids, profondeur)
    holder = PageDocument(sections=[PageSection(id="block-template", blocks=[body.default_config])])
    issues = validate_document(holder, block_registry)
    if issues:
        return issues_response(issues)

    template = db_create_block_template(db, BlockTemplateDB(
        name=body.name, category=body.category, block_type=body.block_type,
        default_config=jd(body.default_config.dump()),
        is_system=body.is_system,
    ))
    log.info("Block template created: %s (%s)", template.name, template.block_type)
    return ok(block_template_out(template), "Template created successfully")
