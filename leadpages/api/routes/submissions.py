"""
Soumissions de formulaire (leads).
POST  /api/submissions                          → public, validé contre le formulaire de la page
GET   /api/admin/submissions?pageId=            → liste (token)
PATCH /api/admin/submissions/{id}/status        → suivi du lead (token)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...database import (
    db_create_submission, db_get_page, db_get_submission, db_list_submissions, get_db, jd, jo,
    page_document,
)
from ...flow import SubmissionContext, validate_values
from ...flow.submission import CONTACT_KEYS
from ...models import FormSubmissionDB, LandingPageDB, SubmissionCreate, SubmissionStatusUpdate
from .common import _check_token, fail, ok

log = logging.getLogger(__name__)
router = APIRouter(tags=["Submissions"])

SUCCESS_MESSAGE = "Thank you! We'll be in touch soon."
TRACKING_KEYS   = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

_COLUMNS = {"email": "email", "firstName": "first_name", "lastName": "last_name", "phone": "phone"}
_EXTRA_TRACKING = {"utm_term": "utmTerm", "utm_content": "utmContent"}


def store_submission(db: Session, page: Optional[LandingPageDB], values: Dict[str, Any],
                     context: SubmissionContext, page_type: Optional[str] = None,
                     ip_address: Optional[str] = None) -> FormSubmissionDB:
    """Enregistre un lead : champs contact en colonnes, toutes les valeurs dans form_data."""
    tracking = context.tracking_params
    sub = FormSubmissionDB(
        landing_page_id=page.id if page else context.source_page_id,
        page_type=page_type or (page.page_type if page else "custom"),
        form_data=jd(values),
        utm_source=tracking.get("utm_source"),
        utm_medium=tracking.get("utm_medium"),
        utm_campaign=tracking.get("utm_campaign"),
        referrer=tracking.get("referrer"),
        ip_address=ip_address,
    )
    for key in CONTACT_KEYS:
        value = values.get(key)
        if isinstance(value, str) and value.strip():
            setattr(sub, _COLUMNS[key], value.strip())
    sub = db_create_submission(db, sub)
    log.info("Lead stored: %s (page=%s)", sub.id, sub.landing_page_id)
    return sub


def submission_out(sub: FormSubmissionDB) -> dict:
    return {
        "id": sub.id, "landingPageId": sub.landing_page_id, "pageType": sub.page_type,
        "email": sub.email, "firstName": sub.first_name, "lastName": sub.last_name, "phone": sub.phone,
        "formData": jo(sub.form_data), "utmSource": sub.utm_source, "utmMedium": sub.utm_medium,
        "utmCampaign": sub.utm_campaign, "referrer": sub.referrer, "status": sub.status,
        "createdAt": sub.created_at.isoformat() if sub.created_at else None,
    }


@router.post("/api/submissions")
def create_submission(body: SubmissionCreate, request: Request, db: Session = Depends(get_db)):
    page = None
    if body.landing_page_id:
        page = db_get_page(db, body.landing_page_id)
        if not page:
            return fail(404, "Landing page not found")

    values = body.values()
    tracking = {}
    for key, alias in _EXTRA_TRACKING.items():
        for k in (key, alias):
            value = values.pop(k, None)
            if isinstance(value, str) and value:
                tracking[key] = value
    for key, camel in (("utm_source", body.utm_source), ("utm_medium", body.utm_medium),
                       ("utm_campaign", body.utm_campaign), ("referrer", body.referrer)):
        if camel:
            tracking[key] = camel

    if page is not None:
        errors = validate_values(page_document(page).form_flow, values)
        if errors:
            return fail(400, "Validation failed", errors=errors)

    sub = store_submission(
        db, page, values,
        SubmissionContext(source_page_id=body.landing_page_id, tracking_params=tracking),
        page_type=body.page_type.value if body.page_type else None,
        ip_address=request.client.host if request.client else None,
    )
    return {"success": True, "id": sub.id, "data": {"id": sub.id}, "message": SUCCESS_MESSAGE}


@router.get("/api/admin/submissions")
def list_submissions(request: Request, pageId: Optional[str] = None, db: Session = Depends(get_db)):
    _check_token(request)
    return ok([submission_out(s) for s in db_list_submissions(db, pageId)])


@router.patch("/api/admin/submissions/{submission_id}/status")
def update_submission_status(submission_id: str, body: SubmissionStatusUpdate, request: Request,
                             db: Session = Depends(get_db)):
    _check_token(request)
    sub = db_get_submission(db, submission_id)
    if not sub:
        return fail(404, "Submission not found")
    sub.status = body.status.value
    db.commit(); db.refresh(sub)
    return ok(submission_out(sub))
