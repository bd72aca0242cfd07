"""
Analytics — événements du tunnel (page_view, form_start, step_complete, form_submit, cta_click).
POST /api/analytics/track                → public
GET  /api/admin/analytics/{page_id}      → événements bruts d'une page (token)
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...database import db_create_event, db_list_events, get_db, jd, jo
from ...models import AnalyticsEventDB, AnalyticsEventIn
from .common import _check_token, ok

log = logging.getLogger(__name__)
router = APIRouter(tags=["Analytics"])


def store_event(db: Session, event: AnalyticsEventIn) -> AnalyticsEventDB:
    return db_create_event(db, AnalyticsEventDB(
        landing_page_id=event.landing_page_id,
        session_id=event.session_id,
        event_type=event.event_type.value,
        event_data=jd(event.event_data or {}),
        step_number=event.step_number,
    ))


class DbAnalyticsSink:
    """Sink du tracker qui écrit directement en base (rendu serveur des pages)."""

    def __init__(self, db: Session):
        self.db = db

    def send(self, event: Dict[str, Any]) -> None:
        store_event(self.db, AnalyticsEventIn.model_validate(event))


@router.post("/api/analytics/track")
def track_event(body: AnalyticsEventIn, db: Session = Depends(get_db)):
    ev = store_event(db, body)
    return ok({"id": ev.id})


@router.get("/api/admin/analytics/{page_id}")
def list_events(page_id: str, request: Request, db: Session = Depends(get_db)):
    _check_token(request)
    return ok([
        {"id": e.id, "sessionId": e.session_id, "eventType": e.event_type,
         "eventData": jo(e.event_data), "stepNumber": e.step_number,
         "createdAt": e.created_at.isoformat() if e.created_at else None}
        for e in db_list_events(db, page_id)
    ])
