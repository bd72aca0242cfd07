"""SQLite — init + session + CRUD helpers"""
import json, os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .core.schemas import FormFlow, PageDocument
from .models import AnalyticsEventDB, Base, BlockTemplateDB, FormSubmissionDB, LandingPageDB, PageStatus

DATA_DIR = Path(os.getenv("LEADPAGES_DATA_DIR", str(Path.cwd() / "data")))

DB_PATH      = os.getenv("DB_PATH", str(DATA_DIR / "leadpages.db"))
ENGINE       = create_engine(f"sqlite:///{DB_PATH}", connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ENGINE)


def init_db(engine=None):
    if engine is None:
        Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine or ENGINE)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ── JSON helpers ──
def jd(o) -> str:
    return json.dumps(o, ensure_ascii=False)

def jo(s: Optional[str]) -> dict:
    return json.loads(s or "{}")


# ── Document ──
def page_document(page: LandingPageDB) -> PageDocument:
    """Document stocké sur deux colonnes JSON (sections, form_flow)."""
    return PageDocument.model_validate({
        "sections": json.loads(page.sections or "[]"),
        "formFlow": json.loads(page.form_flow or "{}"),
    })

def set_page_document(page: LandingPageDB, document: PageDocument) -> None:
    data = json.loads(document.to_json())
    page.sections  = jd(data.get("sections", []))
    page.form_flow = jd(data.get("formFlow", FormFlow().dump()))


# ── LandingPage ──
def db_create_page(db: Session, obj: LandingPageDB) -> LandingPageDB:
    db.add(obj); db.commit(); db.refresh(obj); return obj

def db_get_page(db: Session, page_id: str) -> Optional[LandingPageDB]:
    return db.query(LandingPageDB).filter_by(id=page_id).first()

def db_get_page_by_slug(db: Session, slug: str) -> Optional[LandingPageDB]:
    return db.query(LandingPageDB).filter_by(slug=slug).first()

def db_list_pages(db: Session, status: Optional[str] = None) -> List[LandingPageDB]:
    q = db.query(LandingPageDB)
    if status: q = q.filter_by(status=status)
    return q.order_by(LandingPageDB.created_at.desc()).all()

def db_update_page(db: Session, page: LandingPageDB, **kwargs) -> LandingPageDB:
    for k, v in kwargs.items():
        setattr(page, k, v)
    db.commit(); db.refresh(page); return page

def db_delete_page(db: Session, page: LandingPageDB) -> None:
    db.delete(page); db.commit()

def db_publish_page(db: Session, page: LandingPageDB) -> LandingPageDB:
    return db_update_page(db, page, status=PageStatus.PUBLISHED.value, published_at=datetime.utcnow())

def db_unpublish_page(db: Session, page: LandingPageDB) -> LandingPageDB:
    return db_update_page(db, page, status=PageStatus.DRAFT.value)

def db_increment_views(db: Session, page: LandingPageDB) -> None:
    page.views = (page.views or 0) + 1
    db.commit()


# ── FormSubmission ──
def db_create_submission(db: Session, obj: FormSubmissionDB) -> FormSubmissionDB:
    db.add(obj)
    if obj.landing_page_id:
        page = db_get_page(db, obj.landing_page_id)
        if page:
            page.submissions = (page.submissions or 0) + 1
    db.commit(); db.refresh(obj); return obj

def db_get_submission(db: Session, sid: str) -> Optional[FormSubmissionDB]:
    return db.query(FormSubmissionDB).filter_by(id=sid).first()

def db_list_submissions(db: Session, page_id: Optional[str] = None) -> List[FormSubmissionDB]:
    q = db.query(FormSubmissionDB)
    if page_id: q = q.filter_by(landing_page_id=page_id)
    return q.order_by(FormSubmissionDB.created_at.desc()).all()


# ── AnalyticsEvent ──
def db_create_event(db: Session, obj: AnalyticsEventDB) -> AnalyticsEventDB:
    db.add(obj); db.commit(); db.refresh(obj); return obj

def db_list_events(db: Session, page_id: str) -> List[AnalyticsEventDB]:
    return db.query(AnalyticsEventDB).filter_by(landing_page_id=page_id).order_by(AnalyticsEventDB.created_at).all()


# ── BlockTemplate ──
def db_create_block_template(db: Session, obj: BlockTemplateDB) -> BlockTemplateDB:
    db.add(obj); db.commit(); db.refresh(obj); return obj

def db_list_block_templates(db: Session, category: Optional[str] = None) -> List[BlockTemplateDB]:
    q = db.query(BlockTemplateDB)
    if category: q = q.filter_by(category=category)
    return q.order_by(BlockTemplateDB.is_system.desc(), BlockTemplateDB.created_at).all()
