"""
Data models — LandingPage, FormSubmission, AnalyticsEvent, BlockTemplate
SQLAlchemy (SQLite) + Pydantic v2 + Enums
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import sqlalchemy as sa
from pydantic import Field, model_validator
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .blocks.registry import BlockCategory
from .core.schemas import BlockConfig, CamelModel, FormFlow, PageSection


# ── ENUMS ──────────────────────────────────────────────────────────────

class PageStatus(str, Enum):
    DRAFT     = "draft"
    PUBLISHED = "published"
    ARCHIVED  = "archived"


class PageType(str, Enum):
    APPRAISAL   = "appraisal"
    LEAD_MAGNET = "lead_magnet"
    NEWSLETTER  = "newsletter"
    WEBINAR     = "webinar"
    INQUIRY     = "inquiry"
    CUSTOM      = "custom"


class LeadStatus(str, Enum):
    NEW       = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST      = "lost"


class EventType(str, Enum):
    PAGE_VIEW     = "page_view"
    FORM_START    = "form_start"
    STEP_COMPLETE = "step_complete"
    FORM_SUBMIT   = "form_submit"
    CTA_CLICK     = "cta_click"


# ── ORM ────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


class LandingPageDB(Base):
    __tablename__ = "landing_pages"
    id:               Mapped[str]                = mapped_column(sa.String, primary_key=True, default=_uuid)
    slug:             Mapped[str]                = mapped_column(sa.String(64), unique=True, nullable=False, index=True)
    name:             Mapped[str]                = mapped_column(sa.String(128), nullable=False)
    status:           Mapped[str]                = mapped_column(sa.String, default=PageStatus.DRAFT.value)
    page_type:        Mapped[str]                = mapped_column(sa.String, default=PageType.APPRAISAL.value)
    meta_title:       Mapped[Optional[str]]      = mapped_column(sa.String(256), nullable=True)
    meta_description: Mapped[Optional[str]]      = mapped_column(sa.Text, nullable=True)
    sections:         Mapped[str]                = mapped_column(sa.Text, default="[]")
    form_flow:        Mapped[str]                = mapped_column(sa.Text, default='{"steps": []}')
    is_default:       Mapped[bool]               = mapped_column(sa.Boolean, default=False)
    published_at:     Mapped[Optional[datetime]] = mapped_column(sa.DateTime, nullable=True)
    views:            Mapped[int]                = mapped_column(sa.Integer, default=0)
    submissions:      Mapped[int]                = mapped_column(sa.Integer, default=0)
    created_at:       Mapped[datetime]           = mapped_column(sa.DateTime, default=datetime.utcnow)
    updated_at:       Mapped[datetime]           = mapped_column(sa.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class FormSubmissionDB(Base):
    __tablename__ = "form_submissions"
    id:              Mapped[str]           = mapped_column(sa.String, primary_key=True, default=_uuid)
    landing_page_id: Mapped[Optional[str]] = mapped_column(sa.String, sa.ForeignKey("landing_pages.id", ondelete="SET NULL"), nullable=True, index=True)
    page_type:       Mapped[str]           = mapped_column(sa.String, default=PageType.CUSTOM.value)
    email:           Mapped[Optional[str]] = mapped_column(sa.String(120), nullable=True)
    first_name:      Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    last_name:       Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    phone:           Mapped[Optional[str]] = mapped_column(sa.String(20), nullable=True)
    form_data:       Mapped[str]           = mapped_column(sa.Text, default="{}")
    utm_source:      Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    utm_medium:      Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    utm_campaign:    Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    referrer:        Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    ip_address:      Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    status:          Mapped[str]           = mapped_column(sa.String, default=LeadStatus.NEW.value)
    created_at:      Mapped[datetime]      = mapped_column(sa.DateTime, default=datetime.utcnow)


class AnalyticsEventDB(Base):
    __tablename__ = "analytics_events"
    id:              Mapped[str]           = mapped_column(sa.String, primary_key=True, default=_uuid)
    landing_page_id: Mapped[Optional[str]] = mapped_column(sa.String, nullable=True, index=True)
    session_id:      Mapped[Optional[str]] = mapped_column(sa.String(64), nullable=True)
    event_type:      Mapped[str]           = mapped_column(sa.String, nullable=False)
    event_data:      Mapped[str]           = mapped_column(sa.Text, default="{}")
    step_number:     Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)
    created_at:      Mapped[datetime]      = mapped_column(sa.DateTime, default=datetime.utcnow)


class BlockTemplateDB(Base):
    """Bloc configuré enregistré pour réutilisation dans le builder."""
    __tablename__ = "block_templates"
    id:             Mapped[str]      = mapped_column(sa.String, primary_key=True, default=_uuid)
    name:           Mapped[str]      = mapped_column(sa.String(128), nullable=False)
    category:       Mapped[str]      = mapped_column(sa.String(32), nullable=False, index=True)
    block_type:     Mapped[str]      = mapped_column(sa.String(64), nullable=False)
    default_config: Mapped[str]      = mapped_column(sa.Text, nullable=False)
    is_system:      Mapped[bool]     = mapped_column(sa.Boolean, default=False)
    created_at:     Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)


# ── PYDANTIC (API) ─────────────────────────────────────────────────────

SLUG_PATTERN = r"^[a-z0-9-]+$"


class LandingPageCreate(CamelModel):
    slug:             str                 = Field(min_length=1, max_length=64, pattern=SLUG_PATTERN)
    name:             str                 = Field(min_length=1, max_length=128)
    status:           PageStatus          = PageStatus.DRAFT
    page_type:        PageType            = PageType.APPRAISAL
    meta_title:       Optional[str]       = Field(default=None, max_length=256)
    meta_description: Optional[str]       = None
    sections:         Optional[List[PageSection]] = None
    form_flow:        Optional[FormFlow]  = None
    is_default:       Optional[bool]      = None
    from_template:    bool                = False   # document vide → template du page_type


class LandingPageUpdate(CamelModel):
    slug:             Optional[str]       = Field(default=None, min_length=1, max_length=64, pattern=SLUG_PATTERN)
    name:             Optional[str]       = Field(default=None, min_length=1, max_length=128)
    status:           Optional[PageStatus] = None
    page_type:        Optional[PageType]  = None
    meta_title:       Optional[str]       = Field(default=None, max_length=256)
    meta_description: Optional[str]       = None
    sections:         Optional[List[PageSection]] = None
    form_flow:        Optional[FormFlow]  = None
    is_default:       Optional[bool]      = None


class LandingPageOut(CamelModel):
    id:               str
    slug:             str
    name:             str
    status:           str
    page_type:        str
    meta_title:       Optional[str] = None
    meta_description: Optional[str] = None
    sections:         List[PageSection]
    form_flow:        FormFlow
    is_default:       bool = False
    published_at:     Optional[datetime] = None
    views:            int = 0
    submissions:      int = 0
    created_at:       Optional[datetime] = None
    updated_at:       Optional[datetime] = None


class SubmissionCreate(CamelModel):
    """
    Corps de POST /api/submissions. Forme « contact + formData » ou valeurs
    à plat (pages appraisal) : les clés non déclarées rejoignent formData.
    """
    model_config = CamelModel.model_config | {"extra": "allow"}

    landing_page_id: Optional[str] = None
    page_type:       Optional[PageType] = None
    email:           Optional[str] = Field(default=None, max_length=120)
    first_name:      Optional[str] = Field(default=None, max_length=64)
    last_name:       Optional[str] = Field(default=None, max_length=64)
    phone:           Optional[str] = Field(default=None, max_length=20)
    form_data:       Dict[str, Any] = Field(default_factory=dict)
    utm_source:      Optional[str] = None
    utm_medium:      Optional[str] = None
    utm_campaign:    Optional[str] = None
    referrer:        Optional[str] = None

    def values(self) -> Dict[str, Any]:
        """Toutes les valeurs du formulaire, clés = fieldName."""
        merged: Dict[str, Any] = dict(self.model_extra or {})
        for key, val in (("email", self.email), ("firstName", self.first_name),
                         ("lastName", self.last_name), ("phone", self.phone)):
            if val is not None:
                merged[key] = val
        merged.update(self.form_data)
        return merged


class SubmissionStatusUpdate(CamelModel):
    status: LeadStatus


class AnalyticsEventIn(CamelModel):
    landing_page_id: Optional[str] = None
    session_id:      Optional[str] = Field(default=None, max_length=64)
    event_type:      EventType
    event_data:      Optional[Dict[str, Any]] = None
    step_number:     Optional[int] = Field(default=None, ge=1, le=10)


class BlockTemplateCreate(CamelModel):
    name:           str           = Field(min_length=1, max_length=128)
    category:       BlockCategory
    block_type:     str           = Field(min_length=1, max_length=64)
    default_config: BlockConfig
    is_system:      bool          = False

    @model_validator(mode="after")
    def _config_matches_type(self):
        if self.default_config.type != self.block_type:
            raise ValueError("defaultConfig.type must match blockType")
        return self
