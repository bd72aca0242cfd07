"""
Parcours d'estimation historique (4 étapes fixes) : adresse → relation → délai → contact.

Exprimé comme un FormFlow statique : même moteur, mêmes règles de validation
et de navigation que les formulaires configurés.
"""
from typing import List, Optional, Tuple

from ..core.schemas import BlockConfig, FormFlow, FormStep, PageSection
from .engine import FormFlowEngine

RELATIONSHIP_OPTIONS = [
    {"value": "owner",    "label": "Owner Occupier",  "description": "I live in this property",    "icon": "Home"},
    {"value": "investor", "label": "Investor Owner",  "description": "I own but don't live here",  "icon": "Building"},
    {"value": "buyer",    "label": "Potential Buyer", "description": "I'm looking to buy",         "icon": "Key"},
    {"value": "tenant",   "label": "Tenant",          "description": "I'm renting this property",  "icon": "ClipboardList"},
]

TIMELINE_OPTIONS = [
    {"value": "asap",        "label": "As soon as possible", "description": "Ready to move now",     "icon": "Zap"},
    {"value": "1-3months",   "label": "1-3 months",          "description": "Planning to list soon", "icon": "Calendar"},
    {"value": "3-6months",   "label": "3-6 months",          "description": "Getting prepared",      "icon": "CalendarDays"},
    {"value": "justlooking", "label": "Just curious",        "description": "No immediate plans",    "icon": "HelpCircle"},
]

LEGACY_FIELDS = ("addressFull", "relationship", "timeline", "firstName", "lastName", "email", "phone", "consent")


def _block(block_id: str, block_type: str, **props) -> BlockConfig:
    return BlockConfig(id=block_id, type=block_type, props=props)


def build_appraisal_flow(next_id=None) -> FormFlow:
    """
    Le parcours d'estimation. `next_id(type)` fournit les ids de blocs
    (ids fixes « legacy-* » par défaut).
    """
    ids = iter(("legacy-address", "legacy-relationship", "legacy-timeline", "legacy-first-name",
                "legacy-last-name", "legacy-email", "legacy-phone", "legacy-consent"))
    bid = next_id or (lambda _type: next(ids))

    return FormFlow(
        steps=[
            FormStep(
                id="address",
                title="What's Your Home Worth in Today's Market?",
                description="Get a free, no-obligation property appraisal from a local expert.",
                blocks=[_block(bid("address-finder"), "address-finder", label="",
                               placeholder="Start typing your property address...",
                               required=True, fieldName="addressFull")],
            ),
            FormStep(
                id="relationship",
                title="What's your relationship to this property?",
                blocks=[_block(bid("radio-cards"), "radio-cards", fieldName="relationship", columns=2,
                               required=True, autoAdvance=True, options=RELATIONSHIP_OPTIONS)],
            ),
            FormStep(
                id="timeline",
                title="When are you thinking of selling?",
                blocks=[_block(bid("radio-cards"), "radio-cards", fieldName="timeline", columns=2,
                               required=True, autoAdvance=True, options=TIMELINE_OPTIONS)],
            ),
            FormStep(
                id="contact",
                title="Almost there! Where should we send your appraisal?",
                layout="two-column",
                blocks=[
                    _block(bid("text-input"), "text-input", label="First Name", placeholder="John",
                           required=True, fieldName="firstName"),
                    _block(bid("text-input"), "text-input", label="Last Name", placeholder="Smith",
                           required=True, fieldName="lastName"),
                    _block(bid("email-input"), "email-input", label="Email Address",
                           placeholder="john@example.com", required=True, fieldName="email"),
                    _block(bid("phone-input"), "phone-input", label="Phone Number",
                           placeholder="021 123 4567", required=True, fieldName="phone"),
                    _block(bid("checkbox"), "checkbox",
                           label="I agree to the privacy policy and consent to being contacted "
                                 "about my property appraisal.",
                           required=True, fieldName="consent",
                           linkText="privacy policy", linkUrl="/privacy"),
                ],
            ),
        ],
        submit_button_text="Get My Free Appraisal",
        success_title="Thank You!",
        success_message="We'll be in touch within 24 hours with your property appraisal.",
    )


LEGACY_APPRAISAL_FLOW = build_appraisal_flow()


def create_legacy_engine(**kwargs) -> FormFlowEngine:
    """Moteur sur une copie du parcours historique (kwargs → FormFlowEngine)."""
    return FormFlowEngine(LEGACY_APPRAISAL_FLOW.model_copy(deep=True), **kwargs)


# ── Section « form » ────────────────────────────────────────────────────────

def _is_form_section(section: PageSection) -> bool:
    return section.id == "form" or "form" in (section.name or "").lower()


def find_form_section(sections: List[PageSection]) -> Optional[PageSection]:
    """Section dont l'id vaut « form » ou dont le nom contient « form »."""
    for section in sections:
        if _is_form_section(section):
            return section
    return None


def split_at_form_section(
    sections: List[PageSection],
) -> Tuple[List[PageSection], Optional[PageSection], List[PageSection]]:
    """(sections avant, section form, sections après) ; sans section form : (toutes, None, [])."""
    for i, section in enumerate(sections):
        if _is_form_section(section):
            return sections[:i], section, sections[i + 1:]
    return list(sections), None, []
