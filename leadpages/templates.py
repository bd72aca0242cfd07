"""
Templates de page par type : sections de départ + formulaire prêt à publier.
Chaque appel construit un document neuf (ids de blocs uniques dans le template).
"""
from typing import Callable, Dict, List

from .core.schemas import BlockConfig, CamelModel, FormFlow, FormStep, PageDocument, PageSection
from .flow.legacy import build_appraisal_flow

PAGE_TYPES = ("appraisal", "lead_magnet", "newsletter", "webinar", "inquiry", "custom")


class PageTemplate(CamelModel):
    page_type:           str
    name:                str
    description:         str
    default_slug_prefix: str
    document:            PageDocument


class _Ids:
    """Ids « {type}-tpl-{n} », compteur propre à chaque template."""

    def __init__(self):
        self.n = 0

    def __call__(self, block_type: str) -> str:
        self.n += 1
        return f"{block_type}-tpl-{self.n}"


def _section(section_id: str, name: str, *blocks: BlockConfig) -> PageSection:
    return PageSection(id=section_id, name=name, blocks=list(blocks))


def _b(ids: _Ids, block_type: str, **props) -> BlockConfig:
    return BlockConfig(id=ids(block_type), type=block_type, props=props)


def _hero(ids: _Ids, headline: str, sub: str) -> PageSection:
    return _section(
        "hero", "Hero",
        _b(ids, "headline", text=headline, level="h1", align="center"),
        _b(ids, "subheadline", text=sub, align="center"),
    )


def _stats(ids: _Ids, *pairs) -> BlockConfig:
    return _b(ids, "stats-bar", columns=len(pairs) // 2,
              stats=[{"value": pairs[i], "label": pairs[i + 1]} for i in range(0, len(pairs), 2)])


def _badges(ids: _Ids, *texts: str) -> BlockConfig:
    return _b(ids, "trust-badges", columns=len(texts),
              badges=[{"icon": "check", "text": t} for t in texts])


def _contact(ids: _Ids, label: str, placeholder: str, field: str, required: bool = True,
             block_type: str = "text-input") -> BlockConfig:
    return _b(ids, block_type, label=label, placeholder=placeholder, required=required, fieldName=field)


# ── Templates ───────────────────────────────────────────────────────────────

def _appraisal() -> PageTemplate:
    ids = _Ids()
    sections = [
        _section("hero", "Hero", _b(ids, "hero-image", imageUrl="", overlayOpacity=40, height="sm")),
        _section("social-proof", "Social Proof", _stats(
            ids, "2,500+", "Properties Appraised", "15+", "Years Experience", "98%", "Happy Clients")),
        _section("trust", "Trust", _badges(
            ids, "Free, no-obligation", "Delivered within 24 hours", "Local suburb expert")),
    ]
    return PageTemplate(
        page_type="appraisal",
        name="Property Appraisal",
        description="Multi-step property appraisal request form with address finder, "
                    "relationship, timeline, and contact details.",
        default_slug_prefix="appraisal",
        document=PageDocument(sections=sections, form_flow=build_appraisal_flow(ids)),
    )


def _lead_magnet() -> PageTemplate:
    ids = _Ids()
    sections = [
        _hero(ids, "Free Guide: How to Maximize Your Property Value",
              "Download our expert guide with 10 proven strategies to increase your home's value before selling."),
        _section("benefits", "Benefits", _b(
            ids, "body-text",
            content="In this guide you'll learn:\n\n"
                    "The top renovations that add the most value.\n\n"
                    "How to present your property for maximum appeal.\n\n"
                    "Market timing strategies from local experts.\n\n"
                    "Common mistakes sellers make (and how to avoid them).",
        )),
        _section("trust", "Trust", _badges(ids, "Instant download", "No spam, ever", "Expert advice")),
    ]
    flow = FormFlow(
        steps=[FormStep(
            id="capture",
            title="Get Your Free Guide",
            description="Enter your details below and we'll send it straight to your inbox.",
            layout="single",
            blocks=[
                _contact(ids, "First Name", "John", "firstName"),
                _contact(ids, "Email Address", "john@example.com", "email", block_type="email-input"),
                _b(ids, "checkbox", label="I'd like to receive property market updates and tips.",
                   required=False, fieldName="marketingConsent", linkText="", linkUrl=""),
            ],
        )],
        submit_button_text="Download Free Guide",
        success_title="Check Your Inbox!",
        success_message="Your guide is on its way. Check your email for the download link.",
    )
    return PageTemplate(
        page_type="lead_magnet",
        name="Lead Magnet / Download",
        description="Offer a free guide, report, or resource in exchange for contact details.",
        default_slug_prefix="download",
        document=PageDocument(sections=sections, form_flow=flow),
    )


def _newsletter() -> PageTemplate:
    ids = _Ids()
    sections = [
        _hero(ids, "Stay Ahead of the Property Market",
              "Get weekly insights on property values, market trends, and expert tips delivered to your inbox."),
        _section("social-proof", "Social Proof", _stats(
            ids, "5,000+", "Subscribers", "200+", "Weekly Issues", "45%", "Open Rate")),
    ]
    flow = FormFlow(
        steps=[FormStep(
            id="subscribe",
            title="Subscribe to Our Newsletter",
            blocks=[
                _contact(ids, "First Name", "John", "firstName", required=False),
                _contact(ids, "Email Address", "john@example.com", "email", block_type="email-input"),
            ],
        )],
        submit_button_text="Subscribe Now",
        success_title="You're Subscribed!",
        success_message="Welcome aboard. You'll receive your first update this week.",
    )
    return PageTemplate(
        page_type="newsletter",
        name="Newsletter Signup",
        description="Simple email capture for newsletter or market update subscriptions.",
        default_slug_prefix="subscribe",
        document=PageDocument(sections=sections, form_flow=flow),
    )


def _webinar() -> PageTemplate:
    ids = _Ids()
    sections = [
        _hero(ids, "Free Webinar: 2026 Property Market Outlook",
              "Join our expert panel to learn what's ahead for the NZ property market "
              "and how to position yourself for success."),
        _section("details", "Event Details", _b(
            ids, "body-text",
            content="When: Thursday, March 15 at 7:00 PM NZST\n\n"
                    "Duration: 45 minutes + Q&A\n\n"
                    "Where: Online via Zoom (link sent after registration)\n\n"
                    "Cost: Free",
        )),
        _section("speakers", "Speakers", _b(
            ids, "agent-card", name="Your Agent Name", title="Senior Property Consultant",
            experience="15+ years of experience in the local property market.",
            phone="", email="", achievements=[],
        )),
    ]
    flow = FormFlow(
        steps=[FormStep(
            id="register",
            title="Reserve Your Spot",
            description="Limited places available. Register now to secure yours.",
            layout="two-column",
            blocks=[
                _contact(ids, "First Name", "John", "firstName"),
                _contact(ids, "Last Name", "Smith", "lastName"),
                _contact(ids, "Email Address", "john@example.com", "email", block_type="email-input"),
                _contact(ids, "Phone Number", "021 123 4567", "phone", required=False, block_type="phone-input"),
            ],
        )],
        submit_button_text="Register Now",
        success_title="You're Registered!",
        success_message="Check your email for the webinar link and calendar invite.",
    )
    return PageTemplate(
        page_type="webinar",
        name="Webinar / Event Registration",
        description="Registration page for webinars, open homes, seminars, or community events.",
        default_slug_prefix="register",
        document=PageDocument(sections=sections, form_flow=flow),
    )


def _inquiry() -> PageTemplate:
    ids = _Ids()
    sections = [
        _hero(ids, "Professional Property Management You Can Trust",
              "Let us handle the hard work while you enjoy reliable rental income and peace of mind."),
        _section("benefits", "Benefits", _stats(
            ids, "500+", "Properties Managed", "98%", "Average Occupancy", "95%", "Client Retention")),
    ]
    flow = FormFlow(
        steps=[
            FormStep(
                id="property",
                title="Tell Us About Your Property",
                blocks=[
                    _b(ids, "address-finder", label="Property Address",
                       placeholder="Start typing your property address...", required=True, fieldName="addressFull"),
                    _b(ids, "radio-cards", fieldName="propertyType", columns=2, required=True, autoAdvance=True,
                       options=[
                           {"value": "house", "label": "House", "icon": "Home"},
                           {"value": "apartment", "label": "Apartment", "icon": "Building"},
                           {"value": "townhouse", "label": "Townhouse", "icon": "Building2"},
                           {"value": "other", "label": "Other", "icon": "MoreHorizontal"},
                       ]),
                ],
            ),
            FormStep(
                id="contact",
                title="How Can We Reach You?",
                layout="two-column",
                blocks=[
                    _contact(ids, "First Name", "John", "firstName"),
                    _contact(ids, "Last Name", "Smith", "lastName"),
                    _contact(ids, "Email Address", "john@example.com", "email", block_type="email-input"),
                    _contact(ids, "Phone Number", "021 123 4567", "phone", block_type="phone-input"),
                ],
            ),
        ],
        submit_button_text="Get a Free Consultation",
        success_title="Thank You!",
        success_message="One of our property managers will be in touch within 24 hours.",
    )
    return PageTemplate(
        page_type="inquiry",
        name="Property Management Inquiry",
        description="Capture property management inquiries from landlords and investors.",
        default_slug_prefix="pm-inquiry",
        document=PageDocument(sections=sections, form_flow=flow),
    )


def _custom() -> PageTemplate:
    ids = _Ids()
    flow = FormFlow(
        steps=[FormStep(
            id="contact",
            title="Get in Touch",
            blocks=[
                _contact(ids, "Name", "Your name", "firstName"),
                _contact(ids, "Email", "you@example.com", "email", block_type="email-input"),
            ],
        )],
        submit_button_text="Submit",
        success_title="Thank You!",
        success_message="We've received your submission and will be in touch soon.",
    )
    return PageTemplate(
        page_type="custom",
        name="Custom Form",
        description="Start with a blank canvas and build your own landing page and form flow.",
        default_slug_prefix="page",
        document=PageDocument(
            sections=[_hero(ids, "Your Headline Here", "Add a compelling subheadline that explains your offer.")],
            form_flow=flow,
        ),
    )


_BUILDERS: Dict[str, Callable[[], PageTemplate]] = {
    "appraisal":   _appraisal,
    "lead_magnet": _lead_magnet,
    "newsletter":  _newsletter,
    "webinar":     _webinar,
    "inquiry":     _inquiry,
    "custom":      _custom,
}


def get_page_template(page_type: str) -> PageTemplate:
    """Template du type demandé. KeyError si le type est inconnu."""
    return _BUILDERS[page_type]()


def get_all_page_templates() -> List[PageTemplate]:
    return [build() for build in _BUILDERS.values()]
