"""Blocs de réassurance : statistiques, témoignage, fiche agent."""
from typing import List, Literal, Optional

from pydantic import Field

from .base import BlockProps, CamelModel, attrs, classes, esc, options, prop
from .registry import BlockContext, BlockMetadata, block_registry


class StatItem(CamelModel):
    value:  str
    label:  str
    prefix: Optional[str] = None
    suffix: Optional[str] = None


class StatsBarProps(BlockProps):
    stats:    List[StatItem] = Field(default_factory=lambda: [
        StatItem(value="500+", label="Homes Sold"),
        StatItem(value="$1.2M", label="Avg Sale Price"),
        StatItem(value="14", label="Days on Market"),
        StatItem(value="98%", label="Client Satisfaction"),
    ])
    columns:  Literal[2, 3, 4] = 4
    animated: bool = True
    variant:  Literal["default", "bordered", "cards"] = "default"


class TestimonialCardProps(BlockProps):
    quote:           str = "This is an amazing testimonial quote that shows how great your service is!"
    author_name:     str = "John Smith"
    author_role:     Optional[str] = "Homeowner"
    author_image:    Optional[str] = None
    rating:          Literal[1, 2, 3, 4, 5] = 5
    show_quote_icon: bool = True
    variant:         Literal["default", "highlighted", "minimal"] = "default"


class AgentCardProps(BlockProps):
    name:         str = "John Cooper"
    title:        str = "Senior Sales Consultant"
    photo:        Optional[str] = None
    phone:        Optional[str] = "021 123 4567"
    email:        Optional[str] = "john@cooperco.co.nz"
    experience:   Optional[str] = "15 years experience"
    achievements: List[str] = Field(default_factory=lambda: ["Top Performer 2023", "50+ Sales This Year"])
    variant:      Literal["default", "horizontal", "compact"] = "default"


# ── Renderers ───────────────────────────────────────────────────────────────

def render_stats_bar(ctx: BlockContext) -> str:
    p: StatsBarProps = ctx.props
    items = "\n    ".join(
        f'<div class="stats-bar__item">'
        f'<span class="stats-bar__value">{esc(s.prefix)}{esc(s.value)}{esc(s.suffix)}</span>'
        f'<span class="stats-bar__label">{esc(s.label)}</span></div>'
        for s in p.stats
    )
    css = classes("stats-bar", f"stats-bar--{p.variant}", f"stats-bar--cols-{p.columns}",
                  "stats-bar--animated" if p.animated and not ctx.editing else None)
    return f'<div class="{css}">\n    {items}\n</div>'


def render_testimonial_card(ctx: BlockContext) -> str:
    p: TestimonialCardProps = ctx.props
    stars = "★" * p.rating + "☆" * (5 - p.rating)
    quote_icon = '<span class="testimonial-card__quote-icon" aria-hidden="true">“</span>\n  ' if p.show_quote_icon else ""
    avatar = ""
    if p.author_image:
        avatar = "<img" + attrs(src=p.author_image, alt=p.author_name, class_="testimonial-card__avatar") + ">"
    role = f'<span class="testimonial-card__role">{esc(p.author_role)}</span>' if p.author_role else ""
    return f"""<figure class="testimonial-card testimonial-card--{p.variant}">
  {quote_icon}<div class="testimonial-card__rating" aria-label="{p.rating} out of 5">{stars}</div>
  <blockquote class="testimonial-card__quote">{esc(p.quote)}</blockquote>
  <figcaption class="testimonial-card__author">{avatar}<span class="testimonial-card__name">{esc(p.author_name)}</span>{role}</figcaption>
</figure>"""


def render_agent_card(ctx: BlockContext) -> str:
    p: AgentCardProps = ctx.props
    photo = "<img" + attrs(src=p.photo, alt=p.name, class_="agent-card__photo") + ">" if p.photo else (
        f'<div class="agent-card__initials">{esc("".join(w[0] for w in p.name.split() if w)[:2])}</div>'
    )
    contact = []
    if p.phone:
        tel = "".join(c for c in p.phone if c.isdigit() or c == "+")
        contact.append(f'<a class="agent-card__phone" href="tel:{esc(tel)}">{esc(p.phone)}</a>')
    if p.email:
        contact.append(f'<a class="agent-card__email" href="mailto:{esc(p.email)}">{esc(p.email)}</a>')
    achievements = ""
    if p.achievements and p.variant != "compact":
        li = "".join(f"<li>{esc(a)}</li>" for a in p.achievements)
        achievements = f'\n  <ul class="agent-card__achievements">{li}</ul>'
    experience = f'\n  <p class="agent-card__experience">{esc(p.experience)}</p>' if p.experience else ""
    return (
        f'<div class="agent-card agent-card--{p.variant}">\n'
        f'  {photo}\n'
        f'  <h3 class="agent-card__name">{esc(p.name)}</h3>\n'
        f'  <p class="agent-card__title">{esc(p.title)}</p>{experience}{achievements}\n'
        f'  <div class="agent-card__contact">{"".join(contact)}</div>\n'
        f'</div>'
    )


# ── Enregistrement ──────────────────────────────────────────────────────────

block_registry.register("stats-bar", render_stats_bar, BlockMetadata(
    name="Stats Bar",
    description="Display key statistics in a row",
    category="social-proof",
    icon="BarChart",
    props_schema=[
        prop("stats", "Statistics", "array"),
        prop("columns", "Columns", "select",
             options=options(2, "2 Columns", 3, "3 Columns", 4, "4 Columns"), default=4),
        prop("animated", "Animate on Scroll", "boolean", default=True),
        prop("variant", "Style", "select",
             options=options("default", "Default", "bordered", "Bordered", "cards", "Cards"), default="default"),
    ],
), StatsBarProps)

block_registry.register("testimonial-card", render_testimonial_card, BlockMetadata(
    name="Testimonial Card",
    description="Single testimonial with author info and rating",
    category="social-proof",
    icon="MessageSquare",
    props_schema=[
        prop("quote", "Quote", "textarea", required=True),
        prop("authorName", "Author Name", required=True),
        prop("authorRole", "Author Role"),
        prop("authorImage", "Author Image URL", "image"),
        prop("rating", "Rating (1-5)", "select",
             options=options(5, "5 Stars", 4, "4 Stars", 3, "3 Stars", 2, "2 Stars", 1, "1 Star"), default=5),
        prop("showQuoteIcon", "Show Quote Icon", "boolean", default=True),
        prop("variant", "Style", "select",
             options=options("default", "Default", "highlighted", "Highlighted", "minimal", "Minimal"),
             default="default"),
    ],
), TestimonialCardProps)

block_registry.register("agent-card", render_agent_card, BlockMetadata(
    name="Agent Card",
    description="Display agent profile with photo and contact info",
    category="social-proof",
    icon="User",
    props_schema=[
        prop("name", "Name", required=True),
        prop("title", "Title", required=True),
        prop("photo", "Photo URL", "image"),
        prop("phone", "Phone"),
        prop("email", "Email"),
        prop("experience", "Experience"),
        prop("achievements", "Achievements", "array"),
        prop("variant", "Style", "select",
             options=options("default", "Default (Centered)", "horizontal", "Horizontal", "compact", "Compact"),
             default="default"),
    ],
), AgentCardProps)
