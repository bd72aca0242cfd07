"""Blocs de conversion : bouton CTA, barre de progression, badges de confiance."""
from typing import List, Literal, Optional

from pydantic import Field

from .base import BlockProps, CamelModel, attrs, classes, esc, options, prop
from .registry import BlockContext, BlockMetadata, block_registry


class CtaButtonProps(BlockProps):
    text:          str = "Get Your Free Appraisal"
    action:        Literal["scroll", "link", "phone", "email", "submit"] = "scroll"
    href:          Optional[str] = None
    scroll_to:     Optional[str] = "appraisal-form"
    size:          Literal["sm", "md", "lg", "xl"] = "lg"
    variant:       Literal["primary", "secondary", "outline", "ghost"] = "primary"
    full_width:    bool = False
    icon:          Literal["none", "arrow", "chevron", "phone", "mail", "calendar"] = "arrow"
    icon_position: Literal["left", "right"] = "right"
    animate:       bool = True


class ProgressBarProps(BlockProps):
    current:         int = 1
    total:           int = 4
    show_labels:     bool = True
    show_percentage: bool = False
    variant:         Literal["default", "stepped", "dots"] = "default"
    size:            Literal["sm", "md", "lg"] = "md"
    animated:        bool = True


class TrustBadge(CamelModel):
    icon: str
    text: str


class TrustBadgesProps(BlockProps):
    badges:    List[TrustBadge] = Field(default_factory=lambda: [
        TrustBadge(icon="shield", text="Licensed & Insured"),
        TrustBadge(icon="star", text="5-Star Reviews"),
        TrustBadge(icon="clock", text="Quick Response"),
        TrustBadge(icon="award", text="Award Winning"),
    ])
    variant:   Literal["default", "compact", "pills"] = "default"
    alignment: Literal["left", "center", "right"] = "center"
    columns:   Literal[2, 3, 4, 6] = 4


# ── Renderers ───────────────────────────────────────────────────────────────

def cta_href(p: CtaButtonProps) -> Optional[str]:
    """Cible du lien selon l'action (None pour submit)."""
    if p.action == "scroll":
        return f"#{p.scroll_to}" if p.scroll_to else "#"
    if p.action == "phone":
        return f"tel:{p.href or ''}"
    if p.action == "email":
        return f"mailto:{p.href or ''}"
    if p.action == "link":
        return p.href or "#"
    return None


def render_cta_button(ctx: BlockContext) -> str:
    p: CtaButtonProps = ctx.props
    css = classes(
        "cta-button", f"cta-button--{p.variant}", f"cta-button--{p.size}",
        "cta-button--full" if p.full_width else None,
        "cta-button--animate" if p.animate and not ctx.editing else None,
    )
    icon = f'<span class="cta-button__icon cta-button__icon--{p.icon}" aria-hidden="true"></span>' if p.icon != "none" else ""
    label = f"{icon}{esc(p.text)}" if p.icon_position == "left" else f"{esc(p.text)}{icon}"
    # data-cta-id : point d'accroche du suivi des clics CTA
    hook = attrs(data_cta_id=ctx.id, data_cta_text=p.text)
    if p.action == "submit":
        return f'<button type="submit" class="{css}"{hook}{attrs(disabled=ctx.editing)}>{label}</button>'
    target = attrs(target="_blank", rel="noopener noreferrer") if p.action == "link" else ""
    return f'<a class="{css}" href="{esc(cta_href(p))}"{target}{hook}>{label}</a>'


def render_progress_bar(ctx: BlockContext) -> str:
    p: ProgressBarProps = ctx.props
    # En live, la barre suit le moteur de formulaire quand il est disponible
    current = getattr(ctx.form, "current_step", None) or p.current
    total   = getattr(ctx.form, "total_steps", None) or p.total
    total   = max(total, 1)
    current = min(max(current, 1), total)
    pct = round(current / total * 100)
    labels = ""
    if p.show_labels:
        labels = f'\n  <div class="progress-bar__labels"><span>Step {current} of {total}</span>'
        labels += f"<span>{pct}%</span></div>" if p.show_percentage else "</div>"
    if p.variant == "default":
        track = f'<div class="progress-bar__track"><div class="progress-bar__fill" style="width:{pct}%"></div></div>'
    else:
        marks = "".join(
            f'<span class="progress-bar__{"dot" if p.variant == "dots" else "step"}'
            f'{" is-done" if i <= current else ""}"></span>'
            for i in range(1, total + 1)
        )
        track = f'<div class="progress-bar__track">{marks}</div>'
    css = classes("progress-bar", f"progress-bar--{p.variant}", f"progress-bar--{p.size}",
                  "progress-bar--animated" if p.animated and not ctx.editing else None)
    return (f'<div class="{css}" role="progressbar" aria-valuemin="1" aria-valuemax="{total}" '
            f'aria-valuenow="{current}">\n  {track}{labels}\n</div>')


def render_trust_badges(ctx: BlockContext) -> str:
    p: TrustBadgesProps = ctx.props
    items = "".join(
        f'<li class="trust-badges__item"><span class="trust-badges__icon" data-icon="{esc(b.icon)}"></span>{esc(b.text)}</li>'
        for b in p.badges
    )
    css = classes("trust-badges", f"trust-badges--{p.variant}", f"text-{p.alignment}", f"trust-badges--cols-{p.columns}")
    return f'<ul class="{css}">{items}</ul>'


# ── Enregistrement ──────────────────────────────────────────────────────────

block_registry.register("cta-button", render_cta_button, BlockMetadata(
    name="CTA Button",
    description="Call-to-action button with multiple styles",
    category="conversion",
    icon="MousePointerClick",
    props_schema=[
        prop("text", "Button Text", required=True),
        prop("action", "Action", "select", options=options(
            "scroll", "Scroll to Section", "link", "External Link", "phone", "Phone Call",
            "email", "Email", "submit", "Submit Form",
        ), default="scroll"),
        prop("href", "Link/Phone/Email"),
        prop("scrollTo", "Scroll Target ID", default="appraisal-form"),
        prop("size", "Size", "select",
             options=options("sm", "Small", "md", "Medium", "lg", "Large", "xl", "Extra Large"), default="lg"),
        prop("variant", "Style", "select", options=options(
            "primary", "Primary", "secondary", "Secondary", "outline", "Outline", "ghost", "Ghost",
        ), default="primary"),
        prop("fullWidth", "Full Width", "boolean", default=False),
        prop("icon", "Icon", "select", options=options(
            "none", "None", "arrow", "Arrow", "chevron", "Chevron", "phone", "Phone",
            "mail", "Mail", "calendar", "Calendar",
        ), default="arrow"),
        prop("iconPosition", "Icon Position", "select",
             options=options("left", "Left", "right", "Right"), default="right"),
        prop("animate", "Animate", "boolean", default=True),
    ],
), CtaButtonProps)

block_registry.register("progress-bar", render_progress_bar, BlockMetadata(
    name="Progress Bar",
    description="Visual progress indicator for multi-step forms",
    category="conversion",
    icon="Loader",
    props_schema=[
        prop("current", "Current Step", "number", default=1),
        prop("total", "Total Steps", "number", default=4),
        prop("showLabels", "Show Labels", "boolean", default=True),
        prop("showPercentage", "Show Percentage", "boolean", default=False),
        prop("variant", "Style", "select",
             options=options("default", "Continuous", "stepped", "Stepped", "dots", "Dots"), default="default"),
        prop("size", "Size", "select", options=options("sm", "Small", "md", "Medium", "lg", "Large"), default="md"),
        prop("animated", "Animated", "boolean", default=True),
    ],
), ProgressBarProps)

block_registry.register("trust-badges", render_trust_badges, BlockMetadata(
    name="Trust Badges",
    description="Display trust indicators and certifications",
    category="conversion",
    icon="Shield",
    props_schema=[
        prop("badges", "Badges", "array"),
        prop("variant", "Style", "select",
             options=options("default", "Grid", "compact", "Compact", "pills", "Pills"), default="default"),
        prop("alignment", "Alignment", "select",
             options=options("left", "Left", "center", "Center", "right", "Right"), default="center"),
        prop("columns", "Columns", "select",
             options=options(2, "2 Columns", 3, "3 Columns", 4, "4 Columns", 6, "6 Columns"), default=4),
    ],
), TrustBadgesProps)
