"""Blocs de contenu : titre, sous-titre, texte, image hero, espacement."""
from typing import Literal, Optional

from .base import (
    ALIGN_OPTIONS, MAX_WIDTH_OPTIONS, Align, BlockProps, MaxWidth,
    attrs, classes, esc, options, prop, style,
)
from .registry import BlockContext, BlockMetadata, block_registry


class HeadlineProps(BlockProps):
    text:      str = "Your Headline Here"
    level:     Literal["h1", "h2", "h3"] = "h1"
    align:     Align = "center"
    color:     Optional[str] = None
    max_width: MaxWidth = "lg"


class SubheadlineProps(BlockProps):
    text:      str = "Your subheadline text goes here"
    align:     Align = "center"
    color:     Optional[str] = None
    max_width: MaxWidth = "lg"


class BodyTextProps(BlockProps):
    content:   str = ("Your body text content goes here. "
                      "This block supports multiple paragraphs and basic formatting.")
    align:     Align = "left"
    max_width: MaxWidth = "lg"
    prose:     bool = True


class HeroImageProps(BlockProps):
    image_url:       str = ""
    alt_text:        Optional[str] = "Hero image"
    height:          Literal["sm", "md", "lg", "xl", "full"] = "lg"
    overlay:         bool = True
    overlay_opacity: int = 30
    object_position: Literal["top", "center", "bottom"] = "center"


class SpacerProps(BlockProps):
    height:         Literal["xs", "sm", "md", "lg", "xl", "2xl"] = "md"
    hide_on_mobile: bool = False


# ── Renderers ───────────────────────────────────────────────────────────────

def render_headline(ctx: BlockContext) -> str:
    p: HeadlineProps = ctx.props
    css = classes("headline", f"headline--{p.level}", f"text-{p.align}", f"max-w-{p.max_width}")
    return f'<{p.level} class="{css}"{style({"color": p.color})}>{esc(p.text)}</{p.level}>'


def render_subheadline(ctx: BlockContext) -> str:
    p: SubheadlineProps = ctx.props
    css = classes("subheadline", f"text-{p.align}", f"max-w-{p.max_width}")
    return f'<p class="{css}"{style({"color": p.color})}>{esc(p.text)}</p>'


def render_body_text(ctx: BlockContext) -> str:
    p: BodyTextProps = ctx.props
    # Un paragraphe par bloc de texte séparé par une ligne vide
    paragraphs = [part.strip() for part in p.content.split("\n\n") if part.strip()]
    inner = "\n  ".join(f"<p>{esc(part)}</p>" for part in paragraphs)
    css = classes("body-text", "body-text--prose" if p.prose else None, f"text-{p.align}", f"max-w-{p.max_width}")
    return f'<div class="{css}">\n  {inner}\n</div>'


def render_hero_image(ctx: BlockContext) -> str:
    p: HeroImageProps = ctx.props
    css = classes("hero-image", f"hero-image--{p.height}")
    if not p.image_url:
        # Rien à afficher en live ; l'éditeur montre un emplacement vide
        if not ctx.editing:
            return ""
        return f'<div class="{css} hero-image--empty">No image selected</div>'
    overlay = ""
    if p.overlay:
        overlay = f'\n  <div class="hero-image__overlay" style="background:rgba(0,0,0,{p.overlay_opacity / 100:g})"></div>'
    img = "<img" + attrs(
        src=p.image_url, alt=p.alt_text or "", class_="hero-image__img",
        style=f"object-position:{p.object_position}", loading="eager",
    ) + ">"
    return f'<div class="{css}">\n  {img}{overlay}\n</div>'


def render_spacer(ctx: BlockContext) -> str:
    p: SpacerProps = ctx.props
    css = classes("spacer", f"spacer--{p.height}", "spacer--hide-mobile" if p.hide_on_mobile else None)
    return f'<div class="{css}" aria-hidden="true"></div>'


# ── Enregistrement ──────────────────────────────────────────────────────────

block_registry.register("headline", render_headline, BlockMetadata(
    name="Headline",
    description="Main headline text with customizable size and alignment",
    category="content",
    icon="Type",
    props_schema=[
        prop("text", "Text", required=True),
        prop("level", "Heading Level", "select",
             options=options("h1", "H1 (Largest)", "h2", "H2", "h3", "H3"), default="h1"),
        prop("align", "Alignment", "select", options=ALIGN_OPTIONS, default="center"),
        prop("color", "Color", "color"),
        prop("maxWidth", "Max Width", "select", options=MAX_WIDTH_OPTIONS, default="lg"),
    ],
), HeadlineProps)

block_registry.register("subheadline", render_subheadline, BlockMetadata(
    name="Subheadline",
    description="Supporting text below headlines",
    category="content",
    icon="Text",
    props_schema=[
        prop("text", "Text", "textarea", required=True),
        prop("align", "Alignment", "select", options=ALIGN_OPTIONS, default="center"),
        prop("color", "Color", "color"),
        prop("maxWidth", "Max Width", "select", options=MAX_WIDTH_OPTIONS, default="lg"),
    ],
), SubheadlineProps)

block_registry.register("body-text", render_body_text, BlockMetadata(
    name="Body Text",
    description="Paragraph text content with rich formatting support",
    category="content",
    icon="AlignLeft",
    props_schema=[
        prop("content", "Content", "textarea", required=True),
        prop("align", "Alignment", "select", options=ALIGN_OPTIONS, default="left"),
        prop("maxWidth", "Max Width", "select", options=MAX_WIDTH_OPTIONS, default="lg"),
        prop("prose", "Enable Rich Text Styling", "boolean", default=True),
    ],
), BodyTextProps)

block_registry.register("hero-image", render_hero_image, BlockMetadata(
    name="Hero Image",
    description="Full-width hero image with optional overlay",
    category="content",
    icon="Image",
    props_schema=[
        prop("imageUrl", "Image URL", "image", required=True),
        prop("altText", "Alt Text"),
        prop("height", "Height", "select", options=options(
            "sm", "Small (300px)", "md", "Medium (400px)", "lg", "Large (500px)",
            "xl", "Extra Large (600px)", "full", "Full Screen",
        ), default="lg"),
        prop("overlay", "Show Overlay", "boolean", default=True),
        prop("overlayOpacity", "Overlay Opacity (%)", "number", default=30),
        prop("objectPosition", "Image Position", "select",
             options=options("top", "Top", "center", "Center", "bottom", "Bottom"), default="center"),
    ],
), HeroImageProps)

block_registry.register("spacer", render_spacer, BlockMetadata(
    name="Spacer",
    description="Add vertical spacing between elements",
    category="content",
    icon="Space",
    props_schema=[
        prop("height", "Height", "select", options=options(
            "xs", "Extra Small (16px)", "sm", "Small (32px)", "md", "Medium (48px)",
            "lg", "Large (64px)", "xl", "Extra Large (96px)", "2xl", "2X Large (128px)",
        ), default="md"),
        prop("hideOnMobile", "Hide on Mobile", "boolean", default=False),
    ],
), SpacerProps)
