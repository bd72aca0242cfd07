"""
Blocs de mise en page : conteneur, carte, colonnes.
Ils rendent leurs `children` via ctx.render_children (même mode, profondeur + 1).
"""
from typing import List, Literal

from pydantic import Field

from .base import BlockProps, classes, esc, options, prop
from .registry import BlockContext, BlockMetadata, block_registry

ColumnWidth = Literal["auto", "1/4", "1/3", "1/2", "2/3", "3/4"]

_EMPTY = '<div class="layout-empty">Drop blocks here</div>'


class ContainerProps(BlockProps):
    max_width:  Literal["sm", "md", "lg", "xl", "2xl", "full"] = "xl"
    padding:    Literal["none", "sm", "md", "lg", "xl"] = "md"
    background: Literal["transparent", "white", "gray", "primary", "gradient"] = "transparent"
    centered:   bool = True


class CardProps(BlockProps):
    variant: Literal["default", "elevated", "bordered", "ghost"] = "default"
    padding: Literal["none", "sm", "md", "lg"] = "md"
    rounded: Literal["none", "sm", "md", "lg", "xl", "2xl"] = "xl"
    hover:   bool = False


class ColumnsProps(BlockProps):
    """Une colonne par enfant ; `columns` donne la largeur de chacune."""
    columns:           List[ColumnWidth] = Field(default_factory=lambda: ["1/2", "1/2"])
    gap:               Literal["none", "sm", "md", "lg", "xl"] = "md"
    vertical_align:    Literal["top", "center", "bottom", "stretch"] = "top"
    stack_on_mobile:   bool = True
    reverse_on_mobile: bool = False


def _inner(ctx: BlockContext) -> str:
    inner = ctx.children_html()
    if not inner and ctx.editing:
        return _EMPTY
    return inner


def render_container(ctx: BlockContext) -> str:
    p: ContainerProps = ctx.props
    css = classes("container-block", f"max-w-{p.max_width}", f"pad-{p.padding}",
                  f"bg-{p.background}", "container-block--centered" if p.centered else None)
    return f'<div class="{css}">\n{_inner(ctx)}\n</div>'


def render_card(ctx: BlockContext) -> str:
    p: CardProps = ctx.props
    css = classes("card-block", f"card-block--{p.variant}", f"pad-{p.padding}",
                  f"rounded-{p.rounded}", "card-block--hover" if p.hover else None)
    return f'<div class="{css}">\n{_inner(ctx)}\n</div>'


def render_columns(ctx: BlockContext) -> str:
    p: ColumnsProps = ctx.props
    children = ctx.config.children or []
    if not children:
        return '<div class="columns-block columns-block--empty">No columns configured</div>' if ctx.editing else ""
    cols = []
    for i, child in enumerate(children):
        width = p.columns[i] if i < len(p.columns) else "auto"
        cols.append(
            f'  <div class="columns-block__col" data-width="{esc(width)}">\n'
            f'{ctx.children_html([child])}\n  </div>'
        )
    css = classes(
        "columns-block", f"gap-{p.gap}", f"align-{p.vertical_align}",
        "columns-block--stack" if p.stack_on_mobile else None,
        "columns-block--reverse" if p.reverse_on_mobile else None,
    )
    return f'<div class="{css}">\n' + "\n".join(cols) + "\n</div>"


# ── Enregistrement ──────────────────────────────────────────────────────────

_PADDING = options("none", "None", "sm", "Small", "md", "Medium", "lg", "Large")

block_registry.register("container", render_container, BlockMetadata(
    name="Container",
    description="Wrapper with max-width, padding, and background options",
    category="layout",
    icon="Square",
    props_schema=[
        prop("maxWidth", "Max Width", "select", options=options(
            "sm", "Small (640px)", "md", "Medium (768px)", "lg", "Large (1024px)",
            "xl", "Extra Large (1280px)", "2xl", "2X Large (1536px)", "full", "Full Width",
        ), default="xl"),
        prop("padding", "Padding", "select",
             options=_PADDING + options("xl", "Extra Large"), default="md"),
        prop("background", "Background", "select", options=options(
            "transparent", "Transparent", "white", "White", "gray", "Gray",
            "primary", "Primary Light", "gradient", "Gradient",
        ), default="transparent"),
        prop("centered", "Center Content", "boolean", default=True),
    ],
), ContainerProps)

block_registry.register("card", render_card, BlockMetadata(
    name="Card",
    description="Card wrapper with shadow and border options",
    category="layout",
    icon="CreditCard",
    props_schema=[
        prop("variant", "Style", "select", options=options(
            "default", "Default", "elevated", "Elevated", "bordered", "Bordered", "ghost", "Ghost",
        ), default="default"),
        prop("padding", "Padding", "select", options=_PADDING, default="md"),
        prop("rounded", "Border Radius", "select", options=options(
            "none", "None", "sm", "Small", "md", "Medium", "lg", "Large", "xl", "Extra Large", "2xl", "2X Large",
        ), default="xl"),
        prop("hover", "Hover Effect", "boolean", default=False),
    ],
), CardProps)

block_registry.register("columns", render_columns, BlockMetadata(
    name="Columns",
    description="Multi-column layout with flexible widths",
    category="layout",
    icon="Columns",
    props_schema=[
        prop("columns", "Column Widths", "array"),
        prop("gap", "Gap", "select", options=_PADDING + options("xl", "Extra Large"), default="md"),
        prop("verticalAlign", "Vertical Alignment", "select", options=options(
            "top", "Top", "center", "Center", "bottom", "Bottom", "stretch", "Stretch",
        ), default="top"),
        prop("stackOnMobile", "Stack on Mobile", "boolean", default=True),
        prop("reverseOnMobile", "Reverse on Mobile", "boolean", default=False),
    ],
), ColumnsProps)
