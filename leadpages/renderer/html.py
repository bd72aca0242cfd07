"""
Renderer HTML — blocs, sections, étape de formulaire, page complète.

Dispatch par type via le registry. Un bloc en échec (type inconnu, props
invalides, exception du renderer, profondeur dépassée) n'interrompt jamais
le rendu de ses voisins : placeholder en édition, rien en live.
"""
import functools
import logging
from typing import Any, Callable, Dict, List, Optional

from ..blocks import BlockContext, BlockRegistry, block_registry
from ..blocks.base import attrs, classes, esc
from ..config import MAX_BLOCK_DEPTH
from ..core.document import field_blocks, step_field_blocks
from ..core.schemas import BlockConfig, PageDocument, PageSection
from ..flow.engine import FlowState, FormFlowEngine
from ..flow.legacy import split_at_form_section
from .base import RenderMode

log = logging.getLogger(__name__)

DEFAULT_ANIMATION_DURATION = 0.4
DEFAULT_SUCCESS_TITLE      = "Thank You!"
DEFAULT_SUCCESS_MESSAGE    = "We've received your submission."
DEFAULT_SUBMIT_LABEL       = "Submit"

OnUpdate = Callable[[str, Dict[str, Any]], None]   # (block_id, props)
OnSelect = Callable[[str], None]                   # (block_id)


# ── Bloc ────────────────────────────────────────────────────────────────────

def _placeholder(config: BlockConfig, message: str) -> str:
    return (f'<div class="block-placeholder"{attrs(data_block_id=config.id)}>'
            f'{esc(message)}</div>')


def visibility_classes(config: BlockConfig) -> List[str]:
    vis = config.effective_visibility()
    return [f"block--hide-{bp}" for bp in ("mobile", "tablet", "desktop") if not getattr(vis, bp)]


def animation_attrs(config: BlockConfig) -> tuple:
    """(classes, style inline) de l'animation d'entrée ; vide si aucune."""
    anim = config.effective_animation()
    if anim.entrance == "none":
        return [], ""
    duration = anim.duration if anim.duration is not None else DEFAULT_ANIMATION_DURATION
    delay    = anim.delay or 0
    return (["block--animate", f"block--animate-{anim.entrance}"],
            f"animation-duration:{duration:g}s;animation-delay:{delay:g}s")


def render_block(
    config: BlockConfig,
    mode: RenderMode = RenderMode.LIVE,
    *,
    registry: Optional[BlockRegistry] = None,
    form: Any = None,
    on_update: Optional[OnUpdate] = None,
    on_select: Optional[OnSelect] = None,
    disable_animations: bool = False,
    depth: int = 1,
    max_depth: int = MAX_BLOCK_DEPTH,
) -> str:
    """Rend un bloc (et récursivement ses enfants). Ne lève jamais."""
    registry = registry or block_registry
    editing = mode == RenderMode.EDITING

    if depth > max_depth:
        log.warning("Block %s nested deeper than %d levels, not rendered", config.id, max_depth)
        return _placeholder(config, f"Maximum nesting depth ({max_depth}) exceeded") if editing else ""

    renderer = registry.get_component(config.type)
    if renderer is None:
        if editing:
            return _placeholder(config, f"Unknown block type: {config.type}")
        log.warning("Unknown block type %r (block %s) skipped", config.type, config.id)
        return ""

    def render_children(blocks: List[BlockConfig]) -> str:
        return "\n".join(filter(None, (
            render_block(child, mode, registry=registry, form=form, on_update=on_update,
                         on_select=on_select, disable_animations=disable_animations,
                         depth=depth + 1, max_depth=max_depth)
            for child in blocks
        )))

    try:
        ctx = BlockContext(
            id=config.id,
            config=config,
            props=registry.resolve_props(config),
            editing=editing,
            on_update=functools.partial(on_update, config.id) if editing and on_update else None,
            on_select=functools.partial(on_select, config.id) if editing and on_select else None,
            form=None if editing else form,
            render_children=render_children,
        )
        inner = renderer(ctx)
    except Exception as e:
        log.warning("Block %s (%s) failed to render: %s", config.id, config.type, e)
        return _placeholder(config, f"Block failed to render: {config.type}") if editing else ""

    if not inner and not editing:
        return ""

    css = ["block", f"block--{config.type}", *visibility_classes(config)]
    style = ""
    if not editing and not disable_animations:
        anim_classes, style = animation_attrs(config)
        css += anim_classes
    if editing:
        css.append("block--editing")

    return (f'<div class="{classes(*css)}"'
            f'{attrs(data_block_id=config.id, data_block_type=config.type, style=style or None)}>\n'
            f'{inner}\n</div>')


# ── Section ─────────────────────────────────────────────────────────────────

def section_styles(section: PageSection) -> Dict[str, str]:
    """Style inline : fond (couleur / dégradé / image) + padding vertical."""
    styles: Dict[str, str] = {}
    bg = section.background
    if bg is not None:
        if bg.type == "color":
            styles["background-color"] = bg.value
        elif bg.type == "gradient":
            styles["background"] = bg.value
        elif bg.type == "image":
            styles["position"] = "relative"
    padding = section.padding
    styles["padding-top"]    = padding.top if padding else "2rem"
    styles["padding-bottom"] = padding.bottom if padding else "2rem"
    return styles


def _style_attr(styles: Dict[str, str]) -> str:
    return ";".join(f"{k}:{v}" for k, v in styles.items())


def render_section(
    section: PageSection,
    mode: RenderMode = RenderMode.LIVE,
    *,
    registry: Optional[BlockRegistry] = None,
    form: Any = None,
    on_update: Optional[OnUpdate] = None,
    on_select: Optional[OnSelect] = None,
    disable_animations: bool = False,
    max_depth: int = MAX_BLOCK_DEPTH,
) -> str:
    blocks_html = "\n".join(filter(None, (
        render_block(b, mode, registry=registry, form=form, on_update=on_update, on_select=on_select,
                     disable_animations=disable_animations, max_depth=max_depth)
        for b in section.blocks
    )))

    overlay = ""
    has_image = section.background is not None and section.background.type == "image"
    if has_image:
        overlay = (f'\n  <div class="page-section__bg" style="background-image:url({esc(section.background.value)})">'
                   f'<div class="page-section__overlay" style="background:rgba(0,0,0,.3)"></div></div>')

    content_css = classes("page-section__content", "page-section__content--raised" if has_image else None)
    return (f'<section{attrs(id=section.id, class_="page-section", style=_style_attr(section_styles(section)))}>'
            f'{overlay}\n  <div class="{content_css}">\n{blocks_html}\n  </div>\n</section>')


def render_sections(sections: List[PageSection], mode: RenderMode = RenderMode.LIVE, **kw) -> str:
    return "\n".join(render_section(s, mode, **kw) for s in sections)


# ── Étape de formulaire ─────────────────────────────────────────────────────

def _success_screen(engine: FormFlowEngine) -> str:
    flow = engine.flow
    return f"""<div class="form-flow form-flow--submitted" role="status">
  <h2 class="form-flow__success-title">{esc(flow.success_title or DEFAULT_SUCCESS_TITLE)}</h2>
  <p class="form-flow__success-message">{esc(flow.success_message or DEFAULT_SUCCESS_MESSAGE)}</p>
</div>"""


def _carried_values(engine: FormFlowEngine) -> str:
    """Champs des autres étapes renvoyés en hidden pour un POST sans JS."""
    current = {engine.registry.field_name_of(b) for b in step_field_blocks(engine.current_step_config, engine.registry)}
    hidden = []
    for step in engine.flow.steps:
        for block in field_blocks(step.blocks, engine.registry):
            name = engine.registry.field_name_of(block)
            if name in current or name not in engine.values:
                continue
            value = engine.values.get(name)
            if isinstance(value, bool):
                value = "true" if value else ""
            hidden.append(f'<input type="hidden"{attrs(name=name, value=value)}>')
    return "\n    ".join(hidden)


def render_form_step(
    engine: FormFlowEngine,
    mode: RenderMode = RenderMode.LIVE,
    *,
    action: str = "",
    disable_animations: bool = False,
    element_id: str = "appraisal-form",
) -> str:
    """Étape courante du moteur : en-tête, blocs, bannière d'erreur, navigation."""
    if engine.state == FlowState.SUBMITTED:
        return _success_screen(engine)

    step = engine.current_step_config
    editing = mode == RenderMode.EDITING

    progress = ""
    if engine.total_steps > 1 and not engine.is_first_step:
        pct = round(engine.current_step / engine.total_steps * 100)
        progress = (f'\n  <div class="form-flow__progress" aria-label="Step {engine.current_step} of {engine.total_steps}">'
                    f'<span>{engine.current_step} / {engine.total_steps}</span>'
                    f'<div class="form-flow__progress-fill" style="width:{pct}%"></div></div>')

    description = f'\n  <p class="form-flow__description">{esc(step.description)}</p>' if step.description else ""
    banner = ""
    if engine.state == FlowState.SUBMIT_ERROR and engine.submit_error:
        banner = f'\n  <div class="form-flow__error" role="alert">{esc(engine.submit_error)}</div>'

    blocks_html = "\n".join(filter(None, (
        render_block(b, mode, registry=engine.registry, form=engine, disable_animations=disable_animations)
        for b in step.blocks
    )))
    layout = "two-column" if step.layout == "two-column" else "single"

    submitting = engine.state == FlowState.SUBMITTING
    if engine.is_last_step:
        label = "Submitting..." if submitting else (engine.flow.submit_button_text or DEFAULT_SUBMIT_LABEL)
        primary = f'<button type="submit" name="__action" value="submit" class="form-flow__submit"{attrs(disabled=submitting or editing)}>{esc(label)}</button>'
    else:
        primary = f'<button type="submit" name="__action" value="next" class="form-flow__next"{attrs(disabled=editing)}>Continue</button>'
    back = ""
    if not engine.is_first_step:
        back = f'<button type="submit" name="__action" value="back" class="form-flow__back" formnovalidate{attrs(disabled=submitting or editing)}>Back</button>\n    '

    carried = _carried_values(engine)
    carried = f"\n    {carried}" if carried else ""
    return f"""<form{attrs(id=element_id, class_=f"form-flow form-flow--step-{engine.current_step}", method="post", action=action or None, novalidate=True)}>{progress}
  <h2 class="form-flow__title">{esc(step.title)}</h2>{description}{banner}
  <div class="form-flow__fields form-flow__fields--{layout}">
{blocks_html}
  </div>
  <div class="form-flow__nav">
    {back}{primary}
    <input type="hidden" name="__step" value="{engine.current_step}">{carried}
  </div>
</form>"""


# ── Page complète ───────────────────────────────────────────────────────────

def render_landing_page(
    page_title: str,
    document: PageDocument,
    engine: Optional[FormFlowEngine] = None,
    mode: RenderMode = RenderMode.LIVE,
    meta_description: Optional[str] = None,
    *,
    registry: Optional[BlockRegistry] = None,
    form_action: str = "",
    extra_head: str = "",
    extra_body_end: str = "",
) -> str:
    """
    HTML complet d'une page. Le formulaire prend la place de la section
    « form » si elle existe, sinon il suit les sections.
    """
    registry = registry or (engine.registry if engine else None)
    kw = dict(registry=registry, form=engine)
    before, form_section, after = split_at_form_section(document.sections)

    parts = [render_sections(before, mode, **kw)] if before else []
    if engine is not None:
        form_html = render_form_step(engine, mode, action=form_action)
        section_id = form_section.id if form_section else "form"
        parts.append(f'<section id="{esc(section_id)}" class="page-section page-section--form">\n{form_html}\n</section>')
    elif form_section is not None:
        parts.append(render_section(form_section, mode, **kw))
    if after:
        parts.append(render_sections(after, mode, **kw))

    meta = f'\n  <meta name="description" content="{esc(meta_description)}">' if meta_description else ""
    body = "\n".join(parts)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{esc(page_title)}</title>{meta}
  {extra_head}
</head>
<body class="landing-page landing-page--{mode.value}">
{body}
{extra_body_end}
</body>
</html>"""


# ── Renderer lié ────────────────────────────────────────────────────────────

class HtmlRenderer:
    """Implémentation du protocol Renderer liée à un registry et à des options."""

    def __init__(self, registry: Optional[BlockRegistry] = None, form: Any = None,
                 disable_animations: bool = False, max_depth: int = MAX_BLOCK_DEPTH):
        self.registry           = registry or block_registry
        self.form               = form
        self.disable_animations = disable_animations
        self.max_depth          = max_depth

    def render_block(self, config: BlockConfig, mode: RenderMode = RenderMode.LIVE) -> str:
        return render_block(config, mode, registry=self.registry, form=self.form,
                            disable_animations=self.disable_animations, max_depth=self.max_depth)

    def render_section(self, section: PageSection, mode: RenderMode = RenderMode.LIVE) -> str:
        return render_section(section, mode, registry=self.registry, form=self.form,
                              disable_animations=self.disable_animations, max_depth=self.max_depth)
