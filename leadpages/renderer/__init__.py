from .base import Renderer, RenderMode
from .html import (
    HtmlRenderer,
    render_block,
    render_form_step,
    render_landing_page,
    render_section,
    render_sections,
    section_styles,
)

__all__ = [
    "Renderer", "RenderMode", "HtmlRenderer",
    "render_block", "render_form_step", "render_landing_page",
    "render_section", "render_sections", "section_styles",
]
