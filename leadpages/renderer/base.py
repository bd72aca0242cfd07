"""
Protocol Renderer — interface pluggable pour les renderers (HTML, JSON…).
"""
from enum import Enum
from typing import Protocol, runtime_checkable

from ..core.schemas import BlockConfig, PageSection


class RenderMode(str, Enum):
    LIVE    = "live"      # page publique
    EDITING = "editing"   # canvas admin


@runtime_checkable
class Renderer(Protocol):
    def render_block(self, config: BlockConfig, mode: RenderMode = RenderMode.LIVE) -> str: ...
    def render_section(self, section: PageSection, mode: RenderMode = RenderMode.LIVE) -> str: ...
