"""
leadpages — landing pages composées de blocs, formulaires multi-étapes, capture de leads.
"""
__version__ = "1.0.0"

from .blocks import BlockRegistry, block_registry
from .core import BlockConfig, FormFlow, FormStep, PageDocument, PageSection
from .errors import ConfigurationError, LeadPagesError
from .flow import FlowState, FormFlowEngine, create_legacy_engine
from .renderer import RenderMode, render_block, render_landing_page, render_section
from .templates import get_all_page_templates, get_page_template

__all__ = [
    "__version__",
    "BlockRegistry", "block_registry",
    "BlockConfig", "FormFlow", "FormStep", "PageDocument", "PageSection",
    "ConfigurationError", "LeadPagesError",
    "FlowState", "FormFlowEngine", "create_legacy_engine",
    "RenderMode", "render_block", "render_landing_page", "render_section",
    "get_all_page_templates", "get_page_template",
]
