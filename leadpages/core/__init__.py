"""Core module pour leadpages : document, contrôles structurels, validation des champs."""
from .schemas import (
    BlockAnimation,
    BlockConfig,
    BlockVisibility,
    FormFlow,
    FormStep,
    PageDocument,
    PageSection,
    SectionBackground,
    SectionPadding,
    SubmitAction,
    generate_block_id,
)
from .document import (
    ConfigIssue,
    field_blocks,
    find_block,
    flow_field_blocks,
    iter_document_blocks,
    resolve_field_name,
    step_field_blocks,
    validate_document,
    walk_blocks,
)

__all__ = [
    "BlockAnimation",
    "BlockConfig",
    "BlockVisibility",
    "FormFlow",
    "FormStep",
    "PageDocument",
    "PageSection",
    "SectionBackground",
    "SectionPadding",
    "SubmitAction",
    "generate_block_id",
    "ConfigIssue",
    "field_blocks",
    "find_block",
    "flow_field_blocks",
    "iter_document_blocks",
    "resolve_field_name",
    "step_field_blocks",
    "validate_document",
    "walk_blocks",
]
