"""
Blocs leadpages — l'import de ce package enregistre tous les types
dans `block_registry`.
"""
from .registry import (
    CATEGORIES,
    BlockContext,
    BlockMetadata,
    BlockRegistry,
    FormHandle,
    PropOption,
    PropSchema,
    block_registry,
)
from . import form, content, social_proof, layout, conversion  # noqa: F401  (enregistrement)

from .form import (
    AddressFinderProps, TextInputProps, EmailInputProps, PhoneInputProps,
    RadioCardsProps, RadioOption, CheckboxProps,
)
from .content import HeadlineProps, SubheadlineProps, BodyTextProps, HeroImageProps, SpacerProps
from .social_proof import StatsBarProps, StatItem, TestimonialCardProps, AgentCardProps
from .layout import ContainerProps, CardProps, ColumnsProps
from .conversion import CtaButtonProps, ProgressBarProps, TrustBadgesProps, TrustBadge

__all__ = [
    # Registry
    "CATEGORIES", "BlockContext", "BlockMetadata", "BlockRegistry", "FormHandle",
    "PropOption", "PropSchema", "block_registry",
    # Form
    "AddressFinderProps", "TextInputProps", "EmailInputProps", "PhoneInputProps",
    "RadioCardsProps", "RadioOption", "CheckboxProps",
    # Content
    "HeadlineProps", "SubheadlineProps", "BodyTextProps", "HeroImageProps", "SpacerProps",
    # Social proof
    "StatsBarProps", "StatItem", "TestimonialCardProps", "AgentCardProps",
    # Layout
    "ContainerProps", "CardProps", "ColumnsProps",
    # Conversion
    "CtaButtonProps", "ProgressBarProps", "TrustBadgesProps", "TrustBadge",
]
