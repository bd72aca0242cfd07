"""
Registry des types de blocs : type → renderer + métadonnées + modèle de props.

Table de correspondance pure, peuplée à l'import de leadpages.blocks
(chaque module de bloc s'enregistre). Le renderer et le moteur de formulaire
ne dépendent que des lectures (get_*, has, resolve_props…).
"""
import copy
import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.schemas import BlockConfig, BlockVisibility, CamelModel, generate_block_id
from ..core.validation import validate_text

log = logging.getLogger(__name__)

CATEGORIES = ("form", "content", "social-proof", "layout", "conversion")

BlockCategory = Literal["form", "content", "social-proof", "layout", "conversion"]
PropType      = Literal["text", "textarea", "number", "boolean", "select", "color", "image", "array"]


# ── Métadonnées ─────────────────────────────────────────────────────────────

class PropOption(CamelModel):
    label: str
    value: Any


class PropSchema(CamelModel):
    """Descripteur d'une prop éditable (lu par l'éditeur, pas par le rendu)."""
    key: str
    label: str
    type: PropType
    options: Optional[List[PropOption]] = None
    default: Any = None
    required: bool = False
    placeholder: Optional[str] = None


class BlockMetadata(CamelModel):
    type: str = ""
    name: str
    description: str = ""
    category: BlockCategory
    icon: str = ""
    default_props: Dict[str, Any] = Field(default_factory=dict)
    props_schema: List[PropSchema] = Field(default_factory=list)


# ── Contexte de rendu ───────────────────────────────────────────────────────

class FormHandle(Protocol):
    """Accès en lecture à l'état du formulaire (fourni en mode live uniquement)."""
    def value_of(self, field_name: str) -> Any: ...
    def error_for(self, field_name: str) -> Optional[str]: ...


class BlockContext(BaseModel):
    """Ce que reçoit un renderer de bloc."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id:              str
    config:          BlockConfig
    props:           Any
    editing:         bool = False
    on_update:       Optional[Callable[[Dict[str, Any]], None]] = None
    on_select:       Optional[Callable[[], None]] = None
    form:            Optional[Any] = None
    render_children: Optional[Callable[[List[BlockConfig]], str]] = None

    def value(self, field_name: Optional[str]) -> Any:
        if self.form is None or not field_name:
            return None
        return self.form.value_of(field_name)

    def error(self, field_name: Optional[str]) -> Optional[str]:
        if self.form is None or not field_name:
            return None
        return self.form.error_for(field_name)

    def children_html(self, blocks: Optional[List[BlockConfig]] = None) -> str:
        if self.render_children is None:
            return ""
        return self.render_children((self.config.children or []) if blocks is None else blocks)


BlockRenderer  = Callable[[BlockContext], str]
ValueValidator = Callable[[Any, Any], Optional[str]]   # (props, valeur) → message | None


class _Entry:
    __slots__ = ("renderer", "metadata", "props_model", "validator")

    def __init__(self, renderer, metadata, props_model, validator):
        self.renderer    = renderer
        self.metadata    = metadata
        self.props_model = props_model
        self.validator   = validator


# ── Registry ────────────────────────────────────────────────────────────────

class BlockRegistry:
    def __init__(self):
        self._entries: Dict[str, _Entry] = {}

    def register(
        self,
        block_type: str,
        renderer: BlockRenderer,
        metadata: BlockMetadata,
        props_model: Optional[Type[BaseModel]] = None,
        validator: Optional[ValueValidator] = None,
    ) -> None:
        """Enregistre (ou remplace) un type. La dernière inscription gagne."""
        if isinstance(metadata, dict):
            metadata = BlockMetadata.model_validate(metadata)
        update: Dict[str, Any] = {"type": block_type}
        if not metadata.default_props and props_model is not None:
            update["default_props"] = props_model().model_dump(by_alias=True, exclude_none=True)
        if block_type in self._entries:
            log.debug("Block type %s re-registered", block_type)
        self._entries[block_type] = _Entry(
            renderer, metadata.model_copy(update=update), props_model, validator,
        )

    # ── Lecture ─────────────────────────────────────────────────────────────

    def has(self, block_type: str) -> bool:
        return block_type in self._entries

    def get_component(self, block_type: str) -> Optional[BlockRenderer]:
        entry = self._entries.get(block_type)
        return entry.renderer if entry else None

    def get_metadata(self, block_type: str) -> Optional[BlockMetadata]:
        entry = self._entries.get(block_type)
        return entry.metadata if entry else None

    def get_props_model(self, block_type: str) -> Optional[Type[BaseModel]]:
        entry = self._entries.get(block_type)
        return entry.props_model if entry else None

    def get_validator(self, block_type: str) -> Optional[ValueValidator]:
        entry = self._entries.get(block_type)
        return entry.validator if entry else None

    def get_all_types(self) -> List[str]:
        return list(self._entries)

    def get_all_metadata(self) -> List[BlockMetadata]:
        return [e.metadata for e in self._entries.values()]

    def get_by_category(self) -> Dict[str, List[BlockMetadata]]:
        """Catégorie → métadonnées. Les cinq catégories sont toujours présentes."""
        grouped: Dict[str, List[BlockMetadata]] = {c: [] for c in CATEGORIES}
        for entry in self._entries.values():
            grouped.setdefault(entry.metadata.category, []).append(entry.metadata)
        return grouped

    def create_default_config(self, block_type: str) -> Optional[BlockConfig]:
        """Config neuve : copie des defaultProps, id unique, visibilité par défaut."""
        entry = self._entries.get(block_type)
        if entry is None:
            return None
        return BlockConfig(
            id=generate_block_id(block_type),
            type=block_type,
            props=copy.deepcopy(entry.metadata.default_props),
            visibility=BlockVisibility(),
        )

    # ── Props résolues ──────────────────────────────────────────────────────

    def merged_props(self, config: BlockConfig) -> Dict[str, Any]:
        """defaultProps du type complétés/écrasés par les props du bloc."""
        entry = self._entries.get(config.type)
        defaults = copy.deepcopy(entry.metadata.default_props) if entry else {}
        return {**defaults, **config.props}

    def resolve_props(self, config: BlockConfig) -> Any:
        """
        Props prêtes pour le renderer : modèle typé du bloc si enregistré,
        sinon le dict fusionné. Lève ValidationError si les props sont inexploitables.
        """
        merged = self.merged_props(config)
        model = self.get_props_model(config.type)
        return model.model_validate(merged) if model is not None else merged

    def field_name_of(self, config: BlockConfig) -> Optional[str]:
        name = self.merged_props(config).get("fieldName")
        return name if isinstance(name, str) and name else None

    def is_required(self, config: BlockConfig) -> bool:
        return bool(self.merged_props(config).get("required"))

    def auto_advance_of(self, config: BlockConfig) -> bool:
        return bool(self.merged_props(config).get("autoAdvance"))

    def validate_value(self, config: BlockConfig, value: Any) -> Optional[str]:
        """Message d'erreur du champ porté par ce bloc, ou None."""
        required = self.is_required(config)
        validator = self.get_validator(config.type)
        if validator is None:
            return validate_text(value, required=required)
        try:
            props = self.resolve_props(config)
        except ValidationError as e:
            log.warning("Block %s has invalid props (%s), falling back to text validation",
                        config.id, e.error_count())
            return validate_text(value, required=required)
        return validator(props, value)


# Instance partagée, peuplée par l'import de leadpages.blocks
block_registry = BlockRegistry()
