"""
Schémas Pydantic du document de page leadpages.
Structure récursive : PageDocument → PageSection / FormFlow → FormStep → BlockConfig → children

Le JSON persisté utilise des clés camelCase (fieldName, formFlow, submitButtonText…) ;
les attributs Python restent en snake_case. Les deux formes sont acceptées en entrée.
"""
import random
import string
import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base commune : alias camelCase, population par nom autorisée."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        """Forme persistée (alias camelCase, champs None omis)."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Identifiants ────────────────────────────────────────────────────────────

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_block_id(block_type: str) -> str:
    """Id unique : type + timestamp ms + suffixe aléatoire base36 (7 car.)."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"{block_type}-{int(time.time() * 1000)}-{suffix}"


# ── Bloc ────────────────────────────────────────────────────────────────────

AnimationEntrance = Literal["none", "fadeIn", "slideUp", "slideDown", "scaleIn"]


class BlockVisibility(CamelModel):
    """Filtre d'affichage par breakpoint — n'affecte jamais la validation."""
    desktop: bool = True
    tablet: bool = True
    mobile: bool = True


class BlockAnimation(CamelModel):
    entrance: AnimationEntrance = "none"
    delay: Optional[float] = None
    duration: Optional[float] = None


class BlockConfig(CamelModel):
    """Instance configurée d'un type de bloc (arbre via children)."""
    id: str
    type: str = Field(frozen=True)
    props: Dict[str, Any] = Field(default_factory=dict)
    children: Optional[List["BlockConfig"]] = None
    visibility: Optional[BlockVisibility] = None
    animation: Optional[BlockAnimation] = None

    def effective_visibility(self) -> BlockVisibility:
        return self.visibility or BlockVisibility()

    def effective_animation(self) -> BlockAnimation:
        return self.animation or BlockAnimation()

    @property
    def field_name(self) -> Optional[str]:
        """fieldName déclaré dans les props (blocs de formulaire uniquement)."""
        name = self.props.get("fieldName")
        return name if isinstance(name, str) and name else None

    @property
    def is_required(self) -> bool:
        return bool(self.props.get("required"))


# ── Section ─────────────────────────────────────────────────────────────────

class SectionBackground(CamelModel):
    type: Literal["color", "gradient", "image"]
    value: str


class SectionPadding(CamelModel):
    top: str = "2rem"
    bottom: str = "2rem"


class PageSection(CamelModel):
    """Groupe ordonné de blocs (contenu statique de la page)."""
    id: str
    name: Optional[str] = None
    blocks: List[BlockConfig] = Field(default_factory=list)
    background: Optional[SectionBackground] = None
    padding: Optional[SectionPadding] = None


# ── Formulaire ──────────────────────────────────────────────────────────────

class FormStep(CamelModel):
    """Une page du formulaire multi-étapes."""
    id: str
    title: str
    description: Optional[str] = None
    blocks: List[BlockConfig] = Field(default_factory=list)
    layout: Optional[Literal["single", "two-column"]] = None


class SubmitAction(CamelModel):
    """Consommé par le collaborateur de soumission, jamais par le core."""
    webhook_url: Optional[str] = None
    email_to: Optional[str] = None
    redirect_url: Optional[str] = None


class FormFlow(CamelModel):
    steps: List[FormStep] = Field(default_factory=list)
    submit_button_text: Optional[str] = None
    success_title: Optional[str] = None
    success_message: Optional[str] = None
    submit_action: Optional[SubmitAction] = None


# ── Document ────────────────────────────────────────────────────────────────

class PageDocument(CamelModel):
    """
    Document persisté d'une page : { "sections": [...], "formFlow": {...} }.

    Lu, modifié et sauvegardé en bloc (pas de mise à jour partielle).
    """
    sections: List[PageSection] = Field(default_factory=list)
    form_flow: FormFlow = Field(default_factory=FormFlow)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> "PageDocument":
        return cls.model_validate_json(data)


BlockConfig.model_rebuild()
