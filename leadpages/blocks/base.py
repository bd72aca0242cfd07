"""
Bases communes des blocs : props de base, props de champ, helpers HTML.
"""
from html import escape
from typing import Any, Dict, List, Literal, Optional

from ..core.schemas import CamelModel
from .registry import BlockContext, PropOption, PropSchema

Align    = Literal["left", "center", "right"]
MaxWidth = Literal["sm", "md", "lg", "xl", "full"]


class BlockProps(CamelModel):
    """Props d'un bloc. Les clés inconnues sont ignorées."""
    pass


class FieldProps(BlockProps):
    """Props partagées par les blocs de formulaire."""
    label:       Optional[str] = None
    placeholder: Optional[str] = None
    helper_text: Optional[str] = None
    required:    bool = False
    field_name:  Optional[str] = None


# ── Helpers ─────────────────────────────────────────────────────────────────

def esc(value: Any) -> str:
    return escape("" if value is None else str(value), quote=True)


def attrs(**values: Any) -> str:
    """Attributs HTML (False/None omis, True → attribut booléen, '_' → '-')."""
    parts = []
    for key, val in values.items():
        if val is None or val is False:
            continue
        name = key.rstrip("_").replace("_", "-")
        parts.append(f" {name}" if val is True else f' {name}="{esc(val)}"')
    return "".join(parts)


def classes(*names: Optional[str]) -> str:
    return " ".join(n for n in names if n)


def options(*pairs) -> List[PropOption]:
    """options("left", "Left", "center", "Center") → [PropOption…]."""
    return [PropOption(value=pairs[i], label=pairs[i + 1]) for i in range(0, len(pairs), 2)]


def prop(key: str, label: str, type: str = "text", **kw) -> PropSchema:
    return PropSchema(key=key, label=label, type=type, **kw)


ALIGN_OPTIONS     = options("left", "Left", "center", "Center", "right", "Right")
MAX_WIDTH_OPTIONS = options("sm", "Small", "md", "Medium", "lg", "Large", "xl", "Extra Large", "full", "Full Width")


# ── Enveloppe de champ ──────────────────────────────────────────────────────

def render_field(ctx: BlockContext, p: FieldProps, control: str, block: str) -> str:
    """
    Label (+ astérisque si requis), contrôle, puis erreur du champ
    ou texte d'aide. Les erreurs ne sont connues qu'en mode live.
    """
    error = ctx.error(p.field_name)
    label_html = ""
    if p.label:
        star = '<span class="field__required">*</span>' if p.required else ""
        label_html = f'<label class="field__label" for="{esc(ctx.id)}">{esc(p.label)}{star}</label>\n  '
    if error:
        foot = f'\n  <p class="field__error" role="alert">{esc(error)}</p>'
    elif p.helper_text:
        foot = f'\n  <p class="field__helper">{esc(p.helper_text)}</p>'
    else:
        foot = ""
    css = classes("field", f"field--{block}", "field--invalid" if error else None)
    return f'<div class="{css}"{attrs(data_field=p.field_name)}>\n  {label_html}{control}{foot}\n</div>'


def input_control(ctx: BlockContext, p: FieldProps, input_type: str, **extra: Any) -> str:
    value = ctx.value(p.field_name)
    return "<input" + attrs(
        id=ctx.id,
        class_="field__input",
        type=input_type,
        name=p.field_name,
        value=value,
        placeholder=p.placeholder,
        required=p.required and not ctx.editing,
        disabled=ctx.editing,
        aria_invalid="true" if ctx.error(p.field_name) else None,
        **extra,
    ) + ">"


def style(values: Dict[str, Optional[str]]) -> str:
    body = ";".join(f"{k}:{v}" for k, v in values.items() if v)
    return f' style="{esc(body)}"' if body else ""
