"""
Blocs de formulaire : adresse, texte, email, téléphone, cartes radio, case à cocher.

Chaque bloc déclare un fieldName (clé de la valeur soumise) et enregistre
un validateur de valeur utilisé par le moteur de formulaire.
"""
from typing import Any, List, Literal, Optional

from pydantic import Field

from ..core.validation import (
    format_nz_phone,
    validate_choice,
    validate_consent,
    validate_email,
    validate_phone,
    validate_text,
)
from .base import CamelModel, FieldProps, attrs, classes, esc, input_control, options, prop, render_field
from .registry import BlockContext, BlockMetadata, block_registry


# ── address-finder ──────────────────────────────────────────────────────────

class AddressFinderProps(FieldProps):
    label:         Optional[str] = "Property Address"
    placeholder:   Optional[str] = "Start typing your address..."
    helper_text:   Optional[str] = "Enter your property address to get started"
    required:      bool = True
    field_name:    Optional[str] = "address"
    error_message: str = "Please select an address from the suggestions"


def render_address_finder(ctx: BlockContext) -> str:
    p: AddressFinderProps = ctx.props
    control = input_control(ctx, p, "text", autocomplete="off", data_address_finder=True)
    return render_field(ctx, p, control, "address-finder")


def validate_address(p: AddressFinderProps, value: Any) -> Optional[str]:
    return validate_text(value, required=p.required, message=p.error_message)


# ── text-input ──────────────────────────────────────────────────────────────

class TextInputProps(FieldProps):
    label:         Optional[str] = "Text Field"
    placeholder:   Optional[str] = "Enter text..."
    field_name:    Optional[str] = "textField"
    type:          Literal["text", "tel"] = "text"
    auto_complete: Optional[str] = None
    max_length:    Optional[int] = None


def render_text_input(ctx: BlockContext) -> str:
    p: TextInputProps = ctx.props
    control = input_control(ctx, p, p.type, autocomplete=p.auto_complete, maxlength=p.max_length)
    return render_field(ctx, p, control, "text-input")


def validate_text_input(p: TextInputProps, value: Any) -> Optional[str]:
    return validate_text(value, required=p.required, max_length=p.max_length)


# ── email-input ─────────────────────────────────────────────────────────────

class EmailInputProps(FieldProps):
    label:       Optional[str] = "Email Address"
    placeholder: Optional[str] = "you@example.com"
    required:    bool = True
    field_name:  Optional[str] = "email"


def render_email_input(ctx: BlockContext) -> str:
    p: EmailInputProps = ctx.props
    return render_field(ctx, p, input_control(ctx, p, "email", autocomplete="email"), "email-input")


# ── phone-input ─────────────────────────────────────────────────────────────

class PhoneInputProps(FieldProps):
    label:       Optional[str] = "Phone Number"
    placeholder: Optional[str] = "021 123 4567"
    required:    bool = True
    field_name:  Optional[str] = "phone"


def render_phone_input(ctx: BlockContext) -> str:
    p: PhoneInputProps = ctx.props
    raw = ctx.value(p.field_name)
    shown = format_nz_phone(raw) if isinstance(raw, str) and raw else raw
    control = "<input" + attrs(
        id=ctx.id, class_="field__input", type="tel", name=p.field_name, value=shown,
        placeholder=p.placeholder, autocomplete="tel", inputmode="tel",
        required=p.required and not ctx.editing, disabled=ctx.editing,
    ) + ">"
    return render_field(ctx, p, control, "phone-input")


# ── radio-cards ─────────────────────────────────────────────────────────────

class RadioOption(CamelModel):
    value:       str
    label:       str
    description: Optional[str] = None
    icon:        Optional[str] = None


class RadioCardsProps(FieldProps):
    label:        Optional[str] = "Select an option"
    required:     bool = True
    field_name:   Optional[str] = "selection"
    options:      List[RadioOption] = Field(default_factory=lambda: [
        RadioOption(value="option1", label="Option 1", icon="Home"),
        RadioOption(value="option2", label="Option 2", icon="Building"),
    ])
    columns:      Literal[1, 2, 3, 4] = 2
    auto_advance: bool = False


def render_radio_cards(ctx: BlockContext) -> str:
    p: RadioCardsProps = ctx.props
    selected = ctx.value(p.field_name)
    cards = []
    for opt in p.options:
        is_selected = selected == opt.value
        icon = f'<span class="radio-card__icon" data-icon="{esc(opt.icon)}"></span>' if opt.icon else ""
        desc = f'<span class="radio-card__description">{esc(opt.description)}</span>' if opt.description else ""
        cards.append(
            "<button" + attrs(
                type="submit",
                formnovalidate=True,
                class_=classes("radio-card", "radio-card--selected" if is_selected else None),
                name=p.field_name,
                value=opt.value,
                aria_pressed="true" if is_selected else "false",
                disabled=ctx.editing,
            ) + f'>{icon}<span class="radio-card__label">{esc(opt.label)}</span>{desc}</button>'
        )
    grid = (
        f'<div class="radio-cards radio-cards--cols-{p.columns}"'
        f'{attrs(data_auto_advance="true" if p.auto_advance else None)}>\n    '
        + "\n    ".join(cards)
        + "\n  </div>"
    )
    return render_field(ctx, p, grid, "radio-cards")


def validate_radio_cards(p: RadioCardsProps, value: Any) -> Optional[str]:
    return validate_choice(value, [o.value for o in p.options], required=p.required)


# ── checkbox ────────────────────────────────────────────────────────────────

class CheckboxProps(FieldProps):
    label:      Optional[str] = "I agree to the terms and conditions"
    required:   bool = True
    field_name: Optional[str] = "consent"
    link_text:  Optional[str] = "terms and conditions"
    link_url:   Optional[str] = "/terms"


def _consent_label(p: CheckboxProps) -> str:
    label = p.label or ""
    if p.link_text and p.link_url:
        parts = label.split(p.link_text)
        if len(parts) == 2:
            link = f'<a href="{esc(p.link_url)}" target="_blank" rel="noopener noreferrer">{esc(p.link_text)}</a>'
            return f"{esc(parts[0])}{link}{esc(parts[1])}"
    return esc(label)


def render_checkbox(ctx: BlockContext) -> str:
    p: CheckboxProps = ctx.props
    error = ctx.error(p.field_name)
    box = "<input" + attrs(
        id=ctx.id, type="checkbox", class_="field__checkbox", name=p.field_name, value="true",
        checked=ctx.value(p.field_name) is True, disabled=ctx.editing,
    ) + ">"
    star = '<span class="field__required">*</span>' if p.required else ""
    if error:
        foot = f'\n  <p class="field__error" role="alert">{esc(error)}</p>'
    elif p.helper_text:
        foot = f'\n  <p class="field__helper">{esc(p.helper_text)}</p>'
    else:
        foot = ""
    css = classes("field", "field--checkbox", "field--invalid" if error else None)
    return (
        f'<div class="{css}"{attrs(data_field=p.field_name)}>\n'
        f'  <label class="field__label" for="{esc(ctx.id)}">{box} {_consent_label(p)}{star}</label>{foot}\n'
        f'</div>'
    )


def validate_checkbox(p: CheckboxProps, value: Any) -> Optional[str]:
    return validate_consent(value, required=p.required)


# ── Enregistrement ──────────────────────────────────────────────────────────

_FIELD_NAME = "Field Name"

block_registry.register("address-finder", render_address_finder, BlockMetadata(
    name="Address Finder",
    description="NZ address autocomplete with map integration",
    category="form",
    icon="MapPin",
    props_schema=[
        prop("label", "Label", default="Property Address"),
        prop("placeholder", "Placeholder", default="Start typing your address..."),
        prop("helperText", "Helper Text", default="Enter your property address to get started"),
        prop("required", "Required", "boolean", default=True),
        prop("fieldName", _FIELD_NAME, default="address"),
    ],
), AddressFinderProps, validate_address)

block_registry.register("text-input", render_text_input, BlockMetadata(
    name="Text Input",
    description="Single line text input field",
    category="form",
    icon="Type",
    props_schema=[
        prop("label", "Label", default="Text Field"),
        prop("placeholder", "Placeholder"),
        prop("helperText", "Helper Text"),
        prop("required", "Required", "boolean", default=False),
        prop("fieldName", _FIELD_NAME, required=True),
        prop("type", "Input Type", "select", options=options("text", "Text", "tel", "Phone"), default="text"),
        prop("autoComplete", "Autocomplete"),
    ],
), TextInputProps, validate_text_input)

block_registry.register("email-input", render_email_input, BlockMetadata(
    name="Email Input",
    description="Email address input with validation",
    category="form",
    icon="Mail",
    props_schema=[
        prop("label", "Label", default="Email Address"),
        prop("placeholder", "Placeholder", default="you@example.com"),
        prop("helperText", "Helper Text"),
        prop("required", "Required", "boolean", default=True),
        prop("fieldName", _FIELD_NAME, default="email"),
    ],
), EmailInputProps, lambda p, v: validate_email(v, required=p.required))

block_registry.register("phone-input", render_phone_input, BlockMetadata(
    name="Phone Input",
    description="NZ phone number input with formatting",
    category="form",
    icon="Phone",
    props_schema=[
        prop("label", "Label", default="Phone Number"),
        prop("placeholder", "Placeholder", default="021 123 4567"),
        prop("helperText", "Helper Text"),
        prop("required", "Required", "boolean", default=True),
        prop("fieldName", _FIELD_NAME, default="phone"),
    ],
), PhoneInputProps, lambda p, v: validate_phone(v, required=p.required))

block_registry.register("radio-cards", render_radio_cards, BlockMetadata(
    name="Radio Cards",
    description="Visual card-style radio button selection",
    category="form",
    icon="LayoutGrid",
    props_schema=[
        prop("label", "Label"),
        prop("helperText", "Helper Text"),
        prop("required", "Required", "boolean", default=True),
        prop("fieldName", _FIELD_NAME, required=True),
        prop("options", "Options", "array"),
        prop("columns", "Columns", "select",
             options=options(1, "1 Column", 2, "2 Columns", 3, "3 Columns", 4, "4 Columns"), default=2),
        prop("autoAdvance", "Auto-advance on selection", "boolean", default=False),
    ],
), RadioCardsProps, validate_radio_cards)

block_registry.register("checkbox", render_checkbox, BlockMetadata(
    name="Checkbox",
    description="Single checkbox for consent or options",
    category="form",
    icon="CheckSquare",
    props_schema=[
        prop("label", "Label", required=True),
        prop("helperText", "Helper Text"),
        prop("required", "Required", "boolean", default=True),
        prop("fieldName", _FIELD_NAME, required=True),
        prop("linkText", "Link Text (in label)"),
        prop("linkUrl", "Link URL"),
    ],
), CheckboxProps, validate_checkbox)
