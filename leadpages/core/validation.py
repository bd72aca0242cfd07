"""
Politique de validation des champs — fonctions pures.
Chaque validateur retourne None (valide) ou le message d'erreur affiché sous le champ.
"""
import re
from typing import Any, Iterable, Optional

EMAIL_PATTERN    = re.compile(r"^[A-Za-z0-9._%+'-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")
# Numéros NZ : mobile (021, 022, 027…) ou fixe (09, 07…), préfixe 0 ou +64
NZ_PHONE_PATTERN = re.compile(r"^(\+64|0)[\d\s-]{7,12}$")

_NZ_MOBILE_PREFIXES = ("21", "22", "27", "28", "29")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_text(value: Any, required: bool = False, max_length: Optional[int] = None,
                  message: str = "This field is required") -> Optional[str]:
    if is_blank(value):
        return message if required else None
    if max_length and len(str(value)) > max_length:
        return f"Must be {max_length} characters or fewer"
    return None


def validate_email(value: Any, required: bool = False) -> Optional[str]:
    if is_blank(value):
        return "Email is required" if required else None
    if not EMAIL_PATTERN.match(str(value).strip()):
        return "Please enter a valid email address"
    return None


def validate_phone(value: Any, required: bool = False) -> Optional[str]:
    if is_blank(value):
        return "Phone number is required" if required else None
    if not NZ_PHONE_PATTERN.match(str(value).strip()):
        return "Please enter a valid NZ phone number"
    return None


def validate_consent(value: Any, required: bool = False) -> Optional[str]:
    """Case obligatoire : la valeur doit être exactement True."""
    if required and value is not True:
        return "You must agree to continue"
    return None


def validate_choice(value: Any, options: Iterable[Any], required: bool = False) -> Optional[str]:
    if is_blank(value):
        return "Please select an option" if required else None
    if value not in list(options):
        return "Please select one of the available options"
    return None


def format_nz_phone(raw: str) -> str:
    """Formate un numéro NZ à la saisie : '021 123 4567', '09 123 4567', '+64 21 123 4567'."""
    cleaned = re.sub(r"[^\d+]", "", raw or "")

    if cleaned.startswith("+64"):
        rest = cleaned[3:]
        if len(rest) <= 2:
            return f"+64 {rest}"
        if len(rest) <= 5:
            return f"+64 {rest[:2]} {rest[2:]}"
        return f"+64 {rest[:2]} {rest[2:5]} {rest[5:9]}"

    if cleaned.startswith("0"):
        if len(cleaned) > 2 and cleaned[1:3] in _NZ_MOBILE_PREFIXES:
            if len(cleaned) <= 3:
                return cleaned
            if len(cleaned) <= 6:
                return f"{cleaned[:3]} {cleaned[3:]}"
            return f"{cleaned[:3]} {cleaned[3:6]} {cleaned[6:10]}"
        if len(cleaned) <= 2:
            return cleaned
        if len(cleaned) <= 5:
            return f"{cleaned[:2]} {cleaned[2:]}"
        return f"{cleaned[:2]} {cleaned[2:5]} {cleaned[5:9]}"

    return cleaned
