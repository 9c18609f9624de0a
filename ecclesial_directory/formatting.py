"""
Display helpers for directory values.

- `kind_label` gives the accented display name of an entity kind
- `format_telefone` formats Brazilian landline and mobile numbers
- `format_cep` formats Brazilian postal codes

Values that do not have the expected number of digits are returned unchanged.
"""

import re
from typing import Optional

from .base import EntityKind

KIND_LABELS: dict[str, str] = {
    EntityKind.CATEDRAL.value: "Catedral",
    EntityKind.PAROQUIA.value: "Paróquia",
    EntityKind.CAPELA.value: "Capela",
    EntityKind.MISSAO.value: "Missão",
    EntityKind.MOSTEIRO.value: "Mosteiro",
}

_NON_DIGITS = re.compile(r"\D")


def kind_label(tipo: str) -> str:
    """Display name of an entity kind; unknown kinds are returned as given."""
    return KIND_LABELS.get(tipo, tipo)


def format_telefone(telefone: Optional[str]) -> str:
    """
    Format a phone number.

    Example:
        >>> format_telefone("11987654321")
        '(11) 98765-4321'
        >>> format_telefone("1132104321")
        '(11) 3210-4321'
        >>> format_telefone("+55 11 3210")
        '+55 11 3210'
    """
    if not telefone:
        return ""
    digits = _NON_DIGITS.sub("", telefone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return telefone


def format_cep(cep: Optional[str]) -> str:
    """Format a CEP as XXXXX-XXX."""
    if not cep:
        return ""
    digits = _NON_DIGITS.sub("", cep)
    if len(digits) == 8:
        return f"{digits[:5]}-{digits[5:]}"
    return cep
