"""
Closed vocabularies shared by the domain, persistence and REST layers.

The directory knows two fixed vocabularies:

- **Jurisdiction**: the five canonical patriarchates / autocephalous churches a
  diocese belongs to. The database stores the short token, the REST API returns
  the long display label; `JURISDICTION_LABELS` converts between them.
- **EntityKind**: the kind of an ecclesiastical entity (Catedral, Paroquia, ...).
"""

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Jurisdiction(str, Enum):
    """Canonical jurisdiction tokens, as stored in the `diocese` table."""

    PATRIARCADO_ECUMENICO = "PatriarcadoEcumenico"
    PATRIARCADO_DE_ANTIOQUIA = "PatriarcadoDeAntioquia"
    PATRIARCADO_DE_MOSCOU = "PatriarcadoDeMoscou"
    PATRIARCADO_DA_SERVIA = "PatriarcadoDaServia"
    IGREJA_AUTOCEFALA_DA_POLONIA = "IgrejaAutocefalaDaPolonia"

    @classmethod
    def _missing_(cls, value):
        # Older rows and the first frontend used this spelling
        if value == "IgrejaAutocefalaDoPolonia":
            return cls.IGREJA_AUTOCEFALA_DA_POLONIA
        return None


class EntityKind(str, Enum):
    """Kinds of ecclesiastical entity."""

    CATEDRAL = "Catedral"
    PAROQUIA = "Paroquia"
    MOSTEIRO = "Mosteiro"
    MISSAO = "Missao"
    CAPELA = "Capela"


DEFAULT_JURISDICTION = Jurisdiction.PATRIARCADO_ECUMENICO

JURISDICTION_LABELS: dict[Jurisdiction, str] = {
    Jurisdiction.PATRIARCADO_ECUMENICO: "Patriarcado Ecumênico",
    Jurisdiction.PATRIARCADO_DE_ANTIOQUIA: "Patriarcado de Antioquia",
    Jurisdiction.PATRIARCADO_DE_MOSCOU: "Patriarcado de Moscou",
    Jurisdiction.PATRIARCADO_DA_SERVIA: "Patriarcado da Sérvia",
    Jurisdiction.IGREJA_AUTOCEFALA_DA_POLONIA: "Igreja Autocéfala da Polônia",
}

JURISDICTIONS_BY_LABEL = {label: token for token, label in JURISDICTION_LABELS.items()}


def jurisdiction_label(jurisdiction: Jurisdiction | str) -> str:
    """Return the display label for a jurisdiction token."""
    return JURISDICTION_LABELS[Jurisdiction(jurisdiction)]


def jurisdiction_from_label(label: Optional[str]) -> Jurisdiction:
    """
    Map a REST display label to its jurisdiction token.

    Unknown labels fall back to `DEFAULT_JURISDICTION`.

    Example:
        >>> jurisdiction_from_label("Patriarcado de Moscou")
        <Jurisdiction.PATRIARCADO_DE_MOSCOU: 'PatriarcadoDeMoscou'>
        >>> jurisdiction_from_label("Igreja Desconhecida")
        <Jurisdiction.PATRIARCADO_ECUMENICO: 'PatriarcadoEcumenico'>
    """
    if label in JURISDICTIONS_BY_LABEL:
        return JURISDICTIONS_BY_LABEL[label]
    logger.warning("Unmapped jurisdiction label %r, defaulting to %s", label, DEFAULT_JURISDICTION.value)
    return DEFAULT_JURISDICTION


def jurisdiction_from_token(token: Optional[str]) -> Jurisdiction:
    """Map a stored token to a `Jurisdiction`, with the same default-on-miss as labels."""
    try:
        return Jurisdiction(token)
    except ValueError:
        logger.warning("Unmapped jurisdiction token %r, defaulting to %s", token, DEFAULT_JURISDICTION.value)
        return DEFAULT_JURISDICTION


def normalize_jurisdiction(value: Optional[str]) -> Jurisdiction:
    """Accept either a token or a display label."""
    if value in JURISDICTIONS_BY_LABEL:
        return JURISDICTIONS_BY_LABEL[value]
    return jurisdiction_from_token(value)
