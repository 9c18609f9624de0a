"""
## Overview

This module defines the **Domain Models** for the ecclesial directory.
These are the Pydantic classes returned to every caller of the data service,
regardless of which backend answered. The database rows
(`storage/models/`) and the REST API payloads (`rest/models.py`) are mapped
into these shapes by `mapper.py`.

## Design Principles

1. **One canonical shape** - callers never see which backend answered
2. **Immutable values** - models are frozen once constructed; every read builds fresh ones
3. **Relations by id** - an entity points at its diocese through `id_diocese`; the
   embedded `diocese` snapshot is for display only and may be absent
4. **Typed writes** - create/update payloads are validated before any backend is touched

Field names follow the directory's data vocabulary:

- nome: name
- tipo: entity kind (see `EntityKind`)
- reitor: rector name
- estado / cidade / endereco / cep: state, city, street address, postal code
- jurisdicao: jurisdiction (see `Jurisdiction`)
- bispo / bispos_auxiliares: titular bishop, auxiliary bishops
- loc_sede: seat location
- fotos / url_foto / legenda / ordem: photos, photo URL, caption, display order
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import JURISDICTION_LABELS, JURISDICTIONS_BY_LABEL, EntityKind, Jurisdiction


class Photo(BaseModel):
    """
    A photo of an ecclesiastical entity.

    Attributes:
        id: Photo identifier
        id_entidade: Owning entity
        url_foto: Public URL of the image
        legenda: Optional caption
        ordem: Display order; the lowest value is the cover photo
    """

    model_config = ConfigDict(frozen=True)

    id: int
    id_entidade: int
    url_foto: str
    legenda: Optional[str] = None
    ordem: int = 0


class Diocese(BaseModel):
    """
    A diocese and its hierarchy.

    Attributes:
        id: Diocese identifier
        nome: Diocese name
        jurisdicao: Jurisdiction the diocese belongs to
        bispo: Titular bishop name, empty when it could not be resolved
        bispos_auxiliares: Names of the auxiliary bishops
        loc_sede: Seat location

    Example:
        >>> diocese = Diocese(
        ...     id=1,
        ...     nome="Arquidiocese de São Paulo e Todo o Brasil",
        ...     jurisdicao=Jurisdiction.PATRIARCADO_DE_ANTIOQUIA,
        ...     bispo="Metropolita Damaskinos",
        ...     loc_sede="São Paulo",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    id: int
    nome: str
    jurisdicao: Jurisdiction
    bispo: str = ""
    bispos_auxiliares: list[str] = Field(default_factory=list)
    loc_sede: str = ""


class Clergy(BaseModel):
    """A member of the clergy."""

    model_config = ConfigDict(frozen=True)

    id: int
    nome_completo: str
    titulo: str = ""
    email: str = ""
    id_diocese_auxiliar: Optional[int] = None


class EcclesiasticalEntity(BaseModel):
    """
    A cathedral, parish, monastery, mission or chapel.

    `tipo` is kept as a plain string: values outside `EntityKind` are passed
    through unchanged. String fields are never None (absent values are ""),
    while `latitude`/`longitude` stay None when the source has no coordinates.

    Attributes:
        id: Entity identifier
        id_diocese: Diocese the entity belongs to (0 when the source had none)
        nome: Entity name
        tipo: Entity kind
        reitor: Rector name
        url_foto: Cover photo URL (the photo with the lowest `ordem`)
        fotos: Photos sorted by `ordem`
        diocese: Embedded diocese snapshot, None when unresolved

    Example:
        >>> catedral = EcclesiasticalEntity(
        ...     id=1,
        ...     id_diocese=1,
        ...     nome="Catedral Metropolitana Ortodoxa",
        ...     tipo=EntityKind.CATEDRAL.value,
        ...     estado="SP",
        ...     cidade="São Paulo",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    id: int
    id_diocese: int = 0
    nome: str
    tipo: str
    reitor: str = ""
    cep: str = ""
    estado: str = ""
    cidade: str = ""
    endereco: str = ""
    telefone: str = ""
    email: str = ""
    website: str = ""
    descricao: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    url_foto: Optional[str] = None
    fotos: list[Photo] = Field(default_factory=list)
    diocese: Optional[Diocese] = None


class DirectoryStats(BaseModel):
    """Row totals per table."""

    model_config = ConfigDict(frozen=True)

    entidades: int = 0
    dioceses: int = 0
    clero: int = 0


# ============================================================================
# Filters
# ============================================================================


def _same_jurisdiction(jurisdicao: Jurisdiction, wanted: str) -> bool:
    """A filter value may be the token or the display label."""
    return wanted in (jurisdicao.value, JURISDICTION_LABELS[jurisdicao])


class EntityFilters(BaseModel):
    """
    Filters for entity listings. Every provided filter must match (AND);
    None and "" mean the filter is absent.
    """

    estado: Optional[str] = None
    cidade: Optional[str] = None
    tipo: Optional[str] = None
    diocese_id: Optional[int] = None
    jurisdicao: Optional[str] = None

    def matches(self, entity: EcclesiasticalEntity) -> bool:
        if self.estado and entity.estado != self.estado:
            return False
        if self.cidade and entity.cidade != self.cidade:
            return False
        if self.tipo and entity.tipo != self.tipo:
            return False
        if self.diocese_id and entity.id_diocese != self.diocese_id:
            return False
        if self.jurisdicao and (entity.diocese is None or not _same_jurisdiction(entity.diocese.jurisdicao, self.jurisdicao)):
            return False
        return True

    def to_query_params(self) -> dict[str, str]:
        """Query parameters for the REST API, skipping absent filters."""
        return {key: str(value) for key, value in self.model_dump().items() if value is not None and value != ""}


class DioceseFilters(BaseModel):
    """Filters for diocese listings."""

    jurisdicao: Optional[str] = None

    def matches(self, diocese: Diocese) -> bool:
        if self.jurisdicao and not _same_jurisdiction(diocese.jurisdicao, self.jurisdicao):
            return False
        return True

    def to_query_params(self) -> dict[str, str]:
        return {key: str(value) for key, value in self.model_dump().items() if value is not None and value != ""}


# ============================================================================
# Write payloads
# ============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    def changes(self) -> dict:
        """Only the fields the caller actually set."""
        return self.model_dump(exclude_unset=True, mode="json")


class EntityCreate(_Payload):
    """Fields accepted when creating an entity. Photos are managed separately."""

    id_diocese: int
    nome: str = Field(..., min_length=1)
    tipo: EntityKind
    id_reitor: Optional[int] = None
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    descricao: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class EntityUpdate(_Payload):
    """Partial update of an entity; unset fields are left untouched."""

    id_diocese: Optional[int] = None
    nome: Optional[str] = Field(None, min_length=1)
    tipo: Optional[EntityKind] = None
    id_reitor: Optional[int] = None
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    descricao: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class DioceseCreate(_Payload):
    """Fields accepted when creating a diocese. `jurisdicao` takes a token or a display label."""

    nome: str = Field(..., min_length=1)
    jurisdicao: Jurisdiction
    loc_sede: Optional[str] = None
    id_bispo_titular: Optional[int] = None

    @field_validator("jurisdicao", mode="before")
    @classmethod
    def _accept_labels(cls, value):
        return JURISDICTIONS_BY_LABEL.get(value, value) if isinstance(value, str) else value


class DioceseUpdate(_Payload):
    nome: Optional[str] = Field(None, min_length=1)
    jurisdicao: Optional[Jurisdiction] = None
    loc_sede: Optional[str] = None
    id_bispo_titular: Optional[int] = None

    @field_validator("jurisdicao", mode="before")
    @classmethod
    def _accept_labels(cls, value):
        return JURISDICTIONS_BY_LABEL.get(value, value) if isinstance(value, str) else value


class ClergyCreate(_Payload):
    nome_completo: str = Field(..., min_length=1)
    titulo: Optional[str] = None
    email: Optional[str] = None
    id_diocese_auxiliar: Optional[int] = None


class ClergyUpdate(_Payload):
    nome_completo: Optional[str] = Field(None, min_length=1)
    titulo: Optional[str] = None
    email: Optional[str] = None
    id_diocese_auxiliar: Optional[int] = None


class PhotoCreate(_Payload):
    id_entidade: int
    url_foto: str = Field(..., min_length=1)
    legenda: Optional[str] = None
    ordem: int = 0


class PhotoUpdate(_Payload):
    url_foto: Optional[str] = Field(None, min_length=1)
    legenda: Optional[str] = None
    ordem: Optional[int] = None
