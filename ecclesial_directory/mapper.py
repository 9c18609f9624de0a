"""
Mapper functions to convert backend shapes into Domain Models and back.

This module bridges the gap between:
- Domain Models (entity.py) - canonical, frozen Pydantic classes returned to callers
- Persistence Models (storage/models/) - SQLModel rows with their relations loaded
- REST wire models (rest/models.py) - payloads returned by the directory API

Rules shared by every read mapper:
- optional string fields become "" when absent; latitude/longitude stay None
- photos are sorted by `ordem` (stable) and the first one is the cover photo
- jurisdictions from the API arrive as display labels and are mapped back to
  tokens, falling back to the first jurisdiction when the label is unknown
- entity kinds are passed through unchanged
"""

from typing import Iterable, Optional

from .base import jurisdiction_from_label, jurisdiction_from_token, jurisdiction_label
from .entity import (
    Clergy,
    ClergyCreate,
    ClergyUpdate,
    Diocese,
    DioceseCreate,
    DioceseUpdate,
    EcclesiasticalEntity,
    EntityCreate,
    EntityUpdate,
    Photo,
    PhotoCreate,
    PhotoUpdate,
)
from .rest.models import ApiClergy, ApiDiocese, ApiDioceseRef, ApiEntity, ApiPhoto
from .storage.models import ClergyRecord, DioceseRecord, EntityRecord, PhotoRecord


def sort_photos(photos: Iterable[Photo]) -> list[Photo]:
    """Sort photos by `ordem`; ties keep their original order."""
    return sorted(photos, key=lambda photo: photo.ordem)


def cover_photo_url(photos: list[Photo], fallback: Optional[str] = None) -> Optional[str]:
    """URL of the lowest-`ordem` photo in an already sorted list."""
    return photos[0].url_foto if photos else fallback


# ============================================================================
# Database rows -> domain
# ============================================================================


def photo_record_to_domain(record: PhotoRecord) -> Photo:
    return Photo(
        id=record.id,
        id_entidade=record.id_entidade,
        url_foto=record.url_foto,
        legenda=record.legenda,
        ordem=record.ordem,
    )


def clergy_record_to_domain(record: ClergyRecord) -> Clergy:
    return Clergy(
        id=record.id,
        nome_completo=record.nome_completo,
        titulo=record.titulo or "",
        email=record.email or "",
        id_diocese_auxiliar=record.id_diocese_auxiliar,
    )


def diocese_record_to_domain(record: DioceseRecord) -> Diocese:
    """
    Convert a diocese row to a domain model.

    The titular bishop and auxiliary bishops are read from the loaded relations;
    `bispo` is "" when the diocese has no titular bishop.
    """
    return Diocese(
        id=record.id,
        nome=record.nome,
        jurisdicao=jurisdiction_from_token(record.jurisdicao),
        bispo=record.bispo_titular.nome_completo if record.bispo_titular else "",
        bispos_auxiliares=[bishop.nome_completo for bishop in record.bispos_auxiliares or []],
        loc_sede=record.loc_sede or "",
    )


def entity_record_to_domain(record: EntityRecord) -> EcclesiasticalEntity:
    """
    Convert an entity row, with diocese, rector and photos loaded, to a domain model.

    Example:
        >>> record = EntityRecord(id=1, id_diocese=1, nome="Catedral São Paulo", tipo="Catedral")
        >>> record.fotos = [
        ...     PhotoRecord(id=10, id_entidade=1, url_foto="b.jpg", ordem=2),
        ...     PhotoRecord(id=11, id_entidade=1, url_foto="a.jpg", ordem=1),
        ... ]
        >>> entity_record_to_domain(record).url_foto
        'a.jpg'
    """
    fotos = sort_photos(photo_record_to_domain(photo) for photo in record.fotos or [])
    return EcclesiasticalEntity(
        id=record.id,
        id_diocese=record.id_diocese or 0,
        nome=record.nome,
        tipo=record.tipo,
        reitor=record.reitor.nome_completo if record.reitor else "",
        cep=record.cep or "",
        estado=record.estado or "",
        cidade=record.cidade or "",
        endereco=record.endereco or "",
        telefone=record.telefone or "",
        email=record.email or "",
        website=record.website or "",
        descricao=record.descricao or "",
        latitude=record.latitude,
        longitude=record.longitude,
        url_foto=cover_photo_url(fotos),
        fotos=fotos,
        diocese=diocese_record_to_domain(record.diocese) if record.diocese else None,
    )


# ============================================================================
# REST payloads -> domain
# ============================================================================


def api_photo_to_domain(photo: ApiPhoto, entity_id: int) -> Photo:
    return Photo(id=photo.id, id_entidade=entity_id, url_foto=photo.url_foto, legenda=photo.legenda, ordem=photo.ordem)


def api_clergy_to_domain(clergy: ApiClergy) -> Clergy:
    return Clergy(
        id=clergy.id,
        nome_completo=clergy.nome_completo,
        titulo=clergy.titulo or "",
        email=clergy.email or "",
        id_diocese_auxiliar=clergy.id_diocese_auxiliar,
    )


def api_diocese_ref_to_domain(diocese: ApiDioceseRef) -> Diocese:
    """The API embeds only a diocese summary in entities; bishops are left empty."""
    return Diocese(
        id=diocese.id,
        nome=diocese.nome,
        jurisdicao=jurisdiction_from_label(diocese.jurisdicao),
        bispo="",
        bispos_auxiliares=[],
        loc_sede=diocese.loc_sede or "",
    )


def api_diocese_to_domain(diocese: ApiDiocese) -> Diocese:
    return Diocese(
        id=diocese.id,
        nome=diocese.nome,
        jurisdicao=jurisdiction_from_label(diocese.jurisdicao),
        bispo=diocese.bispo_titular.nome_completo if diocese.bispo_titular else "",
        bispos_auxiliares=[bishop.nome_completo for bishop in diocese.bispos_auxiliares or []],
        loc_sede=diocese.loc_sede or "",
    )


def api_entity_to_domain(entity: ApiEntity) -> EcclesiasticalEntity:
    """
    Convert an API entity to a domain model.

    `id_diocese` comes from the embedded diocese (0 when absent). The cover photo is
    the lowest-`ordem` photo when the API sent photos, otherwise its `url_foto`.
    """
    fotos = sort_photos(api_photo_to_domain(photo, entity.id) for photo in entity.fotos or [])
    return EcclesiasticalEntity(
        id=entity.id,
        id_diocese=entity.diocese.id if entity.diocese else 0,
        nome=entity.nome,
        tipo=entity.tipo,
        reitor=entity.reitor.nome_completo if entity.reitor else "",
        cep=entity.cep or "",
        estado=entity.estado or "",
        cidade=entity.cidade or "",
        endereco=entity.endereco or "",
        telefone=entity.telefone or "",
        email=entity.email or "",
        website=entity.website or "",
        descricao=entity.descricao or "",
        latitude=entity.latitude,
        longitude=entity.longitude,
        url_foto=cover_photo_url(fotos, fallback=entity.url_foto),
        fotos=fotos,
        diocese=api_diocese_ref_to_domain(entity.diocese) if entity.diocese else None,
    )


# ============================================================================
# Write payloads -> backend values
# ============================================================================


WritePayload = EntityCreate | EntityUpdate | DioceseCreate | DioceseUpdate | ClergyCreate | ClergyUpdate | PhotoCreate | PhotoUpdate


def payload_to_values(payload: WritePayload) -> dict:
    """Column values for an insert/update: only the fields the caller set, enums as their values."""
    return payload.changes()


def diocese_payload_to_api(payload: DioceseCreate | DioceseUpdate) -> dict:
    """API body for a diocese write: the jurisdiction travels as its display label."""
    body = payload.changes()
    if body.get("jurisdicao"):
        body["jurisdicao"] = jurisdiction_label(body["jurisdicao"])
    return body


# Convenience functions for batch operations
def entity_records_to_domain(records: Iterable[EntityRecord]) -> list[EcclesiasticalEntity]:
    """Convert multiple entity rows to domain models."""
    return [entity_record_to_domain(record) for record in records]


def api_entities_to_domain(entities: Iterable[ApiEntity]) -> list[EcclesiasticalEntity]:
    """Convert multiple API entities to domain models."""
    return [api_entity_to_domain(entity) for entity in entities]
