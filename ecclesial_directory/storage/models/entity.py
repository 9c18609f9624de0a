"""
SQLModel persistence model for the `entidadeeclesiastica` table.

This module defines the **Persistence Model** for ecclesiastical entities.
It is mapped into the canonical `EcclesiasticalEntity` domain model by
`mapper.entity_record_to_domain`.

Design:
- One row per entity, foreign keys to its diocese and its rector
- Photos live in `fotosentidade` and are deleted together with the entity
- Optional columns are nullable; the mapper turns NULL strings into ""
"""

from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .clergy import ClergyRecord
    from .diocese import DioceseRecord
    from .photo import PhotoRecord


class EntityRecord(SQLModel, table=True):
    """
    Row of the `entidadeeclesiastica` table.

    Attributes:
        id: Primary key
        id_diocese: Diocese the entity belongs to
        id_reitor: Rector (row of `clero`)
        nome: Entity name
        tipo: Entity kind token (Catedral, Paroquia, ...)
        latitude/longitude: Optional coordinates

    Relationships:
        diocese: The owning diocese
        reitor: The rector
        fotos: Photos ordered by `ordem`
    """

    __tablename__ = "entidadeeclesiastica"

    id: Optional[int] = Field(default=None, primary_key=True)
    id_diocese: Optional[int] = Field(default=None, foreign_key="diocese.id", index=True)
    id_reitor: Optional[int] = Field(default=None, foreign_key="clero.id")
    nome: str = Field(index=True)
    tipo: str = Field(index=True)
    endereco: Optional[str] = None
    cep: Optional[str] = None
    cidade: Optional[str] = Field(default=None, index=True)
    estado: Optional[str] = Field(default=None, index=True)
    telefone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    descricao: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    diocese: Optional["DioceseRecord"] = Relationship()
    reitor: Optional["ClergyRecord"] = Relationship()
    fotos: List["PhotoRecord"] = Relationship(
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "[PhotoRecord.ordem, PhotoRecord.id]",
        }
    )
