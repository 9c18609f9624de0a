"""
SQLModel persistence model for the `diocese` table.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .clergy import ClergyRecord


class DioceseRecord(SQLModel, table=True):
    """
    Row of the `diocese` table.

    `jurisdicao` holds the short jurisdiction token (e.g. "PatriarcadoDeMoscou").
    The titular bishop is a foreign key into `clero`; auxiliary bishops point back
    at the diocese through `clero.id_diocese_auxiliar`.
    """

    __tablename__ = "diocese"

    id: Optional[int] = Field(default=None, primary_key=True)
    nome: str = Field(index=True)
    jurisdicao: str = Field(index=True)
    id_bispo_titular: Optional[int] = Field(default=None, foreign_key="clero.id")
    loc_sede: Optional[str] = None

    bispo_titular: Optional["ClergyRecord"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "DioceseRecord.id_bispo_titular"}
    )
    bispos_auxiliares: List["ClergyRecord"] = Relationship(
        sa_relationship_kwargs={
            "primaryjoin": "DioceseRecord.id == foreign(ClergyRecord.id_diocese_auxiliar)",
            "viewonly": True,
            "order_by": "ClergyRecord.nome_completo",
        }
    )
