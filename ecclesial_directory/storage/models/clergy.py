"""
SQLModel persistence model for the `clero` table.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class ClergyRecord(SQLModel, table=True):
    """
    Row of the `clero` table.

    `id_diocese_auxiliar` is a plain indexed column rather than a foreign key:
    `diocese.id_bispo_titular` already references `clero`, and a second key in
    the other direction would make the two tables mutually dependent at
    creation time.
    """

    __tablename__ = "clero"

    id: Optional[int] = Field(default=None, primary_key=True)
    nome_completo: str = Field(index=True)
    titulo: Optional[str] = None
    email: Optional[str] = None
    id_diocese_auxiliar: Optional[int] = Field(default=None, index=True)
