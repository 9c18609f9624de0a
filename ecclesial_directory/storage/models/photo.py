"""
SQLModel persistence model for the `fotosentidade` table.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class PhotoRecord(SQLModel, table=True):
    """Row of the `fotosentidade` table. `ordem` defines the display sequence."""

    __tablename__ = "fotosentidade"

    id: Optional[int] = Field(default=None, primary_key=True)
    id_entidade: int = Field(foreign_key="entidadeeclesiastica.id", index=True)
    url_foto: str
    legenda: Optional[str] = None
    ordem: int = Field(default=0)
