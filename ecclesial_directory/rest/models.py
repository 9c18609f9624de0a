"""
Wire models for the directory REST API.

These mirror the JSON the API returns inside its envelope
(`{"status": "success" | "error", "data": ..., "message": ..., "timestamp": ...}`).
They are parsed leniently: optional strings may arrive as null and are turned
into "" by `mapper.py`, not here.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiEnvelope(BaseModel):
    """
    Response envelope wrapping every API payload.

    Attributes:

        status: "success" or "error"
        data: The payload
        message: Human readable message, set on errors
        timestamp: Server timestamp, optional
    """

    status: str = "success"
    data: Any = None
    message: str = ""
    timestamp: Optional[str] = None


class ApiClergy(BaseModel):
    id: int
    nome_completo: str
    titulo: Optional[str] = None
    email: Optional[str] = None
    id_diocese_auxiliar: Optional[int] = None


class ApiClergyRef(BaseModel):
    """Clergy reference embedded in entities and dioceses."""

    id: int
    nome_completo: str
    titulo: Optional[str] = None
    email: Optional[str] = None


class ApiDioceseRef(BaseModel):
    """Diocese summary embedded in an entity."""

    id: int
    nome: str
    jurisdicao: str
    loc_sede: Optional[str] = None


class ApiPhoto(BaseModel):
    id: int
    url_foto: str
    legenda: Optional[str] = None
    ordem: int = 0


class ApiEntity(BaseModel):
    id: int
    nome: str
    tipo: str
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    descricao: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    url_foto: Optional[str] = None
    diocese: Optional[ApiDioceseRef] = None
    reitor: Optional[ApiClergyRef] = None
    fotos: Optional[list[ApiPhoto]] = None


class ApiDiocese(BaseModel):
    id: int
    nome: str
    jurisdicao: str
    loc_sede: Optional[str] = None
    bispo_titular: Optional[ApiClergyRef] = None
    bispos_auxiliares: Optional[list[ApiClergyRef]] = None


class ApiEntityList(BaseModel):
    total: int = 0
    entidades: list[ApiEntity] = Field(default_factory=list)


class ApiDioceseList(BaseModel):
    total: int = 0
    dioceses: list[ApiDiocese] = Field(default_factory=list)


class ApiClergyList(BaseModel):
    total: int = 0
    clero: list[ApiClergy] = Field(default_factory=list)


class ApiHealth(BaseModel):
    status: str = ""
    message: str = ""
    timestamp: Optional[str] = None
