"""
Global fixtures for the test suite.

This `conftest.py` file provides fixtures that are available to all tests
in the `tests/` directory and its subdirectories.

Fixtures:
- `engine`: SQLite engine on a temporary file with the directory tables
  created. A file (rather than `:memory:`) lets `count_all` open one
  connection per worker thread.
- `storage` / `seeded_storage`: `SQLModelDirectoryStorage` over that engine,
  empty or loaded with `seed_directory`.
- `broken_storage`: storage over a database without tables; every query
  raises `DatabaseError`.
- `fake_api`: `FakeDirectoryApi`, an in-memory FastAPI implementation of the
  directory REST API holding the same data as `seed_directory`.
- `api_http`: Starlette `TestClient` (an `httpx.Client`) bound to the fake.
- `api`: `DirectoryApiClient` talking to the fake through `api_http`.
- `service` / `rest_service` / `broken_service`: `DataService` wired to the
  seeded database, to the REST API only, or to the broken database.

Example:
    def test_something(service, fake_api):
        assert service.get_entity(1).nome == "Catedral Metropolitana"
        assert fake_api.calls == []  # the database answered

Run all tests with:
    pytest -v

For more information on Pytest fixtures, see:
https://docs.pytest.org/en/stable/how-to/fixtures.html
"""

from copy import deepcopy
from typing import Optional

import pytest
from fastapi import APIRouter, Body, FastAPI
from fastapi.responses import JSONResponse, Response
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

from ecclesial_directory.config import DirectoryConfig
from ecclesial_directory.rest.client import DirectoryApiClient
from ecclesial_directory.service import DataService
from ecclesial_directory.storage.backends.database import SQLModelDirectoryStorage
from ecclesial_directory.storage.models import ClergyRecord, DioceseRecord, EntityRecord, PhotoRecord

API_BASE_URL = "http://testserver"


# ============================================================================
# Database
# ============================================================================


def seed_directory(engine):
    """Two dioceses, three clergy, four entities and two photos (ordem 2 then 1)."""
    with Session(engine) as session:
        session.add_all(
            [
                ClergyRecord(id=1, nome_completo="Metropolita Damaskinos", titulo="Metropolita"),
                ClergyRecord(id=2, nome_completo="Bispo Silouan", titulo="Bispo", id_diocese_auxiliar=1),
                ClergyRecord(id=3, nome_completo="Padre João", titulo="Padre", email="joao@example.org"),
                DioceseRecord(id=1, nome="Arquidiocese de São Paulo", jurisdicao="PatriarcadoDeAntioquia", id_bispo_titular=1, loc_sede="São Paulo"),
                DioceseRecord(id=2, nome="Diocese do Rio de Janeiro", jurisdicao="PatriarcadoDeMoscou", loc_sede="Rio de Janeiro"),
                EntityRecord(
                    id=1,
                    id_diocese=1,
                    id_reitor=3,
                    nome="Catedral Metropolitana",
                    tipo="Catedral",
                    estado="SP",
                    cidade="São Paulo",
                    endereco="Rua Vergueiro, 1515",
                    cep="04101000",
                ),
                EntityRecord(id=2, id_diocese=1, nome="Paroquia Sao Nicolau", tipo="Paroquia", estado="SP", cidade="Campinas"),
                EntityRecord(id=3, id_diocese=2, nome="Catedral da Santissima Trindade", tipo="Catedral", estado="RJ", cidade="Rio de Janeiro"),
                EntityRecord(id=4, id_diocese=1, nome="Mosteiro da Transfiguracao", tipo="Mosteiro", estado="SP"),
                PhotoRecord(id=10, id_entidade=1, url_foto="https://img.example.org/fachada.jpg", legenda="Fachada", ordem=2),
                PhotoRecord(id=11, id_entidade=1, url_foto="https://img.example.org/altar.jpg", legenda="Altar", ordem=1),
            ]
        )
        session.commit()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'directory.db'}", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return SQLModelDirectoryStorage(engine)


@pytest.fixture
def seeded_storage(engine, storage):
    seed_directory(engine)
    return storage


@pytest.fixture
def broken_storage(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}", connect_args={"check_same_thread": False})
    storage = SQLModelDirectoryStorage(engine)
    yield storage
    engine.dispose()


# ============================================================================
# Fake REST API
# ============================================================================

_BISPO = {"id": 1, "nome_completo": "Metropolita Damaskinos", "titulo": "Metropolita", "email": None}
_AUXILIAR = {"id": 2, "nome_completo": "Bispo Silouan", "titulo": "Bispo", "email": None}
_REITOR = {"id": 3, "nome_completo": "Padre João", "titulo": "Padre", "email": "joao@example.org"}

API_DIOCESES = [
    {
        "id": 1,
        "nome": "Arquidiocese de São Paulo",
        "jurisdicao": "Patriarcado de Antioquia",
        "loc_sede": "São Paulo",
        "bispo_titular": _BISPO,
        "bispos_auxiliares": [_AUXILIAR],
    },
    {
        "id": 2,
        "nome": "Diocese do Rio de Janeiro",
        "jurisdicao": "Patriarcado de Moscou",
        "loc_sede": "Rio de Janeiro",
        "bispo_titular": None,
        "bispos_auxiliares": [],
    },
]

API_CLERGY = [
    {**_BISPO, "id_diocese_auxiliar": None},
    {**_AUXILIAR, "id_diocese_auxiliar": 1},
    {**_REITOR, "id_diocese_auxiliar": None},
]


def _diocese_ref(diocese: Optional[dict]) -> Optional[dict]:
    if diocese is None:
        return None
    return {key: diocese[key] for key in ("id", "nome", "jurisdicao", "loc_sede")}


def _api_entity(entity_id, nome, tipo, estado, cidade, diocese, **extra) -> dict:
    entity = {
        "id": entity_id,
        "nome": nome,
        "tipo": tipo,
        "estado": estado,
        "cidade": cidade,
        "endereco": None,
        "cep": None,
        "telefone": None,
        "email": None,
        "website": None,
        "descricao": None,
        "latitude": None,
        "longitude": None,
        "url_foto": None,
        "diocese": _diocese_ref(diocese),
        "reitor": None,
        "fotos": [],
    }
    entity.update(extra)
    return entity


API_ENTITIES = [
    _api_entity(
        1,
        "Catedral Metropolitana",
        "Catedral",
        "SP",
        "São Paulo",
        API_DIOCESES[0],
        endereco="Rua Vergueiro, 1515",
        cep="04101000",
        reitor=_REITOR,
        # Stale cover; the photos below take precedence
        url_foto="https://img.example.org/fachada.jpg",
        fotos=[
            {"id": 10, "url_foto": "https://img.example.org/fachada.jpg", "legenda": "Fachada", "ordem": 2},
            {"id": 11, "url_foto": "https://img.example.org/altar.jpg", "legenda": "Altar", "ordem": 1},
        ],
    ),
    _api_entity(2, "Paroquia Sao Nicolau", "Paroquia", "SP", "Campinas", API_DIOCESES[0]),
    _api_entity(3, "Catedral da Santissima Trindade", "Catedral", "RJ", "Rio de Janeiro", API_DIOCESES[1]),
    _api_entity(4, "Mosteiro da Transfiguracao", "Mosteiro", "SP", None, API_DIOCESES[0]),
]


def _success(data=None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "success", "data": data, "message": "", "timestamp": "2024-05-01T12:00:00Z"},
    )


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"status": "error", "data": None, "message": "Not found"})


class FakeDirectoryApi:
    """
    In-memory directory REST API.

    Operations named in `broken` answer HTTP 500. Every request appends its
    operation name to `calls`. Jurisdiction filters are accepted but ignored,
    like a server that does not support them.
    """

    def __init__(self):
        self.entidades = {entity["id"]: entity for entity in deepcopy(API_ENTITIES)}
        self.dioceses = {diocese["id"]: diocese for diocese in deepcopy(API_DIOCESES)}
        self.clero = {clergy["id"]: clergy for clergy in deepcopy(API_CLERGY)}
        self.broken: set[str] = set()
        self.calls: list[str] = []
        self.app = FastAPI(title="Fake directory API")
        self.app.include_router(self._router())

    def _enter(self, operation: str) -> Optional[JSONResponse]:
        self.calls.append(operation)
        if operation in self.broken:
            return JSONResponse(status_code=500, content={"status": "error", "data": None, "message": f"{operation} is down"})
        return None

    def _clergy_ref(self, clergy_id: Optional[int]) -> Optional[dict]:
        clergy = self.clero.get(clergy_id) if clergy_id else None
        return {key: clergy[key] for key in ("id", "nome_completo", "titulo", "email")} if clergy else None

    def _router(self) -> APIRouter:
        router = APIRouter(prefix="/api")

        @router.get("/health")
        def health():
            return self._enter("health") or _success({"status": "ok", "message": "healthy"})

        # Entities

        @router.get("/entidades")
        def list_entities(estado: Optional[str] = None, cidade: Optional[str] = None, tipo: Optional[str] = None, diocese_id: Optional[int] = None):
            failure = self._enter("list_entities")
            if failure:
                return failure
            rows = [
                entity
                for entity in self.entidades.values()
                if (not estado or entity["estado"] == estado)
                and (not cidade or entity["cidade"] == cidade)
                and (not tipo or entity["tipo"] == tipo)
                and (not diocese_id or (entity["diocese"] or {}).get("id") == diocese_id)
            ]
            return _success({"total": len(rows), "entidades": rows})

        @router.get("/entidades/{entity_id}")
        def get_entity(entity_id: int):
            failure = self._enter("get_entity")
            if failure:
                return failure
            if entity_id not in self.entidades:
                return _not_found()
            return _success(self.entidades[entity_id])

        @router.post("/entidades")
        def create_entity(payload: dict = Body(...)):
            failure = self._enter("create_entity")
            if failure:
                return failure
            entity_id = max(self.entidades, default=0) + 1
            fields = {key: value for key, value in payload.items() if key not in ("id_diocese", "id_reitor")}
            entity = _api_entity(entity_id, fields.pop("nome"), fields.pop("tipo"), fields.pop("estado", None), fields.pop("cidade", None), self.dioceses.get(payload.get("id_diocese")), **fields)
            entity["reitor"] = self._clergy_ref(payload.get("id_reitor"))
            self.entidades[entity_id] = entity
            return _success(entity, status_code=201)

        @router.put("/entidades/{entity_id}")
        def update_entity(entity_id: int, payload: dict = Body(...)):
            failure = self._enter("update_entity")
            if failure:
                return failure
            if entity_id not in self.entidades:
                return _not_found()
            entity = self.entidades[entity_id]
            for key, value in payload.items():
                if key == "id_diocese":
                    entity["diocese"] = _diocese_ref(self.dioceses.get(value))
                elif key == "id_reitor":
                    entity["reitor"] = self._clergy_ref(value)
                else:
                    entity[key] = value
            return _success(entity)

        @router.delete("/entidades/{entity_id}")
        def delete_entity(entity_id: int):
            failure = self._enter("delete_entity")
            if failure:
                return failure
            if self.entidades.pop(entity_id, None) is None:
                return _not_found()
            return Response(status_code=204)

        # Dioceses

        @router.get("/dioceses")
        def list_dioceses():
            failure = self._enter("list_dioceses")
            if failure:
                return failure
            rows = list(self.dioceses.values())
            return _success({"total": len(rows), "dioceses": rows})

        @router.get("/dioceses/{diocese_id}")
        def get_diocese(diocese_id: int):
            failure = self._enter("get_diocese")
            if failure:
                return failure
            if diocese_id not in self.dioceses:
                return _not_found()
            return _success(self.dioceses[diocese_id])

        @router.post("/dioceses")
        def create_diocese(payload: dict = Body(...)):
            failure = self._enter("create_diocese")
            if failure:
                return failure
            diocese_id = max(self.dioceses, default=0) + 1
            diocese = {
                "id": diocese_id,
                "nome": payload["nome"],
                "jurisdicao": payload["jurisdicao"],
                "loc_sede": payload.get("loc_sede"),
                "bispo_titular": self._clergy_ref(payload.get("id_bispo_titular")),
                "bispos_auxiliares": [],
            }
            self.dioceses[diocese_id] = diocese
            return _success(diocese, status_code=201)

        @router.put("/dioceses/{diocese_id}")
        def update_diocese(diocese_id: int, payload: dict = Body(...)):
            failure = self._enter("update_diocese")
            if failure:
                return failure
            if diocese_id not in self.dioceses:
                return _not_found()
            diocese = self.dioceses[diocese_id]
            for key, value in payload.items():
                if key == "id_bispo_titular":
                    diocese["bispo_titular"] = self._clergy_ref(value)
                else:
                    diocese[key] = value
            return _success(diocese)

        @router.delete("/dioceses/{diocese_id}")
        def delete_diocese(diocese_id: int):
            failure = self._enter("delete_diocese")
            if failure:
                return failure
            if self.dioceses.pop(diocese_id, None) is None:
                return _not_found()
            return Response(status_code=204)

        # Clergy

        @router.get("/clero")
        def list_clergy():
            failure = self._enter("list_clergy")
            if failure:
                return failure
            rows = list(self.clero.values())
            return _success({"total": len(rows), "clero": rows})

        @router.get("/clero/{clergy_id}")
        def get_clergy(clergy_id: int):
            failure = self._enter("get_clergy")
            if failure:
                return failure
            if clergy_id not in self.clero:
                return _not_found()
            return _success(self.clero[clergy_id])

        @router.post("/clero")
        def create_clergy(payload: dict = Body(...)):
            failure = self._enter("create_clergy")
            if failure:
                return failure
            clergy_id = max(self.clero, default=0) + 1
            clergy = {"id": clergy_id, "titulo": None, "email": None, "id_diocese_auxiliar": None, **payload}
            self.clero[clergy_id] = clergy
            return _success(clergy, status_code=201)

        @router.put("/clero/{clergy_id}")
        def update_clergy(clergy_id: int, payload: dict = Body(...)):
            failure = self._enter("update_clergy")
            if failure:
                return failure
            if clergy_id not in self.clero:
                return _not_found()
            self.clero[clergy_id].update(payload)
            return _success(self.clero[clergy_id])

        @router.delete("/clero/{clergy_id}")
        def delete_clergy(clergy_id: int):
            failure = self._enter("delete_clergy")
            if failure:
                return failure
            if self.clero.pop(clergy_id, None) is None:
                return _not_found()
            return Response(status_code=204)

        # Reference lists

        @router.get("/jurisdicoes")
        def list_jurisdictions():
            return self._enter("list_jurisdictions") or _success(
                [
                    "Patriarcado Ecumênico",
                    "Patriarcado de Antioquia",
                    "Patriarcado de Moscou",
                    "Patriarcado da Sérvia",
                    "Igreja Autocéfala da Polônia",
                ]
            )

        @router.get("/tipos")
        def list_kinds():
            return self._enter("list_kinds") or _success(["Catedral", "Paroquia", "Mosteiro", "Missao", "Capela"])

        @router.get("/estados")
        def list_states():
            return self._enter("list_states") or _success(sorted({entity["estado"] for entity in self.entidades.values() if entity["estado"]}))

        return router


@pytest.fixture
def fake_api():
    return FakeDirectoryApi()


@pytest.fixture
def api_http(fake_api):
    with TestClient(fake_api.app, base_url=API_BASE_URL) as client:
        yield client


@pytest.fixture
def api(api_http):
    return DirectoryApiClient(API_BASE_URL, client=api_http)


# ============================================================================
# Data service
# ============================================================================


@pytest.fixture
def service(seeded_storage, api):
    """Seeded database first, fake REST API as fallback."""
    return DataService(DirectoryConfig(), storage=seeded_storage, api=api)


@pytest.fixture
def rest_service(api):
    """REST API only."""
    return DataService(DirectoryConfig(), storage=None, api=api)


@pytest.fixture
def broken_service(broken_storage, api):
    """A database that fails every query, fake REST API as fallback."""
    return DataService(DirectoryConfig(), storage=broken_storage, api=api)
