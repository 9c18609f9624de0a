"""
SQLModel implementation of the directory storage interface.

This implementation works against any SQLAlchemy engine: PostgreSQL in
production, SQLite for tests and local development. Every read eager-loads the
relations the mappers need (entity -> diocese -> bishops, entity -> rector,
entity -> photos), so the returned records can be mapped after their session
has closed.

Driver errors are wrapped into `DatabaseError`; a missing row on a single-row
read is reported as None.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from ecclesial_directory.base import EntityKind, Jurisdiction
from ecclesial_directory.errors import DatabaseError, NotFoundError
from ecclesial_directory.storage.interfaces import DirectoryStorageInterface
from ecclesial_directory.storage.models import ClergyRecord, DioceseRecord, EntityRecord, PhotoRecord

logger = logging.getLogger(__name__)


def _entity_load_options():
    return (
        selectinload(EntityRecord.diocese).selectinload(DioceseRecord.bispo_titular),
        selectinload(EntityRecord.diocese).selectinload(DioceseRecord.bispos_auxiliares),
        selectinload(EntityRecord.reitor),
        selectinload(EntityRecord.fotos),
    )


def _like_pattern(term: str) -> str:
    """Substring LIKE pattern matching `term` literally (escape character `\\`)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _diocese_load_options():
    return (
        selectinload(DioceseRecord.bispo_titular),
        selectinload(DioceseRecord.bispos_auxiliares),
    )


class SQLModelDirectoryStorage(DirectoryStorageInterface):
    """Directory storage backed by SQLModel tables."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Open a session and wrap driver errors into `DatabaseError`."""
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, e)
            raise DatabaseError(str(e)) from e

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def list_entities(self, limit: int = 1000) -> list[EntityRecord]:
        with self._session("list_entities") as session:
            statement = select(EntityRecord).options(*_entity_load_options()).order_by(EntityRecord.id).limit(limit)
            return list(session.exec(statement).all())

    def get_entity_by_id(self, entity_id: int) -> Optional[EntityRecord]:
        with self._session(f"get_entity_by_id({entity_id})") as session:
            statement = select(EntityRecord).where(EntityRecord.id == entity_id).options(*_entity_load_options())
            try:
                return session.exec(statement).one()
            except NoResultFound:
                return None

    def list_entities_by_diocese(self, diocese_id: int) -> list[EntityRecord]:
        with self._session(f"list_entities_by_diocese({diocese_id})") as session:
            statement = select(EntityRecord).where(EntityRecord.id_diocese == diocese_id).options(*_entity_load_options()).order_by(EntityRecord.id)
            return list(session.exec(statement).all())

    def list_entities_by_state(self, estado: str) -> list[EntityRecord]:
        with self._session(f"list_entities_by_state({estado})") as session:
            statement = select(EntityRecord).where(EntityRecord.estado == estado).options(*_entity_load_options()).order_by(EntityRecord.id)
            return list(session.exec(statement).all())

    def search_entities(self, term: str, limit: int = 20) -> list[EntityRecord]:
        pattern = _like_pattern(term)
        with self._session(f"search_entities({term!r})") as session:
            statement = (
                select(EntityRecord)
                .where(
                    or_(
                        col(EntityRecord.nome).ilike(pattern, escape="\\"),
                        col(EntityRecord.cidade).ilike(pattern, escape="\\"),
                        col(EntityRecord.endereco).ilike(pattern, escape="\\"),
                    )
                )
                .options(*_entity_load_options())
                .order_by(EntityRecord.id)
                .limit(limit)
            )
            return list(session.exec(statement).all())

    def _reload_entity(self, session: Session, entity_id: int) -> EntityRecord:
        statement = select(EntityRecord).where(EntityRecord.id == entity_id).options(*_entity_load_options()).execution_options(populate_existing=True)
        return session.exec(statement).one()

    def create_entity(self, values: dict) -> EntityRecord:
        with self._session("create_entity") as session:
            record = EntityRecord(**values)
            session.add(record)
            session.commit()
            return self._reload_entity(session, record.id)

    def update_entity(self, entity_id: int, values: dict) -> EntityRecord:
        with self._session(f"update_entity({entity_id})") as session:
            record = session.get(EntityRecord, entity_id)
            if record is None:
                raise NotFoundError(f"Entity {entity_id} not found")
            for key, value in values.items():
                setattr(record, key, value)
            session.add(record)
            session.commit()
            return self._reload_entity(session, entity_id)

    def delete_entity(self, entity_id: int) -> None:
        with self._session(f"delete_entity({entity_id})") as session:
            record = session.get(EntityRecord, entity_id)
            if record is None:
                return
            session.delete(record)
            session.commit()

    # ------------------------------------------------------------------
    # Dioceses
    # ------------------------------------------------------------------

    def list_dioceses(self) -> list[DioceseRecord]:
        with self._session("list_dioceses") as session:
            statement = select(DioceseRecord).options(*_diocese_load_options()).order_by(DioceseRecord.nome)
            return list(session.exec(statement).all())

    def get_diocese_by_id(self, diocese_id: int) -> Optional[DioceseRecord]:
        with self._session(f"get_diocese_by_id({diocese_id})") as session:
            statement = select(DioceseRecord).where(DioceseRecord.id == diocese_id).options(*_diocese_load_options())
            try:
                return session.exec(statement).one()
            except NoResultFound:
                return None

    def _reload_diocese(self, session: Session, diocese_id: int) -> DioceseRecord:
        statement = select(DioceseRecord).where(DioceseRecord.id == diocese_id).options(*_diocese_load_options()).execution_options(populate_existing=True)
        return session.exec(statement).one()

    def create_diocese(self, values: dict) -> DioceseRecord:
        with self._session("create_diocese") as session:
            record = DioceseRecord(**values)
            session.add(record)
            session.commit()
            return self._reload_diocese(session, record.id)

    def update_diocese(self, diocese_id: int, values: dict) -> DioceseRecord:
        with self._session(f"update_diocese({diocese_id})") as session:
            record = session.get(DioceseRecord, diocese_id)
            if record is None:
                raise NotFoundError(f"Diocese {diocese_id} not found")
            for key, value in values.items():
                setattr(record, key, value)
            session.add(record)
            session.commit()
            return self._reload_diocese(session, diocese_id)

    def delete_diocese(self, diocese_id: int) -> None:
        with self._session(f"delete_diocese({diocese_id})") as session:
            record = session.get(DioceseRecord, diocese_id)
            if record is None:
                return
            session.delete(record)
            session.commit()

    # ------------------------------------------------------------------
    # Clergy
    # ------------------------------------------------------------------

    def list_clergy(self) -> list[ClergyRecord]:
        with self._session("list_clergy") as session:
            return list(session.exec(select(ClergyRecord).order_by(ClergyRecord.nome_completo)).all())

    def get_clergy_by_id(self, clergy_id: int) -> Optional[ClergyRecord]:
        with self._session(f"get_clergy_by_id({clergy_id})") as session:
            try:
                return session.exec(select(ClergyRecord).where(ClergyRecord.id == clergy_id)).one()
            except NoResultFound:
                return None

    def create_clergy(self, values: dict) -> ClergyRecord:
        with self._session("create_clergy") as session:
            record = ClergyRecord(**values)
            session.add(record)
            session.commit()
            session.refresh(record)
            return record

    def update_clergy(self, clergy_id: int, values: dict) -> ClergyRecord:
        with self._session(f"update_clergy({clergy_id})") as session:
            record = session.get(ClergyRecord, clergy_id)
            if record is None:
                raise NotFoundError(f"Clergy {clergy_id} not found")
            for key, value in values.items():
                setattr(record, key, value)
            session.add(record)
            session.commit()
            session.refresh(record)
            return record

    def delete_clergy(self, clergy_id: int) -> None:
        with self._session(f"delete_clergy({clergy_id})") as session:
            record = session.get(ClergyRecord, clergy_id)
            if record is None:
                return
            session.delete(record)
            session.commit()

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def list_photos(self, entity_id: int) -> list[PhotoRecord]:
        with self._session(f"list_photos({entity_id})") as session:
            statement = select(PhotoRecord).where(PhotoRecord.id_entidade == entity_id).order_by(PhotoRecord.ordem, PhotoRecord.id)
            return list(session.exec(statement).all())

    def get_main_photo(self, entity_id: int) -> Optional[PhotoRecord]:
        with self._session(f"get_main_photo({entity_id})") as session:
            statement = select(PhotoRecord).where(PhotoRecord.id_entidade == entity_id).order_by(PhotoRecord.ordem, PhotoRecord.id).limit(1)
            return session.exec(statement).first()

    def create_photo(self, values: dict) -> PhotoRecord:
        with self._session("create_photo") as session:
            record = PhotoRecord(**values)
            session.add(record)
            session.commit()
            session.refresh(record)
            return record

    def update_photo(self, photo_id: int, values: dict) -> PhotoRecord:
        with self._session(f"update_photo({photo_id})") as session:
            record = session.get(PhotoRecord, photo_id)
            if record is None:
                raise NotFoundError(f"Photo {photo_id} not found")
            for key, value in values.items():
                setattr(record, key, value)
            session.add(record)
            session.commit()
            session.refresh(record)
            return record

    def delete_photo(self, photo_id: int) -> None:
        with self._session(f"delete_photo({photo_id})") as session:
            record = session.get(PhotoRecord, photo_id)
            if record is None:
                return
            session.delete(record)
            session.commit()

    # ------------------------------------------------------------------
    # Reference lists and stats
    # ------------------------------------------------------------------

    def list_states(self) -> list[str]:
        with self._session("list_states") as session:
            statement = select(EntityRecord.estado).where(col(EntityRecord.estado).is_not(None)).distinct()
            return sorted({estado for estado in session.exec(statement).all() if estado})

    def list_cities(self, estado: Optional[str] = None) -> list[str]:
        with self._session(f"list_cities({estado})") as session:
            statement = select(EntityRecord.cidade).where(col(EntityRecord.cidade).is_not(None))
            if estado:
                statement = statement.where(EntityRecord.estado == estado)
            return sorted({cidade for cidade in session.exec(statement.distinct()).all() if cidade})

    def list_kinds(self) -> list[str]:
        return [kind.value for kind in EntityKind]

    def list_jurisdictions(self) -> list[str]:
        return [jurisdiction.value for jurisdiction in Jurisdiction]

    def _count(self, model) -> int:
        with self._session(f"count({model.__tablename__})") as session:
            return session.exec(select(func.count()).select_from(model)).one()

    def count_all(self) -> dict[str, int]:
        tables = {"entidades": EntityRecord, "dioceses": DioceseRecord, "clero": ClergyRecord}
        with ThreadPoolExecutor(max_workers=len(tables)) as pool:
            futures = {key: pool.submit(self._count, model) for key, model in tables.items()}
            return {key: future.result() for key, future in futures.items()}

    def health_check(self) -> tuple[bool, str]:
        try:
            with self._session("health_check") as session:
                session.exec(select(ClergyRecord.id).limit(1)).all()
        except DatabaseError as e:
            return False, str(e)
        return True, "Connection successful"

    def close(self) -> None:
        self.engine.dispose()
