"""Document persistence keyed by collection and id."""

import copy
import logging
import uuid
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from office_hours.models.document import Document

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def new_id(self) -> str: ...

    def put(self, collection: str, record_id: str, document: dict[str, Any]) -> None: ...

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None: ...

    def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]: ...

    def delete(self, collection: str, record_id: str) -> None: ...


def _filter_clause(key: str, value: Any):
    field = Document.data[key]
    if isinstance(value, bool):
        return field.as_boolean() == value
    if isinstance(value, str):
        return field.as_string() == value
    if isinstance(value, int):
        return field.as_integer() == value
    if isinstance(value, float):
        return field.as_float() == value
    return None


def _matches(data: dict[str, Any], filters: dict[str, Any]) -> bool:
    return all(key in data and data[key] == value for key, value in filters.items())


class SqlRecordStore:
    """RecordStore backed by the ``documents`` table.

    Every call opens its own session and commits before returning, so each
    write is visible to the next call regardless of who issues it. Equality
    filters on top-level scalar keys run as JSON comparisons in SQL; the
    rows that come back are checked again in Python, which also covers
    list and object values.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def put(self, collection: str, record_id: str, document: dict[str, Any]) -> None:
        db: Session = self._session_factory()
        try:
            existing = db.get(Document, (collection, record_id))
            if existing is None:
                db.add(Document(collection=collection, id=record_id, data=copy.deepcopy(document)))
            else:
                existing.data = copy.deepcopy(document)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.debug('Stored %s/%s', collection, record_id)

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        db: Session = self._session_factory()
        try:
            document = db.get(Document, (collection, record_id))
            return copy.deepcopy(document.data) if document else None
        finally:
            db.close()

    def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        filters = filters or {}
        db: Session = self._session_factory()
        try:
            clauses = [Document.collection == collection]
            for key, value in filters.items():
                clause = _filter_clause(key, value)
                if clause is not None:
                    clauses.append(clause)
            documents = db.query(Document).filter(*clauses).order_by(Document.created_at.asc()).all()
            return [copy.deepcopy(document.data) for document in documents if _matches(document.data, filters)]
        finally:
            db.close()

    def delete(self, collection: str, record_id: str) -> None:
        db: Session = self._session_factory()
        try:
            document = db.get(Document, (collection, record_id))
            if document is not None:
                db.delete(document)
                db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.debug('Deleted %s/%s', collection, record_id)
