"""Document store interfaces and their SQLAlchemy implementations.

The relationship core only talks to the store through three seams:

- ``DocumentStore``: fetch, count and bulk delete/destroy documents whose
  identifier is in a given set, optionally narrowed by field conditions.
- ``DocumentFactory``: build a new, not yet persisted document.
- ``identify``: make sure a document carries an identifier.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docref.exceptions import InstantiationError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetQuery:
    """Documents of ``model`` whose id is in ``ids`` and whose fields match ``conditions``."""

    model: type
    ids: tuple[str, ...]
    conditions: Mapping[str, Any] = field(default_factory=dict)

    def where(self, **conditions: Any) -> TargetQuery:
        """Return a copy narrowed by additional field conditions."""
        if not conditions:
            return self
        return TargetQuery(self.model, self.ids, {**self.conditions, **conditions})


class DocumentStore(Protocol):
    def find(self, query: TargetQuery) -> list[Any]: ...

    def count(self, query: TargetQuery) -> int: ...

    def delete_all(self, query: TargetQuery) -> int: ...

    def destroy_all(self, query: TargetQuery) -> int: ...


class DocumentFactory(Protocol):
    def instantiate(self, model: type, attributes: Mapping[str, Any]) -> Any: ...


def identify(document: Any) -> str:
    """Ensure ``document`` has an identifier, assigning a UUID if it is missing."""
    assign = getattr(document, "identify", None)
    if callable(assign):
        return assign()
    if not getattr(document, "id", None):
        document.id = str(uuid.uuid4())
    return document.id


class SqlDocumentStore:
    """DocumentStore backed by a SQLAlchemy session."""

    def __init__(self, session: Session):
        """Initialize store with a database session."""
        self.session = session

    def _criteria(self, query: TargetQuery) -> list:
        model = query.model
        criteria = [model.id.in_(query.ids)]
        for name, value in query.conditions.items():
            column = getattr(model, name, None)
            if column is None:
                raise StoreError(f"{model.__name__} has no field '{name}'")
            criteria.append(column == value)
        return criteria

    def find(self, query: TargetQuery) -> list[Any]:
        """Fetch every matching document."""
        if not query.ids:
            return []
        stmt = select(query.model).where(*self._criteria(query))
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch {query.model.__name__}: {str(e)}", e) from e

    def count(self, query: TargetQuery) -> int:
        """Count matching documents."""
        if not query.ids:
            return 0
        stmt = select(func.count()).select_from(query.model).where(*self._criteria(query))
        try:
            return self.session.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count {query.model.__name__}: {str(e)}", e) from e

    def delete_all(self, query: TargetQuery) -> int:
        """Remove matching documents with a single bulk DELETE (no per-object hooks)."""
        if not query.ids:
            return 0
        stmt = delete(query.model).where(*self._criteria(query))
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete {query.model.__name__}: {str(e)}", e) from e
        logger.debug(f"Bulk deleted {result.rowcount} {query.model.__name__} document(s)")
        return result.rowcount

    def destroy_all(self, query: TargetQuery) -> int:
        """
        Remove matching documents one at a time through the session.

        Each removal goes through ``Session.delete`` so mapper events and
        relationship cascades run for every document.
        """
        documents = self.find(query)
        try:
            for document in documents:
                self.session.delete(document)
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to destroy {query.model.__name__}: {str(e)}", e) from e
        logger.debug(f"Destroyed {len(documents)} {query.model.__name__} document(s)")
        return len(documents)


class ModelFactory:
    """DocumentFactory that calls the model constructor with the attributes."""

    def instantiate(self, model: type, attributes: Mapping[str, Any]) -> Any:
        try:
            document = model(**dict(attributes))
        except (TypeError, ValueError) as e:
            raise InstantiationError(model.__name__, e) from e
        identify(document)
        return document
