"""Lazy loading of the documents referenced by a parent's id array."""

from __future__ import annotations

import logging
from typing import Any

from docref.relations.declaration import RelationDeclaration
from docref.relations.fields import read_ids
from docref.storage.store import DocumentStore, TargetQuery

logger = logging.getLogger(__name__)


class LazyLoader:
    """Fetches the targets of one association at most once until reset."""

    def __init__(self, store: DocumentStore, parent: Any, declaration: RelationDeclaration):
        self.store = store
        self.parent = parent
        self.declaration = declaration
        self._target: list[Any] | None = None

    @property
    def loaded(self) -> bool:
        return self._target is not None

    def build_query(self) -> TargetQuery:
        """Targets whose id is currently in the parent's id array."""
        ids = read_ids(self.parent, self.declaration.foreign_key)
        return TargetQuery(self.declaration.target, tuple(ids))

    def load(self) -> list[Any]:
        """
        Return the materialized targets, fetching them on first use.

        Documents come back in the order of the parent's id array. A store
        failure leaves the loader unloaded.
        """
        if self._target is None:
            query = self.build_query()
            logger.debug(f"Loading {self.declaration} for {self.parent!r} ({len(query.ids)} ids)")
            documents = self.store.find(query)
            by_id = {document.id: document for document in documents}
            self._target = [by_id[target_id] for target_id in query.ids if target_id in by_id]
        return self._target

    def prime(self, documents: list[Any]) -> None:
        """Use ``documents`` as the materialized targets without fetching."""
        self._target = list(documents)

    def discard(self, target_id: str) -> None:
        """Drop every loaded target with ``target_id`` without fetching."""
        if self._target is not None:
            self._target[:] = [document for document in self._target if document.id != target_id]

    def reset(self) -> None:
        self._target = None
