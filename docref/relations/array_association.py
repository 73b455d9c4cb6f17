"""One-to-many relationships stored as an array of ids on the parent document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

from docref.relations.declaration import RelationDeclaration, RelationKind
from docref.relations.fields import append_ids, clear_ids, read_ids, remove_id
from docref.relations.inverse import InverseResolver
from docref.relations.loader import LazyLoader
from docref.storage.store import identify

if TYPE_CHECKING:
    from docref.relations.graph import DocumentGraph

logger = logging.getLogger(__name__)


def _flatten(documents: Iterable[Any]) -> list[Any]:
    flat = []
    for document in documents:
        if isinstance(document, (list, tuple)):
            flat.extend(_flatten(document))
        else:
            flat.append(document)
    return flat


class ArrayAssociation:
    """
    A parent's one-to-many relationship kept as an ordered array of target ids.

    Three views are kept in step: the id array field on the parent, the
    lazily loaded list of target documents, and the inverse field on each
    target when the declaration names an ``inverse_of``. Iterating the
    association loads the targets on first use.

    Example:
        person.post_ids == []
        posts = graph.association(person, "posts")
        posts.push(post)
        person.post_ids == [post.id]
        post.person_id == person.id
    """

    def __init__(self, parent: Any, declaration: RelationDeclaration, graph: DocumentGraph):
        self.parent = parent
        self.declaration = declaration
        self.graph = graph
        self._loader = LazyLoader(graph.store, parent, declaration)
        self._inverse = InverseResolver(graph.registry, declaration)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._loader.load())

    def __len__(self) -> int:
        return len(self._loader.load())

    def __getitem__(self, index: int | slice) -> Any:
        return self._loader.load()[index]

    def __contains__(self, document: Any) -> bool:
        return document in self._loader.load()

    def __repr__(self) -> str:
        state = "loaded" if self._loader.loaded else "unloaded"
        return f"<ArrayAssociation({self.declaration}, parent={self.parent!r}, {state})>"

    @property
    def ids(self) -> list[str]:
        """Copy of the parent's stored id array."""
        return read_ids(self.parent, self.declaration.foreign_key)

    @property
    def loaded(self) -> bool:
        return self._loader.loaded

    @property
    def has_inverse(self) -> bool:
        return self._inverse.has_inverse

    def load(self) -> list[Any]:
        """Materialize and return the targets (fetched at most once until reset)."""
        return self._loader.load()

    def reset(self) -> None:
        """Drop the loaded targets so the next access fetches again."""
        self._loader.reset()

    def push(self, *documents: Any) -> None:
        """
        Append documents to the relationship and link them back to the parent.

        Ids are appended to the parent's array in argument order. When an
        inverse is declared, each document gets the parent's id on its side
        too: appended to its id array for a to-many-array inverse, or stored
        in its reference field for a to-one inverse.

        Args:
            *documents: Documents to append (lists and tuples are flattened)
        """
        documents = _flatten(documents)
        self._append_local(documents)
        if self.has_inverse:
            self._push_onto_inverse(documents)
        logger.debug(f"Pushed {len(documents)} document(s) onto {self.declaration}")

    concat = push

    def append(self, document: Any) -> None:
        """Push a single document."""
        self.push(document)

    def build(self, attributes: Mapping[str, Any] | None = None, type_: type | None = None) -> Any:
        """
        Build a new document and push it onto the relationship.

        Args:
            attributes: Attributes for the new document
            type_: Model to build, defaults to the declared target

        Returns:
            The new, not yet persisted document

        Raises:
            InstantiationError: If the document cannot be built (nothing is linked)
        """
        self._loader.load()
        document = self.graph.factory.instantiate(
            type_ or self.declaration.target, attributes or {}
        )
        self.push(document)
        return document

    def dereference_all(self) -> None:
        """
        Unlink every target without deleting it.

        Removes the parent's id from each target's inverse field (every
        occurrence for an id array, the whole value for a single reference),
        clears the parent's id array and resets the association. A loaded
        counterpart association drops the parent from its cache in place.
        """
        targets = self._loader.load()
        if self.has_inverse:
            for document in targets:
                inverse = self._inverse.resolve(document)
                if inverse.kind is RelationKind.TO_MANY_ARRAY:
                    self.graph.association(document, inverse.name)._remove_local(self.parent)
                else:
                    setattr(document, inverse.foreign_key, None)
        clear_ids(self.parent, self.declaration.foreign_key)
        self.reset()
        logger.debug(f"Dereferenced {len(targets)} document(s) from {self.declaration}")

    def delete_all(self, conditions: Mapping[str, Any] | None = None) -> int:
        """
        Delete the targets from the store in bulk, without lifecycle hooks.

        Args:
            conditions: Optional field values the deleted targets must match

        Returns:
            The number of documents deleted
        """
        query = self._loader.build_query().where(**(conditions or {}))
        removed = self.graph.store.delete_all(query)
        self.reset()
        logger.debug(f"Deleted {removed} document(s) from {self.declaration}")
        return removed

    def destroy_all(self, conditions: Mapping[str, Any] | None = None) -> int:
        """
        Destroy the targets one by one so the store's lifecycle hooks run.

        Args:
            conditions: Optional field values the destroyed targets must match

        Returns:
            The number of documents destroyed
        """
        query = self._loader.build_query().where(**(conditions or {}))
        removed = self.graph.store.destroy_all(query)
        self.reset()
        logger.debug(f"Destroyed {removed} document(s) from {self.declaration}")
        return removed

    def where(self, **conditions: Any) -> list[Any]:
        """Fetch the targets matching field conditions. Not cached."""
        return self.graph.store.find(self._loader.build_query().where(**conditions))

    def count(self, **conditions: Any) -> int:
        """Count stored targets, optionally narrowed by field conditions."""
        return self.graph.store.count(self._loader.build_query().where(**conditions))

    def _append_local(self, documents: list[Any]) -> None:
        # One-sided append: touches only this parent's array and cache
        target = self._loader.load()
        ids = [identify(document) for document in documents]
        append_ids(self.parent, self.declaration.foreign_key, ids)
        target.extend(documents)

    def _remove_local(self, document: Any) -> None:
        # One-sided removal: drops every occurrence of document from this
        # parent's array, and from the cache only if it is already loaded
        remove_id(self.parent, self.declaration.foreign_key, document.id)
        self._loader.discard(document.id)

    def _push_onto_inverse(self, documents: list[Any]) -> None:
        parent_id = identify(self.parent)
        for document in documents:
            inverse = self._inverse.resolve(document)
            if inverse.kind is RelationKind.TO_MANY_ARRAY:
                self.graph.association(document, inverse.name)._append_local([self.parent])
            else:
                setattr(document, inverse.foreign_key, parent_id)

    @classmethod
    def instantiate(
        cls,
        parent: Any,
        declaration: RelationDeclaration,
        graph: DocumentGraph,
        target: list[Any] | None = None,
    ) -> ArrayAssociation:
        """Create an association, optionally starting from already loaded targets."""
        association = cls(parent, declaration, graph)
        if target is not None:
            association._loader.prime(target)
        return association

    @classmethod
    def update(
        cls,
        target: Iterable[Any],
        parent: Any,
        declaration: RelationDeclaration,
        graph: DocumentGraph,
    ) -> ArrayAssociation:
        """
        Replace the whole relationship on ``parent`` with ``target``.

        Existing targets are dereferenced first, then the new ones are pushed
        with their inverses linked.

        Returns:
            A fresh association already holding the new targets. It replaces
            the one the graph hands out for ``parent``.
        """
        target = _flatten(target)
        current = graph.association(parent, declaration.name)
        current.dereference_all()
        current.push(*target)
        logger.debug(f"Replaced {declaration} on {parent!r} with {len(target)} document(s)")
        association = cls.instantiate(parent, declaration, graph, target)
        graph.register(parent, declaration.name, association)
        return association
