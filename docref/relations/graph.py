"""Per-unit-of-work access to the array associations of loaded documents."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from docref.config import get_settings
from docref.exceptions import RelationKindError
from docref.relations.array_association import ArrayAssociation
from docref.relations.declaration import RelationDeclaration, RelationRegistry
from docref.storage.store import DocumentFactory, DocumentStore, ModelFactory, SqlDocumentStore

logger = logging.getLogger(__name__)


class DocumentGraph:
    """
    Hands out one association per document and relationship.

    An association is created the first time it is asked for and reused
    afterwards, so its loaded targets survive between calls. The graph keeps
    every document it has handed out an association for until that document
    is released or the graph itself is dropped. A graph is not thread-safe;
    use one per session.
    """

    def __init__(
        self,
        registry: RelationRegistry,
        store: DocumentStore,
        factory: DocumentFactory | None = None,
        validate: bool | None = None,
    ):
        """
        Initialize the graph.

        Args:
            registry: Relationship declarations for every model in the graph
            store: Store used to fetch and remove targets
            factory: Factory used by build(). Defaults to ModelFactory.
            validate: Check the registry up front. If None, uses settings.
        """
        if validate is None:
            validate = get_settings().validate_relations
        if validate:
            registry.validate()

        self.registry = registry
        self.store = store
        self.factory = factory or ModelFactory()
        self._associations: dict[Any, dict[str, ArrayAssociation]] = {}

    @classmethod
    def for_session(cls, session: Session, registry: RelationRegistry, **kwargs: Any) -> DocumentGraph:
        """Create a graph backed by a SQLAlchemy session."""
        return cls(registry, SqlDocumentStore(session), **kwargs)

    def declaration_for(self, document: Any, name: str) -> RelationDeclaration:
        """
        Look up an array relationship on a document's type.

        Raises:
            ConfigurationError: If the relationship is not declared
            RelationKindError: If the relationship does not store an id array
        """
        declaration = self.registry.get(type(document), name)
        if not declaration.is_array:
            raise RelationKindError(
                type(document).__name__,
                name,
                f"{declaration} stores a single id, not an id array",
            )
        return declaration

    def association(self, document: Any, name: str) -> ArrayAssociation:
        """Return the association for ``document.<name>``, creating it on first access."""
        associations = self._associations.setdefault(document, {})
        association = associations.get(name)
        if association is None:
            declaration = self.declaration_for(document, name)
            association = ArrayAssociation(document, declaration, self)
            associations[name] = association
        return association

    def register(self, document: Any, name: str, association: ArrayAssociation) -> None:
        """Make ``association`` the one handed out for ``document.<name>``."""
        self._associations.setdefault(document, {})[name] = association

    def assign(self, document: Any, name: str, targets: Iterable[Any]) -> ArrayAssociation:
        """Replace ``document.<name>`` wholesale with ``targets``."""
        declaration = self.declaration_for(document, name)
        return ArrayAssociation.update(targets, document, declaration, self)

    def release(self, document: Any | None = None) -> None:
        """
        Forget cached associations so their documents can be garbage collected.

        Args:
            document: Only forget this document's associations. If None, all.
        """
        if document is None:
            self._associations.clear()
        else:
            self._associations.pop(document, None)

    def invalidate(self, document: Any | None = None, name: str | None = None) -> None:
        """
        Reset cached associations so they fetch again on next access.

        Args:
            document: Only reset this document's associations. If None, all.
            name: Only reset this relationship. If None, every relationship.
        """
        if document is None:
            groups = list(self._associations.values())
        else:
            groups = [self._associations.get(document, {})]
        for associations in groups:
            for association_name, association in associations.items():
                if name is None or association_name == name:
                    association.reset()
