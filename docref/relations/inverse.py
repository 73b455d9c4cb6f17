"""Resolution of the counterpart relationship declared on target documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from docref.exceptions import ConfigurationError
from docref.relations.declaration import RelationDeclaration, RelationKind, RelationRegistry


@dataclass(frozen=True)
class ResolvedInverse:
    """The inverse declaration found on a target document's type."""

    declaration: RelationDeclaration

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def kind(self) -> RelationKind:
        return self.declaration.kind

    @property
    def foreign_key(self) -> str:
        return self.declaration.foreign_key


class InverseResolver:
    """Finds the inverse of one relationship on the documents it targets."""

    def __init__(self, registry: RelationRegistry, declaration: RelationDeclaration):
        self.registry = registry
        self.declaration = declaration
        self._resolved: dict[type, ResolvedInverse] = {}

    @property
    def has_inverse(self) -> bool:
        return self.declaration.inverse_of is not None

    def resolve(self, document: Any) -> ResolvedInverse | None:
        """
        Look up the inverse declaration on ``document``'s type.

        Returns:
            The resolved inverse, or None when the relationship has no inverse_of

        Raises:
            ConfigurationError: If inverse_of is not declared on the document's type
        """
        if not self.has_inverse:
            return None

        model = type(document)
        resolved = self._resolved.get(model)
        if resolved is None:
            try:
                inverse = self.registry.get(model, self.declaration.inverse_of)
            except ConfigurationError as e:
                raise ConfigurationError(
                    model.__name__,
                    self.declaration.inverse_of,
                    f"Inverse of {self.declaration} names '{self.declaration.inverse_of}', "
                    f"which is not declared on {model.__name__}",
                ) from e
            resolved = ResolvedInverse(inverse)
            self._resolved[model] = resolved
        return resolved
