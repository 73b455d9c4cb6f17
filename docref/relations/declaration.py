"""Relationship declarations and the per-type registry that holds them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from sqlalchemy import JSON, inspect

from docref.exceptions import ConfigurationError, RelationKindError


class RelationKind(enum.Enum):
    """How a relationship stores its reference on the declaring document."""

    TO_MANY_ARRAY = "to_many_array"  # ordered array of target ids
    TO_ONE = "to_one"  # single target id


@dataclass(frozen=True)
class RelationDeclaration:
    """A relationship declared on ``owner`` pointing at ``target`` documents."""

    name: str
    owner: type
    target: type
    foreign_key: str
    kind: RelationKind = RelationKind.TO_MANY_ARRAY
    inverse_of: str | None = None

    @property
    def is_array(self) -> bool:
        return self.kind is RelationKind.TO_MANY_ARRAY

    def __str__(self) -> str:
        return f"{self.owner.__name__}.{self.name}"


class RelationRegistry:
    """
    Immutable map of model type -> relationship name -> declaration.

    Built once from the full set of declarations. Lookups walk the model's
    MRO, so a subclass sees the relationships declared on its bases.
    """

    def __init__(self, declarations: Iterable[RelationDeclaration]):
        table: dict[type, dict[str, RelationDeclaration]] = {}
        for declaration in declarations:
            relations = table.setdefault(declaration.owner, {})
            if declaration.name in relations:
                raise ConfigurationError(
                    declaration.owner.__name__,
                    declaration.name,
                    f"Relationship {declaration} is declared twice",
                )
            relations[declaration.name] = declaration
        self._table = MappingProxyType(
            {owner: MappingProxyType(relations) for owner, relations in table.items()}
        )

    def __iter__(self) -> Iterator[RelationDeclaration]:
        for relations in self._table.values():
            yield from relations.values()

    def relations_for(self, model: type) -> Mapping[str, RelationDeclaration]:
        """All relationships visible on ``model``, including inherited ones."""
        merged: dict[str, RelationDeclaration] = {}
        for cls in reversed(model.__mro__):
            merged.update(self._table.get(cls, {}))
        return MappingProxyType(merged)

    def get(self, model: type, name: str) -> RelationDeclaration:
        """Look up one relationship, raising ConfigurationError if it is not declared."""
        declaration = self.relations_for(model).get(name)
        if declaration is None:
            raise ConfigurationError(model.__name__, name)
        return declaration

    def validate(self) -> RelationRegistry:
        """
        Check every declaration against the model it lives on and its inverse.

        Raises:
            ConfigurationError: If an inverse_of names an undeclared relationship
            RelationKindError: If a storage field is missing, has the wrong
                shape for its kind, or the inverse points elsewhere
        """
        for declaration in self:
            _check_storage_field(declaration.owner, declaration.foreign_key, declaration)
            if declaration.inverse_of is None:
                continue

            target_name = declaration.target.__name__
            try:
                inverse = self.get(declaration.target, declaration.inverse_of)
            except ConfigurationError as e:
                raise ConfigurationError(
                    target_name,
                    declaration.inverse_of,
                    f"Inverse of {declaration} names '{declaration.inverse_of}', "
                    f"which is not declared on {target_name}",
                ) from e

            if not issubclass(declaration.owner, inverse.target):
                raise RelationKindError(
                    target_name,
                    inverse.name,
                    f"Inverse {inverse} targets {inverse.target.__name__}, "
                    f"not {declaration.owner.__name__}",
                )
            if inverse.inverse_of is not None and inverse.inverse_of != declaration.name:
                raise RelationKindError(
                    target_name,
                    inverse.name,
                    f"Inverse {inverse} points back at '{inverse.inverse_of}', "
                    f"not '{declaration.name}'",
                )
        return self


def _check_storage_field(model: type, field_name: str, declaration: RelationDeclaration) -> None:
    mapper = inspect(model, raiseerr=False)
    if mapper is None:
        # Plain classes keep their fields on instances only
        return

    column = mapper.columns.get(field_name)
    if column is None:
        raise RelationKindError(
            model.__name__,
            declaration.name,
            f"{model.__name__} has no column '{field_name}' for {declaration}",
        )
    is_array_column = isinstance(column.type, JSON)
    if declaration.is_array != is_array_column:
        expected = "an id array" if declaration.is_array else "a single id"
        raise RelationKindError(
            model.__name__,
            declaration.name,
            f"{declaration} is declared {declaration.kind.value} but column "
            f"'{field_name}' does not store {expected}",
        )
