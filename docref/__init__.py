"""Doc-Ref: one-to-many relationships stored as id arrays on the parent document."""

from docref.exceptions import (
    ConfigurationError,
    DocRefError,
    InstantiationError,
    RelationKindError,
    StoreError,
)
from docref.relations import (
    ArrayAssociation,
    DocumentGraph,
    RelationDeclaration,
    RelationKind,
    RelationRegistry,
)

__version__ = "0.1.0"

__all__ = [
    "ArrayAssociation",
    "ConfigurationError",
    "DocRefError",
    "DocumentGraph",
    "InstantiationError",
    "RelationDeclaration",
    "RelationKind",
    "RelationKindError",
    "RelationRegistry",
    "StoreError",
]
