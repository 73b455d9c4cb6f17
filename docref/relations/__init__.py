"""Array-referenced relationships between stored documents."""

from docref.relations.array_association import ArrayAssociation
from docref.relations.declaration import RelationDeclaration, RelationKind, RelationRegistry
from docref.relations.graph import DocumentGraph
from docref.relations.inverse import InverseResolver, ResolvedInverse
from docref.relations.loader import LazyLoader

__all__ = [
    "ArrayAssociation",
    "DocumentGraph",
    "InverseResolver",
    "LazyLoader",
    "RelationDeclaration",
    "RelationKind",
    "RelationRegistry",
    "ResolvedInverse",
]
