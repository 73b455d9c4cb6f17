"""Storage layer for Doc-Ref."""

from docref.storage.database import Database
from docref.storage.store import (
    DocumentFactory,
    DocumentStore,
    ModelFactory,
    SqlDocumentStore,
    TargetQuery,
    identify,
)

__all__ = [
    "Database",
    "DocumentStore",
    "DocumentFactory",
    "SqlDocumentStore",
    "ModelFactory",
    "TargetQuery",
    "identify",
]
