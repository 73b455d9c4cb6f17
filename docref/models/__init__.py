"""Model base classes for Doc-Ref documents."""

from docref.models.base import Base, DocumentMixin, TimestampMixin, id_array_column

__all__ = ["Base", "DocumentMixin", "TimestampMixin", "id_array_column"]
