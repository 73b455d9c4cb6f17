"""Declarative base and shared mixins for stored documents."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all document models."""

    pass


class TimestampMixin:
    """Adds created/updated timestamps to a model."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class DocumentMixin:
    """Adds a string identifier that can be assigned before the document is stored."""

    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    def identify(self) -> str:
        """Assign a UUID identifier if the document does not have one yet."""
        if not self.id:
            self.id = str(uuid.uuid4())
        return self.id


def id_array_column(**kwargs: Any) -> Mapped[Optional[list[str]]]:
    """
    Column holding an ordered array of document identifiers.

    The list is wrapped in MutableList so appends and removals made in place
    are picked up by the session.
    """
    kwargs.setdefault("nullable", True)
    kwargs.setdefault("default", list)
    return mapped_column(MutableList.as_mutable(JSON), **kwargs)
