"""Access to the id-valued storage fields on documents.

Updates always assign a new list to the field rather than mutating the
stored one, so mapped attributes register the change no matter how the
current value was loaded.
"""

from typing import Any, Iterable


def read_ids(document: Any, field_name: str) -> list[str]:
    """Copy of the id array stored in ``field_name`` (empty when unset)."""
    value = getattr(document, field_name, None)
    return list(value) if value else []


def append_ids(document: Any, field_name: str, ids: Iterable[str]) -> None:
    setattr(document, field_name, read_ids(document, field_name) + list(ids))


def remove_id(document: Any, field_name: str, target_id: str) -> None:
    """Drop every occurrence of ``target_id``, keeping the order of the rest."""
    remaining = [value for value in read_ids(document, field_name) if value != target_id]
    setattr(document, field_name, remaining)


def clear_ids(document: Any, field_name: str) -> None:
    setattr(document, field_name, [])
