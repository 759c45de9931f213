"""Per-field update semantics for sync records.

A field of an incoming record either carries a value that should be written
(``SetTo``) or was absent on the wire (``UNCHANGED``), in which case the local
value is kept. Modelling this as a tagged union rather than ``None`` keeps
"absent" distinct from "explicitly cleared" and makes each merge rule explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class Unchanged:
    """Marker for a field that was not present in the record."""

    _instance: Unchanged | None = None

    def __new__(cls) -> Unchanged:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


UNCHANGED = Unchanged()


@dataclass(frozen=True)
class SetTo(Generic[T]):
    """A field value that should overwrite the local one."""

    value: T


FieldUpdate = Union[Unchanged, SetTo[T]]  # noqa: UP007


def from_optional(value: T | None) -> FieldUpdate[T]:
    """Wrap an optional value: None becomes UNCHANGED."""
    if value is None:
        return UNCHANGED
    return SetTo(value)


def to_optional(update: FieldUpdate[T]) -> T | None:
    """Unwrap an update: UNCHANGED becomes None."""
    if isinstance(update, SetTo):
        return update.value
    return None


def apply(update: FieldUpdate[T], current: T) -> T:
    """Return the merged value: the update's value if set, else ``current``."""
    if isinstance(update, SetTo):
        return update.value
    return current
