"""Recipient addressing for sync records."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


def parse_aci(value: str | None) -> str | None:
    """Normalize a service identifier string, or return None if it is invalid."""
    if not value:
        return None
    try:
        return str(UUID(value))
    except ValueError:
        return None


@dataclass(frozen=True)
class RecipientAddress:
    """
    Address of an account as it appears in sync records.

    An account is identified by its service identifier (ACI, a UUID) and/or
    its E.164 phone number. Older peers only know the number, newer ones may
    only send the ACI, so two addresses refer to the same account when either
    identifier matches.

    Attributes:
        aci: Service identifier in canonical UUID form
        number: E.164 phone number
    """

    aci: str | None = None
    number: str | None = None

    def __post_init__(self) -> None:
        if self.aci is not None:
            aci = parse_aci(self.aci)
            if aci is None:
                raise ValueError(f"Invalid ACI: {self.aci!r}")
            object.__setattr__(self, "aci", aci)
        if self.aci is None and self.number is None:
            raise ValueError("RecipientAddress needs an aci or a number")

    @property
    def identifier(self) -> str:
        """Preferred identifier: the ACI when known, else the number."""
        return self.aci or self.number or ""

    def matches(self, other: RecipientAddress) -> bool:
        """Return True if both addresses share an identifier."""
        if self.aci is not None and self.aci == other.aci:
            return True
        return self.number is not None and self.number == other.number

    def __str__(self) -> str:
        if self.aci and self.number:
            return f"{self.aci} ({self.number})"
        return self.identifier
