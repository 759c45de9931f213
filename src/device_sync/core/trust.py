"""Identity trust levels and their wire representation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum

IDENTITY_KEY_LENGTH = 33
IDENTITY_KEY_TYPE = 0x05


class VerifiedState(IntEnum):
    """Verified state as encoded in sync records."""

    DEFAULT = 0
    VERIFIED = 1
    UNVERIFIED = 2


class TrustLevel(StrEnum):
    """How strongly this device vouches for a peer's identity key."""

    UNTRUSTED = "untrusted"  # unverified-low
    TRUSTED_UNVERIFIED = "trusted_unverified"  # unverified-default
    TRUSTED_VERIFIED = "trusted_verified"  # verified

    @classmethod
    def from_verified_state(cls, state: VerifiedState) -> TrustLevel:
        if state == VerifiedState.VERIFIED:
            return cls.TRUSTED_VERIFIED
        if state == VerifiedState.UNVERIFIED:
            return cls.UNTRUSTED
        return cls.TRUSTED_UNVERIFIED

    def to_verified_state(self) -> VerifiedState:
        if self is TrustLevel.TRUSTED_VERIFIED:
            return VerifiedState.VERIFIED
        if self is TrustLevel.UNTRUSTED:
            return VerifiedState.UNVERIFIED
        return VerifiedState.DEFAULT


def is_valid_identity_key(key: bytes) -> bool:
    """Check the serialized form of a Curve25519 identity public key."""
    return len(key) == IDENTITY_KEY_LENGTH and key[0] == IDENTITY_KEY_TYPE


@dataclass(frozen=True)
class IdentityTrustEntry:
    """Trust state recorded for one (address, identity key) pair.

    The identity store owns the key material; the sync engine only reads and
    writes ``trust_level`` and ``added_at``.
    """

    identity_key: bytes
    trust_level: TrustLevel
    added_at: int  # epoch milliseconds
