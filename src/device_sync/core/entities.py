"""Local account entities the sync engine reads from and merges into."""

from __future__ import annotations

from dataclasses import dataclass, field

from device_sync.core.records import GROUP_V1_ID_LENGTH, GROUP_V2_ID_LENGTH

RecipientId = int


@dataclass(frozen=True)
class Contact:
    """
    A locally stored contact.

    Attributes:
        given_name: Given name set on this account (None if never set)
        family_name: Family name set on this account
        color: Conversation color tag
        message_expiration_time: Disappearing-message timer in seconds (0 = off)
        is_blocked: Whether the contact is blocked
        is_archived: Whether the conversation is archived
    """

    given_name: str | None = None
    family_name: str | None = None
    color: str | None = None
    message_expiration_time: int = 0
    is_blocked: bool = False
    is_archived: bool = False

    @property
    def name(self) -> str | None:
        """Display name joined from given and family name."""
        parts = [p for p in (self.given_name, self.family_name) if p]
        return " ".join(parts) if parts else None

    @property
    def has_name(self) -> bool:
        return self.given_name is not None or self.family_name is not None


@dataclass(frozen=True)
class GroupInfoV1:
    """A version-1 group: flat member list keyed by a 16-byte id."""

    group_id: bytes
    name: str | None = None
    members: frozenset[RecipientId] = field(default_factory=frozenset)
    color: str | None = None
    message_expiration_time: int = 0
    blocked: bool = False
    archived: bool = False

    def __post_init__(self) -> None:
        if len(self.group_id) != GROUP_V1_ID_LENGTH:
            raise ValueError(f"Version-1 group id must be {GROUP_V1_ID_LENGTH} bytes")

    def is_member(self, recipient_id: RecipientId) -> bool:
        return recipient_id in self.members


@dataclass(frozen=True)
class GroupInfoV2:
    """A centrally managed group. Only its blocked state takes part in sync."""

    group_id: bytes
    blocked: bool = False
    archived: bool = False

    def __post_init__(self) -> None:
        if len(self.group_id) != GROUP_V2_ID_LENGTH:
            raise ValueError(f"Version-2 group id must be {GROUP_V2_ID_LENGTH} bytes")


GroupInfo = GroupInfoV1 | GroupInfoV2


@dataclass(frozen=True)
class StickerPack:
    """An installed sticker pack."""

    pack_id: bytes
    pack_key: bytes
