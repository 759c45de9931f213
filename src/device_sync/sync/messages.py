"""Sync message payloads handed to the message transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import BinaryIO

from device_sync.core.address import RecipientAddress
from device_sync.core.records import OCTET_STREAM
from device_sync.core.trust import VerifiedState


class SyncRequestType(StrEnum):
    """Kinds of data a device can ask its linked devices to send."""

    GROUPS = "groups"
    CONTACTS = "contacts"
    BLOCKED = "blocked"
    CONFIGURATION = "configuration"
    KEYS = "keys"
    PNI_IDENTITY = "pni_identity"


class FetchType(StrEnum):
    """Kinds of remote state linked devices are told to re-fetch."""

    LOCAL_PROFILE = "local_profile"
    STORAGE_MANIFEST = "storage_manifest"


class StickerPackOperationType(StrEnum):
    INSTALL = "install"
    REMOVE = "remove"


@dataclass(frozen=True)
class AttachmentStream:
    """A local byte stream wrapped for upload. Valid for one send only."""

    stream: BinaryIO
    length: int
    content_type: str = OCTET_STREAM


@dataclass(frozen=True)
class RequestMessage:
    type: SyncRequestType


@dataclass(frozen=True)
class GroupsMessage:
    attachment: AttachmentStream


@dataclass(frozen=True)
class ContactsMessage:
    attachment: AttachmentStream
    complete: bool = True


@dataclass(frozen=True)
class BlockedListMessage:
    addresses: tuple[RecipientAddress, ...] = ()
    group_ids: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class VerifiedMessage:
    destination: RecipientAddress
    identity_key: bytes
    state: VerifiedState
    timestamp: int


@dataclass(frozen=True)
class KeysMessage:
    storage_key: bytes | None = None
    master_key: bytes | None = None


@dataclass(frozen=True)
class StickerPackOperationMessage:
    pack_id: bytes
    pack_key: bytes
    type: StickerPackOperationType


@dataclass(frozen=True)
class StickerPackOperationsMessage:
    operations: tuple[StickerPackOperationMessage, ...] = ()


@dataclass(frozen=True)
class ConfigurationMessage:
    """Account preferences; None means the preference was never set."""

    read_receipts: bool | None = None
    unidentified_delivery_indicators: bool | None = None
    typing_indicators: bool | None = None
    link_previews: bool | None = None


@dataclass(frozen=True)
class FetchLatestMessage:
    type: FetchType


SyncMessage = (
    RequestMessage
    | GroupsMessage
    | ContactsMessage
    | BlockedListMessage
    | VerifiedMessage
    | KeysMessage
    | StickerPackOperationsMessage
    | ConfigurationMessage
    | FetchLatestMessage
)


@dataclass(frozen=True)
class SendMessageResult:
    """Outcome reported by the transport for one sync message."""

    success: bool = True
    recipient_count: int = 0
    errors: list[str] = field(default_factory=list)
