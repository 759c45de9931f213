"""Core data models for device_sync."""

from device_sync.core.address import RecipientAddress
from device_sync.core.entities import (
    Contact,
    GroupInfo,
    GroupInfoV1,
    GroupInfoV2,
    RecipientId,
    StickerPack,
)
from device_sync.core.field_update import UNCHANGED, FieldUpdate, SetTo, Unchanged
from device_sync.core.records import (
    AvatarAttachment,
    ContactRecord,
    GroupRecord,
    VerifiedRecord,
)
from device_sync.core.trust import IdentityTrustEntry, TrustLevel, VerifiedState

__all__ = [
    # Addressing
    "RecipientAddress",
    "RecipientId",
    # Local entities
    "Contact",
    "GroupInfo",
    "GroupInfoV1",
    "GroupInfoV2",
    "StickerPack",
    # Records
    "AvatarAttachment",
    "ContactRecord",
    "GroupRecord",
    "VerifiedRecord",
    # Field updates
    "UNCHANGED",
    "FieldUpdate",
    "SetTo",
    "Unchanged",
    # Trust
    "IdentityTrustEntry",
    "TrustLevel",
    "VerifiedState",
]
