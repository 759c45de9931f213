"""Wire-level views of contacts and groups exchanged during sync.

Records are ephemeral: they exist only while a stream is being written or
read. The durable state lives in the stores (see ``device_sync.storage``).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from device_sync.core.address import RecipientAddress
from device_sync.core.field_update import UNCHANGED, FieldUpdate
from device_sync.core.trust import VerifiedState

GROUP_V1_ID_LENGTH = 16
GROUP_V2_ID_LENGTH = 32
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class AvatarAttachment:
    """Avatar bytes carried inline after their record."""

    content_type: str
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class VerifiedRecord:
    """Verified identity block of a contact record.

    The timestamp is not part of the wire format: a decoded record is stamped
    with its receive time, so it is ignored when comparing records.
    """

    destination: RecipientAddress
    identity_key: bytes
    state: VerifiedState
    timestamp: int = field(default=0, compare=False)


@dataclass(frozen=True)
class ContactRecord:
    """One contact as serialized in a contacts sync stream.

    Optional fields use ``FieldUpdate``: UNCHANGED means the peer did not send
    the field and the local value must be kept. ``blocked`` and ``archived``
    are always present and always overwrite.
    """

    address: RecipientAddress
    name: FieldUpdate[str] = UNCHANGED
    avatar: FieldUpdate[AvatarAttachment] = UNCHANGED
    color: FieldUpdate[str] = UNCHANGED
    verified: FieldUpdate[VerifiedRecord] = UNCHANGED
    profile_key: FieldUpdate[bytes] = UNCHANGED
    blocked: bool = False
    expiration_timer: FieldUpdate[int] = UNCHANGED
    inbox_position: FieldUpdate[int] = UNCHANGED
    archived: bool = False


@dataclass(frozen=True)
class GroupRecord:
    """One version-1 group as serialized in a groups sync stream.

    The group id is the merge key and never changes.
    """

    group_id: bytes
    name: FieldUpdate[str] = UNCHANGED
    members: tuple[RecipientAddress, ...] = ()
    avatar: FieldUpdate[AvatarAttachment] = UNCHANGED
    active: bool = True
    expiration_timer: FieldUpdate[int] = UNCHANGED
    color: FieldUpdate[str] = UNCHANGED
    blocked: bool = False
    inbox_position: FieldUpdate[int] = UNCHANGED
    archived: bool = False
