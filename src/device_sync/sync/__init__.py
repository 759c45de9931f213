"""Contact, group and settings synchronization between linked devices."""

from device_sync.sync.avatars import AvatarTransferAdapter
from device_sync.sync.codec import (
    DecodeStats,
    decode_contacts,
    decode_groups,
    encode_contacts,
    encode_groups,
    iter_contacts,
    iter_groups,
    write_contacts,
    write_groups,
)
from device_sync.sync.context import SyncContext
from device_sync.sync.dispatcher import SyncRequestDispatcher
from device_sync.sync.exporter import SyncExporter
from device_sync.sync.importer import SyncImporter
from device_sync.sync.messages import (
    AttachmentStream,
    ContactsMessage,
    GroupsMessage,
    SendMessageResult,
    SyncMessage,
    SyncRequestType,
)
from device_sync.sync.protocol import AvatarDownload, ImportReport, SyncStatus
from device_sync.sync.sync_engine import SyncEngine
from device_sync.sync.wire import RecordFormatError, StreamTruncatedError

__all__ = [
    # Codec
    "DecodeStats",
    "RecordFormatError",
    "StreamTruncatedError",
    "decode_contacts",
    "decode_groups",
    "encode_contacts",
    "encode_groups",
    "iter_contacts",
    "iter_groups",
    "write_contacts",
    "write_groups",
    # Messages
    "AttachmentStream",
    "ContactsMessage",
    "GroupsMessage",
    "SendMessageResult",
    "SyncMessage",
    "SyncRequestType",
    # Reports
    "AvatarDownload",
    "ImportReport",
    "SyncStatus",
    # Components
    "AvatarTransferAdapter",
    "SyncContext",
    "SyncExporter",
    "SyncImporter",
    "SyncRequestDispatcher",
    "SyncEngine",
]
