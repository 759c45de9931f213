"""device_sync - Contact and group synchronization between linked devices."""

from device_sync.core.address import RecipientAddress
from device_sync.core.records import ContactRecord, GroupRecord
from device_sync.sync.context import SyncContext
from device_sync.sync.protocol import ImportReport, SyncStatus
from device_sync.sync.sync_engine import SyncEngine
from device_sync.transport.base import MessageSender, TransportError

__version__ = "0.1.0"

__all__ = [
    # Records
    "RecipientAddress",
    "ContactRecord",
    "GroupRecord",
    # Engine
    "SyncContext",
    "SyncEngine",
    "ImportReport",
    "SyncStatus",
    # Transport
    "MessageSender",
    "TransportError",
    # Version
    "__version__",
]
