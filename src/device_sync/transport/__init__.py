"""Message transport interfaces used by the sync engine."""

from device_sync.transport.base import (
    AttachmentRetriever,
    InlineAttachmentRetriever,
    MessageSender,
    TransportError,
)

__all__ = [
    "AttachmentRetriever",
    "InlineAttachmentRetriever",
    "MessageSender",
    "TransportError",
]
