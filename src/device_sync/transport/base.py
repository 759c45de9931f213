"""Boundary to the encrypted message transport.

The transport owns sessions, encryption, attachment upload and delivery. The
sync engine only hands it finished sync messages and asks it to materialize
attachments it received.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from device_sync.core.records import AvatarAttachment
    from device_sync.sync.messages import SendMessageResult, SyncMessage


class TransportError(OSError):
    """Sending or fetching through the transport failed."""


class MessageSender(ABC):
    @abstractmethod
    async def send_sync_message(self, message: SyncMessage) -> SendMessageResult:
        """
        Send a sync message to all linked devices of the account.

        Attachment streams inside ``message`` are consumed before this
        returns.

        Raises:
            TransportError: If the message could not be sent
        """
        ...


class AttachmentRetriever(ABC):
    @abstractmethod
    async def retrieve_attachment(self, attachment: AvatarAttachment, sink: BinaryIO) -> None:
        """
        Write the content of a received attachment to ``sink``.

        Raises:
            TransportError: If the attachment could not be retrieved
        """
        ...


class InlineAttachmentRetriever(AttachmentRetriever):
    """Retriever for attachments whose bytes arrived inside the sync stream."""

    async def retrieve_attachment(self, attachment: AvatarAttachment, sink: BinaryIO) -> None:
        sink.write(attachment.data)
