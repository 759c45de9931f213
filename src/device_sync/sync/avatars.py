"""Bridge between record avatars, the avatar store and the transport.

Avatars are cosmetic: a failure to fetch or store one is logged and never
affects the record it belongs to.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from device_sync.core.address import RecipientAddress
from device_sync.core.records import AvatarAttachment
from device_sync.storage.base import AvatarStore, StreamDetails
from device_sync.transport.base import AttachmentRetriever

logger = logging.getLogger(__name__)


class AvatarTransferAdapter:
    """Fetches avatars on import and attaches them on export."""

    def __init__(
        self,
        avatars: AvatarStore,
        attachments: AttachmentRetriever,
        max_avatar_size: int,
    ) -> None:
        self._avatars = avatars
        self._attachments = attachments
        self._max_avatar_size = max_avatar_size

    # ── Import side ──────────────────────────────────────────────────────

    async def fetch_and_store_contact_avatar(
        self, avatar: AvatarAttachment, address: RecipientAddress
    ) -> bool:
        """Download a contact avatar into the avatar store. Returns success."""

        async def _write(sink: BinaryIO) -> None:
            await self._attachments.retrieve_attachment(avatar, sink)

        try:
            await self._avatars.store_contact_avatar(address, _write)
        except Exception as e:
            logger.warning("Failed to download avatar for contact %s, ignoring: %s", address, e)
            return False
        return True

    async def fetch_and_store_group_avatar(self, avatar: AvatarAttachment, group_id: bytes) -> bool:
        """Download a group avatar into the avatar store. Returns success."""

        async def _write(sink: BinaryIO) -> None:
            await self._attachments.retrieve_attachment(avatar, sink)

        try:
            await self._avatars.store_group_avatar(group_id, _write)
        except Exception as e:
            logger.warning("Failed to download avatar for group %s, ignoring: %s", group_id.hex(), e)
            return False
        return True

    # ── Export side ──────────────────────────────────────────────────────

    async def build_contact_attachment(self, address: RecipientAddress) -> AvatarAttachment | None:
        """Wrap the stored avatar of a contact for export, if there is one."""
        details = await self._avatars.retrieve_contact_avatar(address)
        return self._read(details, f"contact {address}")

    async def build_group_attachment(self, group_id: bytes) -> AvatarAttachment | None:
        """Wrap the stored avatar of a group for export, if there is one."""
        details = await self._avatars.retrieve_group_avatar(group_id)
        return self._read(details, f"group {group_id.hex()}")

    def _read(self, details: StreamDetails | None, owner: str) -> AvatarAttachment | None:
        if details is None:
            return None
        with details.stream as stream:
            if details.length > self._max_avatar_size:
                logger.warning(
                    "Avatar of %s is too large to sync (%d bytes), leaving it out",
                    owner,
                    details.length,
                )
                return None
            data = stream.read(details.length)
        if not data:
            return None
        return AvatarAttachment(content_type=details.content_type, data=data)
