"""Sync engine facade for keeping the devices of one account in sync."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import BinaryIO

from device_sync.core.address import RecipientAddress
from device_sync.core.entities import StickerPack
from device_sync.core.trust import TrustLevel
from device_sync.sync.avatars import AvatarTransferAdapter
from device_sync.sync.context import SyncContext
from device_sync.sync.dispatcher import SyncRequestDispatcher
from device_sync.sync.exporter import SyncExporter
from device_sync.sync.importer import SyncImporter
from device_sync.sync.messages import (
    ContactsMessage,
    GroupsMessage,
    SendMessageResult,
    SyncRequestType,
)
from device_sync.sync.protocol import ImportReport

logger = logging.getLogger(__name__)


class SyncEngine:
    """Top-level entry point for device sync.

    Ties together the three directions of sync:
    1. Request data from linked devices (dispatcher)
    2. Push local contacts and groups to them (exporter)
    3. Merge what they push back (importer)

    The engine holds no state between calls. Callers must not run two
    imports for the same account concurrently.
    """

    def __init__(self, context: SyncContext) -> None:
        self._ctx = context
        self._avatars = AvatarTransferAdapter(
            context.avatars,
            context.attachments,
            context.config.max_avatar_size,
        )
        self._exporter = SyncExporter(context, self._avatars)
        self._importer = SyncImporter(context, self._avatars)
        self._dispatcher = SyncRequestDispatcher(context)

    @property
    def context(self) -> SyncContext:
        return self._ctx

    # ── Export ────────────────────────────────────────────────────────────

    async def export_groups(self) -> SendMessageResult | None:
        return await self._exporter.export_groups()

    async def export_contacts(self) -> SendMessageResult | None:
        return await self._exporter.export_contacts()

    # ── Import ────────────────────────────────────────────────────────────

    async def import_groups(self, stream: BinaryIO) -> ImportReport:
        return await self._importer.import_groups(stream)

    async def import_contacts(self, stream: BinaryIO) -> ImportReport:
        return await self._importer.import_contacts(stream)

    async def handle_groups_message(self, message: GroupsMessage) -> ImportReport:
        """Import the groups attachment received from a linked device."""
        with message.attachment.stream as stream:
            return await self._importer.import_groups(stream)

    async def handle_contacts_message(self, message: ContactsMessage) -> ImportReport:
        """Import the contacts attachment received from a linked device."""
        if not message.complete:
            logger.debug("Received partial contacts sync, merging what was sent")
        with message.attachment.stream as stream:
            return await self._importer.import_contacts(stream)

    # ── Requests and direct pushes ────────────────────────────────────────

    async def request_sync_data(self, request_type: SyncRequestType) -> SendMessageResult:
        return await self._dispatcher.request_sync_data(request_type)

    async def request_all_sync_data(self) -> list[SendMessageResult]:
        return await self._dispatcher.request_all_sync_data()

    async def request_sync_keys(self) -> SendMessageResult:
        return await self._dispatcher.request_sync_keys()

    async def request_sync_pni_identity(self) -> SendMessageResult:
        return await self._dispatcher.request_sync_pni_identity()

    async def send_blocked_list(self) -> SendMessageResult:
        return await self._dispatcher.send_blocked_list()

    async def send_verified_message(
        self,
        destination: RecipientAddress,
        identity_key: bytes,
        trust_level: TrustLevel,
    ) -> SendMessageResult:
        return await self._dispatcher.send_verified_message(destination, identity_key, trust_level)

    async def send_keys_message(self) -> SendMessageResult:
        return await self._dispatcher.send_keys_message()

    async def send_sticker_operations_message(
        self,
        install: Iterable[StickerPack] = (),
        remove: Iterable[StickerPack] = (),
    ) -> SendMessageResult:
        return await self._dispatcher.send_sticker_operations_message(install, remove)

    async def send_configuration_message(self) -> SendMessageResult:
        return await self._dispatcher.send_configuration_message()

    async def send_sync_fetch_profile_message(self) -> SendMessageResult:
        return await self._dispatcher.send_sync_fetch_profile_message()

    async def send_sync_fetch_storage_message(self) -> SendMessageResult:
        return await self._dispatcher.send_sync_fetch_storage_message()
