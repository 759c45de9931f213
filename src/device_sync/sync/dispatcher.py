"""Outgoing sync requests and the simple sync messages with no merge step."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from device_sync.core.address import RecipientAddress
from device_sync.core.entities import StickerPack
from device_sync.core.trust import TrustLevel
from device_sync.sync.context import SyncContext
from device_sync.sync.messages import (
    BlockedListMessage,
    ConfigurationMessage,
    FetchLatestMessage,
    FetchType,
    KeysMessage,
    RequestMessage,
    SendMessageResult,
    StickerPackOperationMessage,
    StickerPackOperationsMessage,
    StickerPackOperationType,
    SyncMessage,
    SyncRequestType,
    VerifiedMessage,
)
from device_sync.utils.timeutils import now_millis

logger = logging.getLogger(__name__)

# Order in which a full sync is requested from linked devices
FULL_SYNC_ORDER: tuple[SyncRequestType, ...] = (
    SyncRequestType.GROUPS,
    SyncRequestType.CONTACTS,
    SyncRequestType.BLOCKED,
    SyncRequestType.CONFIGURATION,
    SyncRequestType.KEYS,
    SyncRequestType.PNI_IDENTITY,
)


class SyncRequestDispatcher:
    """
    Sends fire-and-forget sync messages to linked devices.

    Requests are not correlated with their responses: a linked device answers
    with an ordinary sync message that is routed to the importer.
    """

    def __init__(self, context: SyncContext) -> None:
        self._ctx = context

    async def _send(self, message: SyncMessage) -> SendMessageResult:
        logger.debug("Sending %s", type(message).__name__)
        return await self._ctx.sender.send_sync_message(message)

    # ── Requests ──────────────────────────────────────────────────────────

    async def request_sync_data(self, request_type: SyncRequestType) -> SendMessageResult:
        return await self._send(RequestMessage(type=request_type))

    async def request_all_sync_data(self) -> list[SendMessageResult]:
        """Ask linked devices for everything they can sync, in a fixed order."""
        results = []
        for request_type in FULL_SYNC_ORDER:
            results.append(await self.request_sync_data(request_type))
        logger.info("Requested full sync from linked devices")
        return results

    async def request_sync_keys(self) -> SendMessageResult:
        return await self.request_sync_data(SyncRequestType.KEYS)

    async def request_sync_pni_identity(self) -> SendMessageResult:
        return await self.request_sync_data(SyncRequestType.PNI_IDENTITY)

    # ── Direct pushes ─────────────────────────────────────────────────────

    async def send_blocked_list(self) -> SendMessageResult:
        """Send the blocked contacts and the blocked groups of every version."""
        addresses = []
        for recipient_id, contact in await self._ctx.contacts.get_contacts():
            if contact.is_blocked:
                addresses.append(await self._ctx.recipients.get_address(recipient_id))

        group_ids = [group.group_id for group in await self._ctx.groups.get_groups() if group.blocked]

        return await self._send(
            BlockedListMessage(addresses=tuple(addresses), group_ids=tuple(group_ids))
        )

    async def send_verified_message(
        self,
        destination: RecipientAddress,
        identity_key: bytes,
        trust_level: TrustLevel,
    ) -> SendMessageResult:
        return await self._send(
            VerifiedMessage(
                destination=destination,
                identity_key=identity_key,
                state=trust_level.to_verified_state(),
                timestamp=now_millis(),
            )
        )

    async def send_keys_message(self) -> SendMessageResult:
        """Send the storage key and PIN master key, creating them if needed."""
        storage_key = await self._ctx.account.get_or_create_storage_key()
        master_key = await self._ctx.account.get_or_create_pin_master_key()
        return await self._send(KeysMessage(storage_key=storage_key, master_key=master_key))

    async def send_sticker_operations_message(
        self,
        install: Iterable[StickerPack] = (),
        remove: Iterable[StickerPack] = (),
    ) -> SendMessageResult:
        """Send sticker pack changes. Installs always precede removals."""
        operations = [
            StickerPackOperationMessage(pack.pack_id, pack.pack_key, StickerPackOperationType.INSTALL)
            for pack in install
        ]
        operations += [
            StickerPackOperationMessage(pack.pack_id, pack.pack_key, StickerPackOperationType.REMOVE)
            for pack in remove
        ]
        return await self._send(StickerPackOperationsMessage(operations=tuple(operations)))

    async def send_configuration_message(self) -> SendMessageResult:
        config = await self._ctx.configuration.get_configuration()
        return await self._send(
            ConfigurationMessage(
                read_receipts=config.read_receipts,
                unidentified_delivery_indicators=config.unidentified_delivery_indicators,
                typing_indicators=config.typing_indicators,
                link_previews=config.link_previews,
            )
        )

    async def send_sync_fetch_profile_message(self) -> SendMessageResult:
        return await self._send(FetchLatestMessage(type=FetchType.LOCAL_PROFILE))

    async def send_sync_fetch_storage_message(self) -> SendMessageResult:
        return await self._send(FetchLatestMessage(type=FetchType.STORAGE_MANIFEST))
