"""Builds outgoing contacts and groups sync attachments from local state."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from device_sync.core.entities import Contact, GroupInfoV1, RecipientId
from device_sync.core.field_update import UNCHANGED, FieldUpdate, SetTo, from_optional
from device_sync.core.records import ContactRecord, GroupRecord, VerifiedRecord
from device_sync.sync.avatars import AvatarTransferAdapter
from device_sync.sync.codec import write_contact, write_group
from device_sync.sync.context import SyncContext
from device_sync.sync.messages import (
    AttachmentStream,
    ContactsMessage,
    GroupsMessage,
    SendMessageResult,
    SyncMessage,
)

logger = logging.getLogger(__name__)


@contextmanager
def scoped_temp_file(directory: str | None, prefix: str) -> Iterator[Path]:
    """Create an empty temporary file that is removed on every exit path.

    A failure to remove the file is logged and never raised.
    """
    with tempfile.NamedTemporaryFile(dir=directory, prefix=prefix, delete=False) as handle:
        path = Path(handle.name)
    try:
        yield path
    finally:
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Failed to delete %s temp file %s, ignoring: %s", prefix, path, e)


class SyncExporter:
    """Serializes local contacts and groups and sends them to linked devices."""

    def __init__(self, context: SyncContext, avatars: AvatarTransferAdapter) -> None:
        self._ctx = context
        self._avatars = avatars

    async def export_groups(self) -> SendMessageResult | None:
        """
        Send all version-1 groups to linked devices.

        Returns:
            The transport result, or None if there were no groups to send

        Raises:
            TransportError: If the message could not be sent
        """
        self_id = await self._ctx.account.get_self_recipient_id()

        with scoped_temp_file(self._ctx.config.tmp_dir, "groups-") as path:
            count = 0
            with path.open("wb") as out:
                for group in await self._ctx.groups.get_groups():
                    if not isinstance(group, GroupInfoV1):
                        continue
                    write_group(out, await self._group_record(group, self_id))
                    count += 1

            result = await self._send_file(path, GroupsMessage)
            if result is not None:
                logger.info("Sent %d groups to linked devices", count)
            return result

    async def export_contacts(self) -> SendMessageResult | None:
        """
        Send all contacts, plus the account's own profile key, to linked devices.

        Returns:
            The transport result, or None if there was nothing to send

        Raises:
            TransportError: If the message could not be sent
        """
        padding = self._ctx.config.verified_padding

        with scoped_temp_file(self._ctx.config.tmp_dir, "contacts-") as path:
            count = 0
            with path.open("wb") as out:
                for recipient_id, contact in await self._ctx.contacts.get_contacts():
                    record = await self._contact_record(recipient_id, contact)
                    write_contact(out, record, padding=padding)
                    count += 1

                profile_key = await self._ctx.account.get_profile_key()
                if profile_key is not None:
                    # Linked devices learn the account's own profile key from this record
                    self_record = ContactRecord(
                        address=await self._ctx.account.get_self_address(),
                        profile_key=SetTo(profile_key),
                    )
                    write_contact(out, self_record, padding=padding)

            result = await self._send_file(path, ContactsMessage)
            if result is not None:
                logger.info("Sent %d contacts to linked devices", count)
            return result

    async def _send_file(
        self, path: Path, wrap: type[GroupsMessage] | type[ContactsMessage]
    ) -> SendMessageResult | None:
        length = path.stat().st_size
        if length == 0:
            logger.debug("Nothing to export for %s, not sending", wrap.__name__)
            return None

        with path.open("rb") as stream:
            message: SyncMessage = wrap(AttachmentStream(stream=stream, length=length))
            return await self._ctx.sender.send_sync_message(message)

    async def _group_record(self, group: GroupInfoV1, self_id: RecipientId) -> GroupRecord:
        members = [await self._ctx.recipients.get_address(m) for m in sorted(group.members)]
        avatar = await self._avatars.build_group_attachment(group.group_id)
        return GroupRecord(
            group_id=group.group_id,
            name=from_optional(group.name),
            members=tuple(members),
            avatar=from_optional(avatar),
            active=group.is_member(self_id),
            expiration_timer=SetTo(group.message_expiration_time),
            color=from_optional(group.color),
            blocked=group.blocked,
            archived=group.archived,
        )

    async def _contact_record(self, recipient_id: RecipientId, contact: Contact) -> ContactRecord:
        address = await self._ctx.recipients.get_address(recipient_id)

        verified: FieldUpdate[VerifiedRecord] = UNCHANGED
        identity = await self._ctx.identities.get_identity_info(address)
        if identity is not None:
            verified = SetTo(
                VerifiedRecord(
                    destination=address,
                    identity_key=identity.identity_key,
                    state=identity.trust_level.to_verified_state(),
                    timestamp=identity.added_at,
                )
            )

        profile_key = await self._ctx.profiles.get_profile_key(recipient_id)
        avatar = await self._avatars.build_contact_attachment(address)
        return ContactRecord(
            address=address,
            name=from_optional(contact.name),
            avatar=from_optional(avatar),
            color=from_optional(contact.color),
            verified=verified,
            profile_key=from_optional(profile_key),
            blocked=contact.is_blocked,
            expiration_timer=SetTo(contact.message_expiration_time),
            archived=contact.is_archived,
        )
