"""Reconciles incoming contacts and groups sync streams into local storage.

An import runs in two passes. The merge pass decodes the stream and applies
every record to the stores; avatars found along the way are only collected.
The avatar pass then downloads them one by one. An avatar failure never
undoes the merge of the record it came with.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import BinaryIO

from device_sync.core.address import RecipientAddress
from device_sync.core.entities import Contact, GroupInfoV1, RecipientId
from device_sync.core.field_update import SetTo, apply
from device_sync.core.records import ContactRecord, GroupRecord
from device_sync.core.trust import TrustLevel
from device_sync.sync.avatars import AvatarTransferAdapter
from device_sync.sync.codec import DecodeStats, iter_contacts, iter_groups
from device_sync.sync.context import SyncContext
from device_sync.sync.protocol import AvatarDownload, AvatarTarget, ImportReport

logger = logging.getLogger(__name__)


class SyncImporter:
    """Merges records received from a linked device."""

    def __init__(self, context: SyncContext, avatars: AvatarTransferAdapter) -> None:
        self._ctx = context
        self._avatars = avatars

    # ── Groups ────────────────────────────────────────────────────────────

    async def import_groups(self, stream: BinaryIO) -> ImportReport:
        """
        Merge a groups stream into the group store.

        Malformed records are skipped. Only a failure to read ``stream``
        itself propagates.
        """
        report = await self.merge_groups(stream)
        await self.download_avatars(report)
        return report

    async def merge_groups(self, stream: BinaryIO) -> ImportReport:
        """Merge pass for groups. Avatars are returned in ``report.deferred``."""
        report = ImportReport(kind="groups")
        stats = DecodeStats()
        self_id = await self._ctx.account.get_self_recipient_id()

        for record in iter_groups(
            stream,
            max_record_size=self._ctx.config.max_record_size,
            max_avatar_size=self._ctx.config.max_avatar_size,
            stats=stats,
        ):
            try:
                merged = await self._merge_group(record, self_id)
            except Exception as e:
                logger.warning(
                    "Failed to merge group %s, skipping: %s",
                    record.group_id.hex(),
                    e,
                    exc_info=True,
                )
                report.skipped += 1
                continue

            if not merged:
                continue
            report.applied += 1
            if isinstance(record.avatar, SetTo):
                report.deferred.append(
                    AvatarDownload(
                        target=AvatarTarget.GROUP,
                        avatar=record.avatar.value,
                        group_id=record.group_id,
                    )
                )

        report.skipped += stats.skipped
        logger.info(
            "Merged %d groups from sync (%d skipped, %d avatars pending)",
            report.applied,
            report.skipped,
            len(report.deferred),
        )
        return report

    async def _merge_group(self, record: GroupRecord, self_id: RecipientId) -> bool:
        group = await self._ctx.groups.get_or_create_group_v1(record.group_id)
        if group is None:
            logger.debug("No version-1 group possible for %s, ignoring it", record.group_id.hex())
            return False

        members = set(group.members)
        for address in record.members:
            members.add(await self._ctx.recipients.resolve_recipient(address))
        if record.active:
            members.add(self_id)
        else:
            members.discard(self_id)

        updated = GroupInfoV1(
            group_id=group.group_id,
            name=apply(record.name, group.name),
            members=frozenset(members),
            color=apply(record.color, group.color),
            message_expiration_time=apply(record.expiration_timer, group.message_expiration_time),
            blocked=record.blocked,
            archived=record.archived,
        )
        await self._ctx.groups.update_group(updated)
        return True

    # ── Contacts ──────────────────────────────────────────────────────────

    async def import_contacts(self, stream: BinaryIO) -> ImportReport:
        """
        Merge a contacts stream into the contact, profile and identity stores.

        Malformed records are skipped. Only a failure to read ``stream``
        itself propagates.
        """
        report = await self.merge_contacts(stream)
        await self.download_avatars(report)
        return report

    async def merge_contacts(self, stream: BinaryIO) -> ImportReport:
        """Merge pass for contacts. Avatars are returned in ``report.deferred``."""
        report = ImportReport(kind="contacts")
        stats = DecodeStats()
        self_address = await self._ctx.account.get_self_address()

        for record in iter_contacts(
            stream,
            max_record_size=self._ctx.config.max_record_size,
            max_avatar_size=self._ctx.config.max_avatar_size,
            stats=stats,
        ):
            try:
                await self._merge_contact(record, self_address)
            except Exception as e:
                logger.warning(
                    "Failed to merge contact %s, skipping: %s", record.address, e, exc_info=True
                )
                report.skipped += 1
                continue

            report.applied += 1
            if isinstance(record.avatar, SetTo):
                report.deferred.append(
                    AvatarDownload(
                        target=AvatarTarget.CONTACT,
                        avatar=record.avatar.value,
                        address=record.address,
                    )
                )

        report.skipped += stats.skipped
        logger.info(
            "Merged %d contacts from sync (%d skipped, %d avatars pending)",
            report.applied,
            report.skipped,
            len(report.deferred),
        )
        return report

    async def _merge_contact(self, record: ContactRecord, self_address: RecipientAddress) -> None:
        if record.address.matches(self_address) and isinstance(record.profile_key, SetTo):
            # Our own profile key, shared by the primary device
            await self._ctx.account.set_profile_key(record.profile_key.value)
            logger.debug("Updated own profile key from sync")
            return

        recipient_id = await self._ctx.recipients.resolve_recipient_trusted(record.address)
        contact = await self._ctx.contacts.get_contact(recipient_id) or Contact()

        # A locally set name always wins over the synced one
        if isinstance(record.name, SetTo) and not contact.has_name:
            contact = replace(contact, given_name=record.name.value, family_name=None)

        if isinstance(record.profile_key, SetTo):
            await self._ctx.profiles.store_profile_key(recipient_id, record.profile_key.value)

        if isinstance(record.verified, SetTo):
            verified = record.verified.value
            if verified.destination.matches(record.address):
                await self._ctx.identities.set_identity_trust_level(
                    verified.destination,
                    verified.identity_key,
                    TrustLevel.from_verified_state(verified.state),
                    verified.timestamp or None,
                )
            else:
                logger.warning(
                    "Verified block for %s does not match contact %s, ignoring it",
                    verified.destination,
                    record.address,
                )

        contact = replace(
            contact,
            color=apply(record.color, contact.color),
            message_expiration_time=apply(record.expiration_timer, contact.message_expiration_time),
            is_blocked=record.blocked,
            is_archived=record.archived,
        )
        await self._ctx.contacts.store_contact(recipient_id, contact)

    # ── Avatars ───────────────────────────────────────────────────────────

    async def download_avatars(self, report: ImportReport) -> None:
        """Avatar pass: store every deferred avatar, counting the outcomes."""
        for task in report.deferred:
            if task.target is AvatarTarget.CONTACT and task.address is not None:
                stored = await self._avatars.fetch_and_store_contact_avatar(task.avatar, task.address)
            elif task.target is AvatarTarget.GROUP and task.group_id is not None:
                stored = await self._avatars.fetch_and_store_group_avatar(task.avatar, task.group_id)
            else:
                stored = False

            if stored:
                report.avatars_stored += 1
            else:
                report.avatars_failed += 1
