"""Record codec for contact and group sync streams.

A stream is a sequence of records, each laid out as::

    varint32(length) || ContactDetails / GroupDetails message || avatar bytes

The avatar bytes are only present when the message carries an avatar block,
whose ``length`` field says how many bytes follow. Record bodies are the
``sync_details.proto`` messages, whose field numbers match what existing peer
devices produce.

Decoding is forward-only and tolerant: a record whose body is malformed or
semantically invalid is logged and skipped, and decoding resumes at the next
length prefix. A truncated stream or a length prefix that cannot be trusted
ends decoding; records already yielded stay valid.
"""

from __future__ import annotations

import io
import logging
import secrets
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, BinaryIO, TypeVar

from google.protobuf.message import DecodeError, Message

from device_sync.core.address import RecipientAddress, parse_aci
from device_sync.core.field_update import UNCHANGED, FieldUpdate, SetTo, from_optional
from device_sync.core.records import (
    GROUP_V1_ID_LENGTH,
    OCTET_STREAM,
    AvatarAttachment,
    ContactRecord,
    GroupRecord,
    VerifiedRecord,
)
from device_sync.core.trust import VerifiedState, is_valid_identity_key
from device_sync.sync.proto import sync_details_pb2
from device_sync.sync.wire import (
    RecordFormatError,
    StreamTruncatedError,
    read_exact,
    read_varint32,
    skip_exact,
    write_delimited,
)
from device_sync.utils.config import get_config
from device_sync.utils.timeutils import now_millis

logger = logging.getLogger(__name__)

R = TypeVar("R")

PROFILE_KEY_LENGTH = 32


def _optional(message: Message, field: str) -> Any:
    """Return a singular field's value, or None when it is not present."""
    return getattr(message, field) if message.HasField(field) else None


# ── Encoding ──────────────────────────────────────────────────────────────────


def _fill_avatar(target: Message, avatar: AvatarAttachment) -> None:
    target.content_type = avatar.content_type
    target.length = avatar.length


def _fill_verified(target: Message, verified: VerifiedRecord, padding: int) -> None:
    if verified.destination.number:
        target.destination_e164 = verified.destination.number
    if verified.destination.aci:
        target.destination_aci = verified.destination.aci
    target.identity_key = verified.identity_key
    target.state = int(verified.state)
    if padding > 0:
        target.null_message = secrets.token_bytes(secrets.randbelow(padding) + 1)


def write_contact(sink: BinaryIO, record: ContactRecord, *, padding: int | None = None) -> None:
    """Serialize one contact record (and its inline avatar) to ``sink``."""
    if padding is None:
        padding = get_config().verified_padding

    details = sync_details_pb2.ContactDetails()
    if record.address.number:
        details.number = record.address.number
    if record.address.aci:
        details.aci = record.address.aci
    if isinstance(record.name, SetTo):
        details.name = record.name.value
    if isinstance(record.avatar, SetTo):
        _fill_avatar(details.avatar, record.avatar.value)
    if isinstance(record.color, SetTo):
        details.color = record.color.value
    if isinstance(record.verified, SetTo):
        _fill_verified(details.verified, record.verified.value, padding)
    if isinstance(record.profile_key, SetTo):
        details.profile_key = record.profile_key.value
    details.blocked = record.blocked
    if isinstance(record.expiration_timer, SetTo):
        details.expire_timer = record.expiration_timer.value
    if isinstance(record.inbox_position, SetTo):
        details.inbox_position = record.inbox_position.value
    details.archived = record.archived

    write_delimited(sink, details.SerializeToString())
    if isinstance(record.avatar, SetTo):
        sink.write(record.avatar.value.data)


def write_group(sink: BinaryIO, record: GroupRecord) -> None:
    """Serialize one group record (and its inline avatar) to ``sink``.

    Version-1 group members are addressed by phone number only; members
    without a number cannot be represented and are left out.
    """
    details = sync_details_pb2.GroupDetails(id=record.group_id)
    if isinstance(record.name, SetTo):
        details.name = record.name.value
    numbers = [member.number for member in record.members if member.number]
    details.members_e164.extend(numbers)
    for number in numbers:
        details.members.add(e164=number)
    if isinstance(record.avatar, SetTo):
        _fill_avatar(details.avatar, record.avatar.value)
    details.active = record.active
    if isinstance(record.expiration_timer, SetTo):
        details.expire_timer = record.expiration_timer.value
    if isinstance(record.color, SetTo):
        details.color = record.color.value
    details.blocked = record.blocked
    if isinstance(record.inbox_position, SetTo):
        details.inbox_position = record.inbox_position.value
    details.archived = record.archived

    write_delimited(sink, details.SerializeToString())
    if isinstance(record.avatar, SetTo):
        sink.write(record.avatar.value.data)


def write_contacts(sink: BinaryIO, records: Iterable[ContactRecord]) -> int:
    """Write every record to ``sink``. Returns the number of records written."""
    count = 0
    for record in records:
        write_contact(sink, record)
        count += 1
    return count


def write_groups(sink: BinaryIO, records: Iterable[GroupRecord]) -> int:
    """Write every record to ``sink``. Returns the number of records written."""
    count = 0
    for record in records:
        write_group(sink, record)
        count += 1
    return count


def encode_contacts(records: Iterable[ContactRecord]) -> bytes:
    buffer = io.BytesIO()
    write_contacts(buffer, records)
    return buffer.getvalue()


def encode_groups(records: Iterable[GroupRecord]) -> bytes:
    buffer = io.BytesIO()
    write_groups(buffer, records)
    return buffer.getvalue()


# ── Decoding ──────────────────────────────────────────────────────────────────


def _parse_body(message_type: type[Message], body: bytes) -> Message:
    details = message_type()
    try:
        details.ParseFromString(body)
    except DecodeError as e:
        raise RecordFormatError(str(e) or "malformed record body") from e
    return details


def _read_avatar(
    source: BinaryIO,
    avatar: Message | None,
    max_avatar_size: int,
    kind: str,
) -> FieldUpdate[AvatarAttachment]:
    """Consume the inline avatar that follows a record, if it has one."""
    if avatar is None or avatar.length == 0:
        return UNCHANGED
    length = avatar.length
    if length > max_avatar_size:
        logger.warning(
            "Sync %s record has an oversized avatar (%d bytes), discarding it", kind, length
        )
        skip_exact(source, length)
        return UNCHANGED
    data = read_exact(source, length)
    content_type = avatar.content_type or OCTET_STREAM
    return SetTo(AvatarAttachment(content_type=content_type, data=data))


@dataclass
class DecodeStats:
    """Counters filled in while a stream is decoded."""

    decoded: int = 0
    skipped: int = 0
    truncated: bool = False


def _iter_records(
    source: BinaryIO,
    kind: str,
    message_type: type[Message],
    build: Callable[[Any, FieldUpdate[AvatarAttachment]], R],
    max_record_size: int | None,
    max_avatar_size: int | None,
    stats: DecodeStats | None,
) -> Iterator[R]:
    config = get_config()
    record_limit = config.max_record_size if max_record_size is None else max_record_size
    avatar_limit = config.max_avatar_size if max_avatar_size is None else max_avatar_size
    if stats is None:
        stats = DecodeStats()

    index = 0
    while True:
        try:
            length = read_varint32(source)
            if length is None:
                return
            if length > record_limit:
                raise StreamTruncatedError(f"record length {length} exceeds limit {record_limit}")
            body = read_exact(source, length)
        except StreamTruncatedError as e:
            logger.warning("Sync %s stream is damaged after %d records, stopping: %s", kind, index, e)
            stats.truncated = True
            return
        index += 1

        try:
            details = _parse_body(message_type, body)
        except RecordFormatError as e:
            logger.warning("Sync %s contained invalid %s #%d, ignoring: %s", kind, kind, index, e)
            stats.skipped += 1
            continue

        # The avatar must be consumed before the record is validated so the
        # stream stays aligned when the record itself is rejected.
        try:
            avatar = _read_avatar(source, _optional(details, "avatar"), avatar_limit, kind)
        except RecordFormatError as e:
            logger.warning("Sync %s #%d has an unreadable avatar, stopping: %s", kind, index, e)
            stats.skipped += 1
            stats.truncated = True
            return

        try:
            record = build(details, avatar)
        except RecordFormatError as e:
            logger.warning("Sync %s contained invalid %s #%d, ignoring: %s", kind, kind, index, e)
            stats.skipped += 1
            continue

        stats.decoded += 1
        yield record


def _parse_verified(verified: Any) -> VerifiedRecord | None:
    """Decode a verified block, or None if it cannot be trusted."""
    aci = parse_aci(verified.destination_aci)
    number = verified.destination_e164 or None
    if aci is None and number is None:
        logger.warning("Verified block without a destination address, ignoring it")
        return None

    identity_key = verified.identity_key
    if not is_valid_identity_key(identity_key):
        logger.warning("Verified block for %s has an invalid identity key, ignoring it", aci or number)
        return None

    try:
        state = VerifiedState(verified.state)
    except ValueError:
        logger.warning("Verified block has unknown state %d, ignoring it", verified.state)
        return None

    return VerifiedRecord(
        destination=RecipientAddress(aci=aci, number=number),
        identity_key=identity_key,
        state=state,
        timestamp=now_millis(),
    )


def _contact_from_details(details: Any, avatar: FieldUpdate[AvatarAttachment]) -> ContactRecord:
    aci = parse_aci(details.aci)
    number = details.number or None
    if aci is None and number is None:
        raise RecordFormatError("Missing contact address")
    address = RecipientAddress(aci=aci, number=number)

    verified: FieldUpdate[VerifiedRecord] = UNCHANGED
    if details.HasField("verified"):
        verified = from_optional(_parse_verified(details.verified))

    profile_key: FieldUpdate[bytes] = UNCHANGED
    if details.HasField("profile_key"):
        if len(details.profile_key) == PROFILE_KEY_LENGTH:
            profile_key = SetTo(details.profile_key)
        else:
            logger.warning("Invalid profile key for contact %s, ignoring it", address)

    return ContactRecord(
        address=address,
        name=from_optional(_optional(details, "name")),
        avatar=avatar,
        color=from_optional(_optional(details, "color")),
        verified=verified,
        profile_key=profile_key,
        blocked=details.blocked,
        expiration_timer=from_optional(_optional(details, "expire_timer")),
        inbox_position=from_optional(_optional(details, "inbox_position")),
        archived=details.archived,
    )


def _group_from_details(details: Any, avatar: FieldUpdate[AvatarAttachment]) -> GroupRecord:
    if not details.HasField("id"):
        raise RecordFormatError("Missing group id")
    group_id = details.id
    if len(group_id) != GROUP_V1_ID_LENGTH:
        raise RecordFormatError(f"Invalid group id length {len(group_id)}")

    if details.members:
        numbers = [member.e164 for member in details.members]
    else:
        numbers = list(details.members_e164)
    members = tuple(RecipientAddress(number=n) for n in dict.fromkeys(numbers) if n)

    return GroupRecord(
        group_id=group_id,
        name=from_optional(_optional(details, "name")),
        members=members,
        avatar=avatar,
        active=details.active,
        expiration_timer=from_optional(_optional(details, "expire_timer")),
        color=from_optional(_optional(details, "color")),
        blocked=details.blocked,
        inbox_position=from_optional(_optional(details, "inbox_position")),
        archived=details.archived,
    )


def iter_contacts(
    source: BinaryIO,
    *,
    max_record_size: int | None = None,
    max_avatar_size: int | None = None,
    stats: DecodeStats | None = None,
) -> Iterator[ContactRecord]:
    """Lazily decode contact records from a stream."""
    return _iter_records(
        source,
        "contact",
        sync_details_pb2.ContactDetails,
        _contact_from_details,
        max_record_size,
        max_avatar_size,
        stats,
    )


def iter_groups(
    source: BinaryIO,
    *,
    max_record_size: int | None = None,
    max_avatar_size: int | None = None,
    stats: DecodeStats | None = None,
) -> Iterator[GroupRecord]:
    """Lazily decode group records from a stream."""
    return _iter_records(
        source,
        "group",
        sync_details_pb2.GroupDetails,
        _group_from_details,
        max_record_size,
        max_avatar_size,
        stats,
    )


def decode_contacts(data: bytes) -> list[ContactRecord]:
    return list(iter_contacts(io.BytesIO(data)))


def decode_groups(data: bytes) -> list[GroupRecord]:
    return list(iter_groups(io.BytesIO(data)))
