"""Tests for the contacts and groups record codec."""

from __future__ import annotations

import io
import logging

import pytest

from device_sync.core.address import RecipientAddress
from device_sync.core.field_update import UNCHANGED, SetTo
from device_sync.core.records import AvatarAttachment, ContactRecord, GroupRecord, VerifiedRecord
from device_sync.core.trust import VerifiedState
from device_sync.sync.codec import (
    DecodeStats,
    decode_contacts,
    decode_groups,
    encode_contacts,
    encode_groups,
    iter_contacts,
    iter_groups,
)
from device_sync.sync.proto.sync_details_pb2 import Avatar, ContactDetails, GroupDetails, Verified
from device_sync.sync.wire import write_delimited

IDENTITY_KEY = b"\x05" + bytes(range(32))
PROFILE_KEY = bytes(range(32, 64))
GROUP_ID = bytes(range(16))

# ── Helpers ───────────────────────────────────────────────────────────────────


def _contact(index: int, **kwargs: object) -> ContactRecord:
    address = RecipientAddress(
        aci=f"00000000-0000-4000-8000-{index:012d}",
        number=f"+1555000{index:04d}",
    )
    return ContactRecord(address=address, **kwargs)  # type: ignore[arg-type]


def _frame(body: bytes | ContactDetails | GroupDetails, trailer: bytes = b"") -> bytes:
    if not isinstance(body, bytes):
        body = body.SerializeToString()
    buffer = io.BytesIO()
    write_delimited(buffer, body)
    return buffer.getvalue() + trailer


def _full_contact(alice: RecipientAddress) -> ContactRecord:
    return ContactRecord(
        address=alice,
        name=SetTo("Alice Liddell"),
        avatar=SetTo(AvatarAttachment(content_type="image/png", data=b"\x89PNG\r\n\x1a\nbody")),
        color=SetTo("ultramarine"),
        verified=SetTo(
            VerifiedRecord(destination=alice, identity_key=IDENTITY_KEY, state=VerifiedState.VERIFIED)
        ),
        profile_key=SetTo(PROFILE_KEY),
        blocked=True,
        expiration_timer=SetTo(3600),
        inbox_position=SetTo(4),
        archived=True,
    )


# ── Round trip ────────────────────────────────────────────────────────────────


class TestContactRoundTrip:
    def test_empty(self) -> None:
        assert encode_contacts([]) == b""
        assert decode_contacts(b"") == []

    def test_single_full_record(self, alice: RecipientAddress) -> None:
        record = _full_contact(alice)
        assert decode_contacts(encode_contacts([record])) == [record]

    def test_all_optional_fields_absent(self, alice: RecipientAddress) -> None:
        record = ContactRecord(address=alice)

        decoded = decode_contacts(encode_contacts([record]))

        assert decoded == [record]
        assert decoded[0].name is UNCHANGED
        assert decoded[0].avatar is UNCHANGED

    def test_many_records_keep_order(self) -> None:
        records = [_contact(i, name=SetTo(f"Contact {i}"), blocked=i % 2 == 0) for i in range(25)]
        assert decode_contacts(encode_contacts(records)) == records

    def test_aci_only_and_number_only_addresses(self) -> None:
        records = [
            ContactRecord(address=RecipientAddress(aci="00000000-0000-4000-8000-000000000001")),
            ContactRecord(address=RecipientAddress(number="+15550009999")),
        ]
        assert decode_contacts(encode_contacts(records)) == records

    def test_uppercase_aci_round_trips(self) -> None:
        record = ContactRecord(address=RecipientAddress(aci="1B9F4A6C-2D3E-4F50-8A1B-2C3D4E5F6A7B"))

        decoded = decode_contacts(encode_contacts([record]))

        assert decoded == [record]
        assert decoded[0].address.aci == "1b9f4a6c-2d3e-4f50-8a1b-2c3d4e5f6a7b"

    def test_verified_timestamp_is_stamped_on_decode(self, alice: RecipientAddress) -> None:
        decoded = decode_contacts(encode_contacts([_full_contact(alice)]))[0]

        assert isinstance(decoded.verified, SetTo)
        assert decoded.verified.value.timestamp > 0

    def test_zero_timer_is_kept(self, alice: RecipientAddress) -> None:
        record = ContactRecord(address=alice, expiration_timer=SetTo(0))
        assert decode_contacts(encode_contacts([record]))[0].expiration_timer == SetTo(0)


class TestGroupRoundTrip:
    def test_empty(self) -> None:
        assert decode_groups(encode_groups([])) == []

    def test_full_record(self, alice: RecipientAddress, bob: RecipientAddress) -> None:
        record = GroupRecord(
            group_id=GROUP_ID,
            name=SetTo("Book club"),
            members=(RecipientAddress(number=alice.number), RecipientAddress(number=bob.number)),
            avatar=SetTo(AvatarAttachment(content_type="image/jpeg", data=b"\xff\xd8\xffjpeg")),
            active=False,
            expiration_timer=SetTo(60),
            color=SetTo("crimson"),
            blocked=True,
            inbox_position=SetTo(2),
            archived=True,
        )
        assert decode_groups(encode_groups([record])) == [record]

    def test_all_optional_fields_absent(self) -> None:
        record = GroupRecord(group_id=GROUP_ID)
        assert decode_groups(encode_groups([record])) == [record]

    def test_members_without_number_are_left_out(self, alice: RecipientAddress) -> None:
        record = GroupRecord(
            group_id=GROUP_ID,
            members=(alice, RecipientAddress(aci="00000000-0000-4000-8000-000000000001")),
        )

        decoded = decode_groups(encode_groups([record]))[0]

        assert decoded.members == (RecipientAddress(number=alice.number),)


# ── Decoding details ──────────────────────────────────────────────────────────


class TestGroupDecoding:
    def test_active_defaults_to_true(self) -> None:
        data = _frame(GroupDetails(id=GROUP_ID, name="Legacy"))
        assert decode_groups(data)[0].active is True

    def test_legacy_member_numbers(self) -> None:
        data = _frame(GroupDetails(id=GROUP_ID, members_e164=["+15550001111", "+15550002222"]))

        decoded = decode_groups(data)[0]

        assert [m.number for m in decoded.members] == ["+15550001111", "+15550002222"]

    def test_members_field_preferred_over_legacy(self) -> None:
        details = GroupDetails(id=GROUP_ID, members_e164=["+15550001111"])
        details.members.add(e164="+15550003333")
        data = _frame(details)
        assert [m.number for m in decode_groups(data)[0].members] == ["+15550003333"]

    def test_invalid_group_id_skipped(self) -> None:
        data = _frame(GroupDetails(id=b"short")) + encode_groups([GroupRecord(group_id=GROUP_ID)])
        stats = DecodeStats()

        decoded = list(iter_groups(io.BytesIO(data), stats=stats))

        assert [g.group_id for g in decoded] == [GROUP_ID]
        assert stats.skipped == 1


class TestContactDecoding:
    def test_unknown_fields_ignored(self, alice: RecipientAddress) -> None:
        unknown = b"\x78\x07" + b"\x82\x01\x01x"  # field 15 varint, field 16 string
        data = _frame(ContactDetails(number=alice.number).SerializeToString() + unknown)
        assert decode_contacts(data) == [ContactRecord(address=RecipientAddress(number=alice.number))]

    def test_invalid_aci_falls_back_to_number(self) -> None:
        data = _frame(ContactDetails(number="+15550001111", aci="not-a-uuid"))
        assert decode_contacts(data)[0].address == RecipientAddress(number="+15550001111")

    def test_invalid_profile_key_dropped(self, alice: RecipientAddress, caplog: pytest.LogCaptureFixture) -> None:
        data = _frame(ContactDetails(aci=alice.aci, name="Alice", profile_key=b"short"))

        with caplog.at_level(logging.WARNING):
            decoded = decode_contacts(data)

        assert len(decoded) == 1
        assert decoded[0].profile_key is UNCHANGED
        assert decoded[0].name == SetTo("Alice")
        assert "Invalid profile key" in caplog.text

    def test_invalid_identity_key_drops_verified(self, alice: RecipientAddress) -> None:
        verified = Verified(destination_aci=alice.aci, identity_key=b"\x05short", state=1)
        data = _frame(ContactDetails(aci=alice.aci, verified=verified))

        decoded = decode_contacts(data)

        assert len(decoded) == 1
        assert decoded[0].verified is UNCHANGED

    def test_unknown_verified_state_drops_verified(self, alice: RecipientAddress) -> None:
        verified = Verified(destination_aci=alice.aci, identity_key=IDENTITY_KEY, state=9)
        data = _frame(ContactDetails(aci=alice.aci, verified=verified))
        assert decode_contacts(data)[0].verified is UNCHANGED


# ── Corruption tolerance ──────────────────────────────────────────────────────


class TestCorruptionTolerance:
    def test_corrupted_record_in_the_middle(self) -> None:
        """Five records with the third one corrupted decode to four."""
        records = [_contact(i, name=SetTo(f"Contact {i}")) for i in range(5)]
        data = (
            encode_contacts(records[:2])
            + b"\x03\x0a\x10a"  # number field overruns its record
            + encode_contacts(records[3:])
        )
        stats = DecodeStats()

        decoded = list(iter_contacts(io.BytesIO(data), stats=stats))

        assert decoded == records[:2] + records[3:]
        assert stats.decoded == 4
        assert stats.skipped == 1
        assert not stats.truncated

    def test_missing_address_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        data = _frame(ContactDetails(name="Nobody")) + encode_contacts([_contact(1)])

        with caplog.at_level(logging.WARNING):
            decoded = decode_contacts(data)

        assert decoded == [_contact(1)]
        assert "Missing contact address" in caplog.text

    def test_rejected_record_avatar_is_consumed(self) -> None:
        """The inline avatar of a rejected record must not be read as the next record."""
        avatar = Avatar(content_type="image/png", length=4)
        data = _frame(ContactDetails(name="Nobody", avatar=avatar), trailer=b"\x01\x02\x03\x04")
        data += encode_contacts([_contact(7)])

        assert decode_contacts(data) == [_contact(7)]

    def test_wrong_wire_type_skipped(self) -> None:
        data = _frame(b"\x08\x05") + encode_contacts([_contact(2)])  # number sent as a varint
        assert decode_contacts(data) == [_contact(2)]


class TestTruncation:
    def test_truncated_stream_keeps_earlier_records(self) -> None:
        records = [_contact(i, name=SetTo(f"Contact {i}")) for i in range(3)]
        data = encode_contacts(records)[:-3]
        stats = DecodeStats()

        decoded = list(iter_contacts(io.BytesIO(data), stats=stats))

        assert decoded == records[:2]
        assert stats.truncated

    def test_missing_avatar_bytes_stop_decoding(self, alice: RecipientAddress) -> None:
        data = encode_contacts([_contact(1), _full_contact(alice)])[:-2]
        stats = DecodeStats()

        decoded = list(iter_contacts(io.BytesIO(data), stats=stats))

        assert decoded == [_contact(1)]
        assert stats.truncated

    def test_length_prefix_over_limit(self) -> None:
        data = encode_contacts([_contact(1)]) + b"\xff\xff\x03" + b"x" * 16
        stats = DecodeStats()

        decoded = list(iter_contacts(io.BytesIO(data), max_record_size=1024, stats=stats))

        assert decoded == [_contact(1)]
        assert stats.truncated


class TestAvatarLimits:
    def test_oversized_avatar_dropped_record_kept(self) -> None:
        big = _contact(1, avatar=SetTo(AvatarAttachment(content_type="image/png", data=b"x" * 64)))
        data = encode_contacts([big, _contact(2)])

        decoded = list(iter_contacts(io.BytesIO(data), max_avatar_size=16))

        assert decoded == [_contact(1), _contact(2)]

    def test_avatar_within_limit_kept(self) -> None:
        record = _contact(1, avatar=SetTo(AvatarAttachment(content_type="image/gif", data=b"GIF89a")))
        decoded = list(iter_contacts(io.BytesIO(encode_contacts([record])), max_avatar_size=16))
        assert decoded == [record]

    def test_group_oversized_avatar(self) -> None:
        record = GroupRecord(
            group_id=GROUP_ID,
            avatar=SetTo(AvatarAttachment(content_type="image/png", data=b"y" * 32)),
        )

        decoded = list(iter_groups(io.BytesIO(encode_groups([record])), max_avatar_size=8))

        assert decoded == [GroupRecord(group_id=GROUP_ID)]
