"""Tests for stream framing and the record body schema."""

from __future__ import annotations

import io

import pytest

from device_sync.sync.proto import sync_details_pb2
from device_sync.sync.wire import (
    StreamTruncatedError,
    read_exact,
    read_varint32,
    skip_exact,
    write_delimited,
)


class TestLengthPrefix:
    def test_read_single_byte(self) -> None:
        assert read_varint32(io.BytesIO(b"\x7frest")) == 127

    def test_read_multi_byte(self) -> None:
        source = io.BytesIO(b"\xac\x02rest")
        assert read_varint32(source) == 300
        assert source.read() == b"rest"

    def test_clean_end_of_stream(self) -> None:
        assert read_varint32(io.BytesIO(b"")) is None

    def test_stream_ends_inside_prefix(self) -> None:
        with pytest.raises(StreamTruncatedError):
            read_varint32(io.BytesIO(b"\x80"))

    def test_overlong_prefix(self) -> None:
        with pytest.raises(StreamTruncatedError):
            read_varint32(io.BytesIO(b"\xff\xff\xff\xff\xff\x01"))

    def test_write_delimited(self) -> None:
        sink = io.BytesIO()
        write_delimited(sink, b"hello")
        assert sink.getvalue() == b"\x05hello"

    def test_write_then_read_long_body(self) -> None:
        sink = io.BytesIO()
        write_delimited(sink, b"x" * 300)
        sink.seek(0)

        assert read_varint32(sink) == 300
        assert read_exact(sink, 300) == b"x" * 300


class TestStreamReading:
    def test_read_exact(self) -> None:
        source = io.BytesIO(b"abcdef")
        assert read_exact(source, 4) == b"abcd"
        assert source.read() == b"ef"

    def test_read_exact_short(self) -> None:
        with pytest.raises(StreamTruncatedError):
            read_exact(io.BytesIO(b"ab"), 4)

    def test_skip_exact(self) -> None:
        source = io.BytesIO(b"x" * 100 + b"tail")
        skip_exact(source, 100)
        assert source.read() == b"tail"

    def test_skip_past_end(self) -> None:
        with pytest.raises(StreamTruncatedError):
            skip_exact(io.BytesIO(b"abc"), 10)


# ── Schema ────────────────────────────────────────────────────────────────────


def _numbers(message_type: type) -> dict[str, int]:
    return {field.name: field.number for field in message_type.DESCRIPTOR.fields}


class TestSchema:
    """Field numbers are shared with peer devices and must not drift."""

    def test_contact_details(self) -> None:
        assert _numbers(sync_details_pb2.ContactDetails) == {
            "number": 1,
            "name": 2,
            "avatar": 3,
            "color": 4,
            "verified": 5,
            "profile_key": 6,
            "blocked": 7,
            "expire_timer": 8,
            "aci": 9,
            "inbox_position": 10,
            "archived": 11,
        }

    def test_group_details(self) -> None:
        assert _numbers(sync_details_pb2.GroupDetails) == {
            "id": 1,
            "name": 2,
            "members_e164": 3,
            "avatar": 4,
            "active": 5,
            "expire_timer": 6,
            "color": 7,
            "blocked": 8,
            "members": 9,
            "inbox_position": 10,
            "archived": 11,
        }
        assert _numbers(sync_details_pb2.GroupDetails.Member) == {"e164": 2}

    def test_verified_and_avatar(self) -> None:
        assert _numbers(sync_details_pb2.Verified) == {
            "destination_e164": 1,
            "identity_key": 2,
            "state": 3,
            "null_message": 4,
            "destination_aci": 5,
        }
        assert _numbers(sync_details_pb2.Avatar) == {"content_type": 1, "length": 2}

    def test_group_active_defaults_to_true(self) -> None:
        details = sync_details_pb2.GroupDetails()
        assert details.active is True
        assert not details.HasField("active")

    def test_known_encoding(self) -> None:
        details = sync_details_pb2.ContactDetails(number="+1", blocked=True)
        assert details.SerializeToString() == b"\x0a\x02+1\x38\x01"
