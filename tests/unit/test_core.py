"""Tests for addresses, field updates, trust levels and local entities."""

from __future__ import annotations

import pytest

from device_sync.core.address import RecipientAddress, parse_aci
from device_sync.core.entities import Contact, GroupInfoV1, GroupInfoV2
from device_sync.core.field_update import UNCHANGED, SetTo, Unchanged, apply, from_optional, to_optional
from device_sync.core.trust import TrustLevel, VerifiedState, is_valid_identity_key
from device_sync.utils.mime import guess_content_type


class TestRecipientAddress:
    def test_requires_an_identifier(self) -> None:
        with pytest.raises(ValueError):
            RecipientAddress()

    def test_matches_on_either_identifier(self, alice: RecipientAddress) -> None:
        assert alice.matches(RecipientAddress(number=alice.number))
        assert alice.matches(RecipientAddress(aci=alice.aci))
        assert not alice.matches(RecipientAddress(number="+15559999999"))

    def test_identifier_prefers_aci(self, alice: RecipientAddress) -> None:
        assert alice.identifier == alice.aci
        assert RecipientAddress(number="+15550000009").identifier == "+15550000009"

    def test_aci_is_canonicalized(self) -> None:
        address = RecipientAddress(aci="1B9F4A6C-2D3E-4F50-8A1B-2C3D4E5F6A7B")

        assert address.aci == "1b9f4a6c-2d3e-4f50-8a1b-2c3d4e5f6a7b"
        assert address == RecipientAddress(aci="1b9f4a6c-2d3e-4f50-8a1b-2c3d4e5f6a7b")
        assert address.matches(RecipientAddress(aci="1b9f4a6c2d3e4f508a1b2c3d4e5f6a7b"))

    def test_invalid_aci_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid ACI"):
            RecipientAddress(aci="alice")
        with pytest.raises(ValueError, match="Invalid ACI"):
            RecipientAddress(aci="", number="+15550000009")

    def test_parse_aci_normalizes(self) -> None:
        assert parse_aci("1B9F4A6C-2D3E-4F50-8A1B-2C3D4E5F6A7B") == "1b9f4a6c-2d3e-4f50-8a1b-2c3d4e5f6a7b"
        assert parse_aci("") is None
        assert parse_aci(None) is None
        assert parse_aci("garbage") is None


class TestFieldUpdate:
    def test_unchanged_is_a_falsy_singleton(self) -> None:
        assert Unchanged() is UNCHANGED
        assert not UNCHANGED
        assert repr(UNCHANGED) == "UNCHANGED"

    def test_apply(self) -> None:
        assert apply(SetTo("new"), "old") == "new"
        assert apply(UNCHANGED, "old") == "old"
        assert apply(SetTo(None), "old") is None

    def test_optional_conversion(self) -> None:
        assert from_optional(None) is UNCHANGED
        assert from_optional(0) == SetTo(0)
        assert to_optional(SetTo("x")) == "x"
        assert to_optional(UNCHANGED) is None


class TestTrustLevel:
    @pytest.mark.parametrize(
        ("level", "state"),
        [
            (TrustLevel.UNTRUSTED, VerifiedState.UNVERIFIED),
            (TrustLevel.TRUSTED_UNVERIFIED, VerifiedState.DEFAULT),
            (TrustLevel.TRUSTED_VERIFIED, VerifiedState.VERIFIED),
        ],
    )
    def test_bijection(self, level: TrustLevel, state: VerifiedState) -> None:
        assert level.to_verified_state() == state
        assert TrustLevel.from_verified_state(state) == level

    def test_wire_values(self) -> None:
        assert int(VerifiedState.DEFAULT) == 0
        assert int(VerifiedState.VERIFIED) == 1
        assert int(VerifiedState.UNVERIFIED) == 2

    def test_identity_key_validation(self) -> None:
        assert is_valid_identity_key(b"\x05" + bytes(32))
        assert not is_valid_identity_key(b"\x06" + bytes(32))
        assert not is_valid_identity_key(b"\x05" + bytes(31))


class TestEntities:
    def test_contact_name(self) -> None:
        assert Contact().name is None
        assert not Contact().has_name
        assert Contact(given_name="Alice").name == "Alice"
        assert Contact(given_name="Alice", family_name="Liddell").name == "Alice Liddell"
        assert Contact(given_name="").has_name

    def test_group_id_lengths(self) -> None:
        with pytest.raises(ValueError):
            GroupInfoV1(group_id=bytes(32))
        with pytest.raises(ValueError):
            GroupInfoV2(group_id=bytes(16))

    def test_group_membership(self) -> None:
        group = GroupInfoV1(group_id=bytes(16), members=frozenset({1, 2}))
        assert group.is_member(1)
        assert not group.is_member(3)


class TestContentType:
    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"\x89PNG\r\n\x1a\n....", "image/png"),
            (b"\xff\xd8\xff\xe0....", "image/jpeg"),
            (b"GIF89a....", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"hello", "application/octet-stream"),
            (b"", "application/octet-stream"),
        ],
    )
    def test_guess(self, data: bytes, expected: str) -> None:
        assert guess_content_type(data) == expected
