"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from device_sync.core.address import RecipientAddress
from device_sync.sync.context import SyncContext
from device_sync.sync.messages import ContactsMessage, GroupsMessage, SendMessageResult
from device_sync.sync.sync_engine import SyncEngine
from device_sync.utils.config import reset_config

SELF_ACI = "8d1f7c2e-4a3b-4c5d-9e6f-0a1b2c3d4e5f"
SELF_NUMBER = "+15550000001"

ALICE_ACI = "1b9f4a6c-2d3e-4f50-8a1b-2c3d4e5f6a7b"
ALICE_NUMBER = "+15550000002"

BOB_ACI = "c2e4f6a8-1b3d-4e5f-9a7b-8c9d0e1f2a3b"
BOB_NUMBER = "+15550000003"

IDENTITY_KEY = b"\x05" + bytes(range(32))
PROFILE_KEY = bytes(range(32, 64))

GROUP_ID = bytes(range(16))


@pytest.fixture(autouse=True)
def export_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point export temp files at a per-test directory and reset the config."""
    directory = tmp_path / "export"
    directory.mkdir()
    monkeypatch.setenv("DEVICE_SYNC_TMP_DIR", str(directory))
    reset_config()
    yield directory
    reset_config()


@pytest.fixture
def self_address() -> RecipientAddress:
    return RecipientAddress(aci=SELF_ACI, number=SELF_NUMBER)


@pytest.fixture
def alice() -> RecipientAddress:
    return RecipientAddress(aci=ALICE_ACI, number=ALICE_NUMBER)


@pytest.fixture
def bob() -> RecipientAddress:
    return RecipientAddress(aci=BOB_ACI, number=BOB_NUMBER)


@pytest.fixture
def sender() -> MagicMock:
    """A message sender that records every message and attachment it sends.

    Attachment streams are only valid during the send, so their content is
    read and kept in ``sender.payloads``.
    """
    mock = MagicMock()
    mock.messages = []
    mock.payloads = []

    async def _send(message: Any) -> SendMessageResult:
        mock.messages.append(message)
        if isinstance(message, (GroupsMessage, ContactsMessage)):
            mock.payloads.append(message.attachment.stream.read())
        return SendMessageResult(success=True, recipient_count=1)

    mock.send_sync_message = AsyncMock(side_effect=_send)
    return mock


@pytest.fixture
def context(self_address: RecipientAddress, sender: MagicMock) -> SyncContext:
    """A sync context backed by in-memory stores."""
    return SyncContext.in_memory(self_address, sender)


@pytest.fixture
def engine(context: SyncContext) -> SyncEngine:
    return SyncEngine(context)
