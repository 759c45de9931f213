"""Avatar store backed by a directory of files.

Contact avatars are stored as ``contact-<identifier>`` and group avatars as
``group-<base64url id>`` inside the configured avatars directory.
"""

from __future__ import annotations

import base64
import logging
import os
import tempfile
from pathlib import Path

from device_sync.core.address import RecipientAddress
from device_sync.storage.base import AvatarStore, AvatarWriter, StreamDetails
from device_sync.utils.config import get_config
from device_sync.utils.mime import guess_content_type

logger = logging.getLogger(__name__)

_SNIFF_BYTES = 16


class FileAvatarStore(AvatarStore):
    """Stores avatars as plain files, replacing them atomically."""

    def __init__(self, avatars_dir: Path | str | None = None) -> None:
        if avatars_dir is None:
            configured = get_config().avatars_dir
            if configured is None:
                raise ValueError("No avatars directory given and DEVICE_SYNC_AVATARS_DIR is unset")
            avatars_dir = configured
        self._dir = Path(avatars_dir)

    @property
    def avatars_dir(self) -> Path:
        return self._dir

    def contact_path(self, address: RecipientAddress) -> Path:
        return self._path(f"contact-{address.identifier}")

    def group_path(self, group_id: bytes) -> Path:
        encoded = base64.urlsafe_b64encode(group_id).decode("ascii").rstrip("=")
        return self._path(f"group-{encoded}")

    def _path(self, name: str) -> Path:
        path = (self._dir / name).resolve()
        if not path.is_relative_to(self._dir.resolve()):
            raise ValueError("Invalid avatar name: path traversal detected")
        return path

    @staticmethod
    def _open(path: Path) -> StreamDetails | None:
        try:
            stream = path.open("rb")
        except FileNotFoundError:
            return None
        try:
            head = stream.read(_SNIFF_BYTES)
            stream.seek(0)
            length = path.stat().st_size
        except OSError:
            stream.close()
            raise
        return StreamDetails(stream=stream, content_type=guess_content_type(head), length=length)

    async def _store(self, path: Path, writer: AvatarWriter) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._dir), suffix=".avatar.tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                await writer(f)
            Path(tmp_path).replace(path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug("Stored avatar %s", path.name)

    async def retrieve_contact_avatar(self, address: RecipientAddress) -> StreamDetails | None:
        return self._open(self.contact_path(address))

    async def store_contact_avatar(self, address: RecipientAddress, writer: AvatarWriter) -> None:
        await self._store(self.contact_path(address), writer)

    async def retrieve_group_avatar(self, group_id: bytes) -> StreamDetails | None:
        return self._open(self.group_path(group_id))

    async def store_group_avatar(self, group_id: bytes, writer: AvatarWriter) -> None:
        await self._store(self.group_path(group_id), writer)
