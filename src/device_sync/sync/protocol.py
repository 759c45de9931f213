"""Sync run outcomes and the follow-up work produced by an import."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from device_sync.core.address import RecipientAddress
from device_sync.core.records import AvatarAttachment


class SyncStatus(StrEnum):
    """Sync operation status."""

    SUCCESS = "success"
    PARTIAL = "partial"  # some records or avatars were skipped


class AvatarTarget(StrEnum):
    CONTACT = "contact"
    GROUP = "group"


@dataclass(frozen=True)
class AvatarDownload:
    """An avatar to store once the merge pass has finished."""

    target: AvatarTarget
    avatar: AvatarAttachment
    address: RecipientAddress | None = None
    group_id: bytes | None = None


@dataclass
class ImportReport:
    """Result of importing one contacts or groups stream."""

    kind: str  # "contacts" or "groups"
    applied: int = 0
    skipped: int = 0
    avatars_stored: int = 0
    avatars_failed: int = 0
    deferred: list[AvatarDownload] = field(default_factory=list)

    @property
    def status(self) -> SyncStatus:
        if self.skipped or self.avatars_failed:
            return SyncStatus.PARTIAL
        return SyncStatus.SUCCESS

    def to_dict(self) -> dict[str, int | str]:
        return {
            "kind": self.kind,
            "status": self.status.value,
            "applied": self.applied,
            "skipped": self.skipped,
            "avatars_stored": self.avatars_stored,
            "avatars_failed": self.avatars_failed,
        }
