"""Configuration management for device_sync."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Upper bound for a single serialized record body; a larger length prefix means
# the stream is misaligned.
DEFAULT_MAX_RECORD_SIZE = 1024 * 1024
DEFAULT_MAX_AVATAR_SIZE = 10 * 1024 * 1024
DEFAULT_VERIFIED_PADDING = 140


@dataclass
class Config:
    """
    Sync engine configuration.

    Loaded from environment variables with sensible defaults.
    """

    # Directory for scoped export files (system temp dir if None)
    tmp_dir: str | None = None

    # Avatar files for the file-backed avatar store
    avatars_dir: str | None = None

    # Codec limits
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE
    max_avatar_size: int = DEFAULT_MAX_AVATAR_SIZE

    # Maximum random padding appended to verified blocks on export
    verified_padding: int = DEFAULT_VERIFIED_PADDING

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""

        def get_int(key: str, default: int) -> int:
            value = os.getenv(key)
            if value is None:
                return default
            try:
                return max(0, int(value))
            except ValueError:
                return default

        return cls(
            tmp_dir=os.getenv("DEVICE_SYNC_TMP_DIR"),
            avatars_dir=os.getenv("DEVICE_SYNC_AVATARS_DIR"),
            max_record_size=get_int("DEVICE_SYNC_MAX_RECORD_SIZE", DEFAULT_MAX_RECORD_SIZE),
            max_avatar_size=get_int("DEVICE_SYNC_MAX_AVATAR_SIZE", DEFAULT_MAX_AVATAR_SIZE),
            verified_padding=get_int("DEVICE_SYNC_VERIFIED_PADDING", DEFAULT_VERIFIED_PADDING),
        )


# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
