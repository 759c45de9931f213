"""Store interfaces and implementations for device_sync."""

from device_sync.storage.avatar_files import FileAvatarStore
from device_sync.storage.base import (
    AccountConfiguration,
    AccountStore,
    AvatarStore,
    AvatarWriter,
    ConfigurationStore,
    ContactStore,
    GroupStore,
    IdentityKeyStore,
    ProfileStore,
    RecipientStore,
    StreamDetails,
)
from device_sync.storage.memory_store import (
    InMemoryAccountStore,
    InMemoryAvatarStore,
    InMemoryConfigurationStore,
    InMemoryContactStore,
    InMemoryGroupStore,
    InMemoryIdentityKeyStore,
    InMemoryProfileStore,
    InMemoryRecipientStore,
)

__all__ = [
    # Interfaces
    "AccountConfiguration",
    "AccountStore",
    "AvatarStore",
    "AvatarWriter",
    "ConfigurationStore",
    "ContactStore",
    "GroupStore",
    "IdentityKeyStore",
    "ProfileStore",
    "RecipientStore",
    "StreamDetails",
    # Implementations
    "FileAvatarStore",
    "InMemoryAccountStore",
    "InMemoryAvatarStore",
    "InMemoryConfigurationStore",
    "InMemoryContactStore",
    "InMemoryGroupStore",
    "InMemoryIdentityKeyStore",
    "InMemoryProfileStore",
    "InMemoryRecipientStore",
]
