"""Collaborators injected into the sync engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from device_sync.core.address import RecipientAddress
from device_sync.storage.base import (
    AccountStore,
    AvatarStore,
    ConfigurationStore,
    ContactStore,
    GroupStore,
    IdentityKeyStore,
    ProfileStore,
    RecipientStore,
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
from device_sync.transport.base import AttachmentRetriever, InlineAttachmentRetriever, MessageSender
from device_sync.utils.config import Config, get_config


@dataclass
class SyncContext:
    """Everything one account's sync operations read from and write to.

    The engine assumes exclusive write access to these stores for the
    duration of an import; callers serialize access per account.
    """

    account: AccountStore
    recipients: RecipientStore
    contacts: ContactStore
    groups: GroupStore
    identities: IdentityKeyStore
    profiles: ProfileStore
    avatars: AvatarStore
    configuration: ConfigurationStore
    sender: MessageSender
    attachments: AttachmentRetriever = field(default_factory=InlineAttachmentRetriever)
    config: Config = field(default_factory=get_config)

    @classmethod
    def in_memory(
        cls,
        self_address: RecipientAddress,
        sender: MessageSender,
        *,
        profile_key: bytes | None = None,
        config: Config | None = None,
    ) -> SyncContext:
        """Build a context backed entirely by in-memory stores."""
        recipients = InMemoryRecipientStore()
        return cls(
            account=InMemoryAccountStore(self_address, recipients, profile_key=profile_key),
            recipients=recipients,
            contacts=InMemoryContactStore(),
            groups=InMemoryGroupStore(),
            identities=InMemoryIdentityKeyStore(),
            profiles=InMemoryProfileStore(),
            avatars=InMemoryAvatarStore(),
            configuration=InMemoryConfigurationStore(),
            sender=sender,
            config=config or get_config(),
        )
