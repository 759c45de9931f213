"""Abstract interfaces for the account stores the sync engine merges into.

The engine never owns persistent state. Each store is injected, so the merge
rules can run against the in-memory implementations in tests and against a
real database in a client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from device_sync.core.address import RecipientAddress
    from device_sync.core.entities import Contact, GroupInfo, GroupInfoV1, RecipientId
    from device_sync.core.trust import IdentityTrustEntry, TrustLevel

AvatarWriter = Callable[[BinaryIO], Awaitable[None]]


@dataclass(frozen=True)
class StreamDetails:
    """An open avatar stream. The receiver is responsible for closing it."""

    stream: BinaryIO
    content_type: str
    length: int


@dataclass(frozen=True)
class AccountConfiguration:
    """Account preferences shared between devices; None means never set."""

    read_receipts: bool | None = None
    unidentified_delivery_indicators: bool | None = None
    typing_indicators: bool | None = None
    link_previews: bool | None = None


class RecipientStore(ABC):
    """Maps addresses to stable local recipient ids."""

    @abstractmethod
    async def resolve_recipient(self, address: RecipientAddress) -> RecipientId:
        """
        Find or create the recipient for an address.

        Identifiers learned from an untrusted source are not merged into an
        existing recipient.
        """
        ...

    @abstractmethod
    async def resolve_recipient_trusted(self, address: RecipientAddress) -> RecipientId:
        """
        Find or create the recipient for an address from a trusted source.

        A trusted address may add its missing identifier (ACI or number) to
        the recipient it matches.
        """
        ...

    @abstractmethod
    async def get_address(self, recipient_id: RecipientId) -> RecipientAddress:
        """
        Get the current address of a recipient.

        Raises:
            KeyError: If the recipient is unknown
        """
        ...


class ContactStore(ABC):
    @abstractmethod
    async def get_contact(self, recipient_id: RecipientId) -> Contact | None: ...

    @abstractmethod
    async def store_contact(self, recipient_id: RecipientId, contact: Contact) -> None: ...

    @abstractmethod
    async def get_contacts(self) -> list[tuple[RecipientId, Contact]]:
        """All stored contacts in a stable order."""
        ...


class GroupStore(ABC):
    @abstractmethod
    async def get_groups(self) -> list[GroupInfo]:
        """All stored groups of every version."""
        ...

    @abstractmethod
    async def get_or_create_group_v1(self, group_id: bytes) -> GroupInfoV1 | None:
        """
        Get a version-1 group, or a new unsaved one if the id is unknown.

        Returns:
            The group, or None if no version-1 group can exist under this id
        """
        ...

    @abstractmethod
    async def update_group(self, group: GroupInfo) -> None: ...


class IdentityKeyStore(ABC):
    @abstractmethod
    async def get_identity_info(self, address: RecipientAddress) -> IdentityTrustEntry | None: ...

    @abstractmethod
    async def set_identity_trust_level(
        self,
        address: RecipientAddress,
        identity_key: bytes,
        trust_level: TrustLevel,
        timestamp: int | None = None,
    ) -> bool:
        """
        Record the trust level of an identity key.

        Args:
            address: Whose identity this is
            identity_key: Serialized identity public key
            trust_level: New trust level
            timestamp: Time of the change in epoch milliseconds (now if None)

        Returns:
            True if the stored state changed
        """
        ...


class ProfileStore(ABC):
    @abstractmethod
    async def get_profile_key(self, recipient_id: RecipientId) -> bytes | None: ...

    @abstractmethod
    async def store_profile_key(self, recipient_id: RecipientId, profile_key: bytes) -> None: ...


class AvatarStore(ABC):
    @abstractmethod
    async def retrieve_contact_avatar(self, address: RecipientAddress) -> StreamDetails | None: ...

    @abstractmethod
    async def store_contact_avatar(self, address: RecipientAddress, writer: AvatarWriter) -> None:
        """Store a contact avatar by letting ``writer`` fill an output stream."""
        ...

    @abstractmethod
    async def retrieve_group_avatar(self, group_id: bytes) -> StreamDetails | None: ...

    @abstractmethod
    async def store_group_avatar(self, group_id: bytes, writer: AvatarWriter) -> None: ...


class ConfigurationStore(ABC):
    @abstractmethod
    async def get_configuration(self) -> AccountConfiguration: ...


class AccountStore(ABC):
    """The local account itself."""

    @abstractmethod
    async def get_self_address(self) -> RecipientAddress: ...

    @abstractmethod
    async def get_self_recipient_id(self) -> RecipientId: ...

    @abstractmethod
    async def get_profile_key(self) -> bytes | None:
        """The account's own profile key."""
        ...

    @abstractmethod
    async def set_profile_key(self, profile_key: bytes) -> None: ...

    @abstractmethod
    async def get_or_create_storage_key(self) -> bytes: ...

    @abstractmethod
    async def get_or_create_pin_master_key(self) -> bytes: ...
