"""In-memory store implementations for development and testing.

Data is lost when the process exits.
"""

from __future__ import annotations

import io
import secrets
from dataclasses import replace

from device_sync.core.address import RecipientAddress
from device_sync.core.entities import Contact, GroupInfo, GroupInfoV1, RecipientId
from device_sync.core.records import GROUP_V1_ID_LENGTH
from device_sync.core.trust import IdentityTrustEntry, TrustLevel
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
from device_sync.utils.mime import guess_content_type
from device_sync.utils.timeutils import now_millis

MASTER_KEY_LENGTH = 32


class InMemoryRecipientStore(RecipientStore):
    def __init__(self) -> None:
        self._addresses: dict[RecipientId, RecipientAddress] = {}
        self._next_id: RecipientId = 1

    def _find(self, address: RecipientAddress) -> RecipientId | None:
        # An ACI match is authoritative; fall back to the phone number.
        if address.aci is not None:
            for recipient_id, known in self._addresses.items():
                if known.aci == address.aci:
                    return recipient_id
        if address.number is not None:
            for recipient_id, known in self._addresses.items():
                if known.number == address.number:
                    return recipient_id
        return None

    def _create(self, address: RecipientAddress) -> RecipientId:
        recipient_id = self._next_id
        self._next_id += 1
        self._addresses[recipient_id] = address
        return recipient_id

    async def resolve_recipient(self, address: RecipientAddress) -> RecipientId:
        recipient_id = self._find(address)
        if recipient_id is None:
            recipient_id = self._create(address)
        return recipient_id

    async def resolve_recipient_trusted(self, address: RecipientAddress) -> RecipientId:
        recipient_id = self._find(address)
        if recipient_id is None:
            return self._create(address)

        known = self._addresses[recipient_id]
        merged = RecipientAddress(
            aci=known.aci or address.aci,
            number=known.number or address.number,
        )
        if merged != known:
            self._addresses[recipient_id] = merged
        return recipient_id

    async def get_address(self, recipient_id: RecipientId) -> RecipientAddress:
        return self._addresses[recipient_id]

    def __len__(self) -> int:
        return len(self._addresses)


class InMemoryContactStore(ContactStore):
    def __init__(self) -> None:
        self._contacts: dict[RecipientId, Contact] = {}

    async def get_contact(self, recipient_id: RecipientId) -> Contact | None:
        return self._contacts.get(recipient_id)

    async def store_contact(self, recipient_id: RecipientId, contact: Contact) -> None:
        self._contacts[recipient_id] = contact

    async def get_contacts(self) -> list[tuple[RecipientId, Contact]]:
        return sorted(self._contacts.items())

    def __len__(self) -> int:
        return len(self._contacts)


class InMemoryGroupStore(GroupStore):
    def __init__(self) -> None:
        self._groups: dict[bytes, GroupInfo] = {}

    async def get_groups(self) -> list[GroupInfo]:
        return list(self._groups.values())

    async def get_or_create_group_v1(self, group_id: bytes) -> GroupInfoV1 | None:
        if len(group_id) != GROUP_V1_ID_LENGTH:
            return None
        group = self._groups.get(group_id)
        if group is None:
            return GroupInfoV1(group_id=group_id)
        return group if isinstance(group, GroupInfoV1) else None

    async def update_group(self, group: GroupInfo) -> None:
        self._groups[group.group_id] = group

    def get(self, group_id: bytes) -> GroupInfo | None:
        return self._groups.get(group_id)

    def __len__(self) -> int:
        return len(self._groups)


class InMemoryIdentityKeyStore(IdentityKeyStore):
    def __init__(self) -> None:
        self._entries: list[tuple[RecipientAddress, IdentityTrustEntry]] = []

    def _index(self, address: RecipientAddress) -> int | None:
        for index, (known, _) in enumerate(self._entries):
            if known.matches(address):
                return index
        return None

    async def get_identity_info(self, address: RecipientAddress) -> IdentityTrustEntry | None:
        index = self._index(address)
        return None if index is None else self._entries[index][1]

    async def set_identity_trust_level(
        self,
        address: RecipientAddress,
        identity_key: bytes,
        trust_level: TrustLevel,
        timestamp: int | None = None,
    ) -> bool:
        entry = IdentityTrustEntry(
            identity_key=identity_key,
            trust_level=trust_level,
            added_at=now_millis() if timestamp is None else timestamp,
        )
        index = self._index(address)
        if index is None:
            self._entries.append((address, entry))
            return True

        known_address, current = self._entries[index]
        if current.identity_key == identity_key and current.trust_level == trust_level:
            return False
        self._entries[index] = (known_address, entry)
        return True


class InMemoryProfileStore(ProfileStore):
    def __init__(self) -> None:
        self._keys: dict[RecipientId, bytes] = {}

    async def get_profile_key(self, recipient_id: RecipientId) -> bytes | None:
        return self._keys.get(recipient_id)

    async def store_profile_key(self, recipient_id: RecipientId, profile_key: bytes) -> None:
        self._keys[recipient_id] = profile_key


class InMemoryAvatarStore(AvatarStore):
    def __init__(self) -> None:
        self._contacts: dict[str, tuple[str, bytes]] = {}
        self._groups: dict[bytes, tuple[str, bytes]] = {}

    @staticmethod
    def _details(item: tuple[str, bytes] | None) -> StreamDetails | None:
        if item is None:
            return None
        content_type, data = item
        return StreamDetails(stream=io.BytesIO(data), content_type=content_type, length=len(data))

    async def retrieve_contact_avatar(self, address: RecipientAddress) -> StreamDetails | None:
        return self._details(self._contacts.get(address.identifier))

    async def store_contact_avatar(self, address: RecipientAddress, writer: AvatarWriter) -> None:
        buffer = io.BytesIO()
        await writer(buffer)
        data = buffer.getvalue()
        self._contacts[address.identifier] = (guess_content_type(data), data)

    async def retrieve_group_avatar(self, group_id: bytes) -> StreamDetails | None:
        return self._details(self._groups.get(group_id))

    async def store_group_avatar(self, group_id: bytes, writer: AvatarWriter) -> None:
        buffer = io.BytesIO()
        await writer(buffer)
        data = buffer.getvalue()
        self._groups[group_id] = (guess_content_type(data), data)

    def put_contact_avatar(
        self, address: RecipientAddress, data: bytes, content_type: str = "image/png"
    ) -> None:
        self._contacts[address.identifier] = (content_type, data)

    def put_group_avatar(
        self, group_id: bytes, data: bytes, content_type: str = "image/png"
    ) -> None:
        self._groups[group_id] = (content_type, data)

    def contact_avatar(self, address: RecipientAddress) -> bytes | None:
        item = self._contacts.get(address.identifier)
        return None if item is None else item[1]

    def group_avatar(self, group_id: bytes) -> bytes | None:
        item = self._groups.get(group_id)
        return None if item is None else item[1]


class InMemoryConfigurationStore(ConfigurationStore):
    def __init__(self, configuration: AccountConfiguration | None = None) -> None:
        self.configuration = configuration or AccountConfiguration()

    async def get_configuration(self) -> AccountConfiguration:
        return self.configuration

    def update(self, **changes: bool | None) -> None:
        self.configuration = replace(self.configuration, **changes)


class InMemoryAccountStore(AccountStore):
    def __init__(
        self,
        self_address: RecipientAddress,
        recipients: RecipientStore,
        profile_key: bytes | None = None,
    ) -> None:
        self._self_address = self_address
        self._recipients = recipients
        self._profile_key = profile_key
        self._storage_key: bytes | None = None
        self._pin_master_key: bytes | None = None

    async def get_self_address(self) -> RecipientAddress:
        return self._self_address

    async def get_self_recipient_id(self) -> RecipientId:
        return await self._recipients.resolve_recipient_trusted(self._self_address)

    async def get_profile_key(self) -> bytes | None:
        return self._profile_key

    async def set_profile_key(self, profile_key: bytes) -> None:
        self._profile_key = profile_key

    async def get_or_create_storage_key(self) -> bytes:
        if self._storage_key is None:
            self._storage_key = secrets.token_bytes(MASTER_KEY_LENGTH)
        return self._storage_key

    async def get_or_create_pin_master_key(self) -> bytes:
        if self._pin_master_key is None:
            self._pin_master_key = secrets.token_bytes(MASTER_KEY_LENGTH)
        return self._pin_master_key
