"""Protocol buffer classes for sync_details.proto.

The file descriptor is assembled with ``descriptor_pb2`` instead of being
embedded as serialized bytes, so no protoc step is needed; the resulting
module exposes the same message classes protoc would generate.
"""

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import symbol_database as _symbol_database
from google.protobuf.internal import builder as _builder

_sym_db = _symbol_database.Default()

_F = descriptor_pb2.FieldDescriptorProto


def _field(message, name, number, field_type, type_name=None, repeated=False, default=None):
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = type_name
    if default is not None:
        field.default_value = default


def _serialized_file() -> bytes:
    file = descriptor_pb2.FileDescriptorProto(
        name="device_sync/sync_details.proto",
        package="devicesync",
        syntax="proto2",
    )

    avatar = file.message_type.add(name="Avatar")
    _field(avatar, "content_type", 1, _F.TYPE_STRING)
    _field(avatar, "length", 2, _F.TYPE_UINT32)

    verified = file.message_type.add(name="Verified")
    _field(verified, "destination_e164", 1, _F.TYPE_STRING)
    _field(verified, "identity_key", 2, _F.TYPE_BYTES)
    _field(verified, "state", 3, _F.TYPE_UINT32)
    _field(verified, "null_message", 4, _F.TYPE_BYTES)
    _field(verified, "destination_aci", 5, _F.TYPE_STRING)

    contact = file.message_type.add(name="ContactDetails")
    _field(contact, "number", 1, _F.TYPE_STRING)
    _field(contact, "name", 2, _F.TYPE_STRING)
    _field(contact, "avatar", 3, _F.TYPE_MESSAGE, ".devicesync.Avatar")
    _field(contact, "color", 4, _F.TYPE_STRING)
    _field(contact, "verified", 5, _F.TYPE_MESSAGE, ".devicesync.Verified")
    _field(contact, "profile_key", 6, _F.TYPE_BYTES)
    _field(contact, "blocked", 7, _F.TYPE_BOOL)
    _field(contact, "expire_timer", 8, _F.TYPE_UINT32)
    _field(contact, "aci", 9, _F.TYPE_STRING)
    _field(contact, "inbox_position", 10, _F.TYPE_UINT32)
    _field(contact, "archived", 11, _F.TYPE_BOOL)

    group = file.message_type.add(name="GroupDetails")
    member = group.nested_type.add(name="Member")
    member.reserved_range.add(start=1, end=2)
    _field(member, "e164", 2, _F.TYPE_STRING)
    _field(group, "id", 1, _F.TYPE_BYTES)
    _field(group, "name", 2, _F.TYPE_STRING)
    _field(group, "members_e164", 3, _F.TYPE_STRING, repeated=True)
    _field(group, "avatar", 4, _F.TYPE_MESSAGE, ".devicesync.Avatar")
    _field(group, "active", 5, _F.TYPE_BOOL, default="true")
    _field(group, "expire_timer", 6, _F.TYPE_UINT32)
    _field(group, "color", 7, _F.TYPE_STRING)
    _field(group, "blocked", 8, _F.TYPE_BOOL)
    _field(group, "members", 9, _F.TYPE_MESSAGE, ".devicesync.GroupDetails.Member", repeated=True)
    _field(group, "inbox_position", 10, _F.TYPE_UINT32)
    _field(group, "archived", 11, _F.TYPE_BOOL)

    return file.SerializeToString()


DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(_serialized_file())

_globals = globals()
_builder.BuildMessageAndEnumDescriptors(DESCRIPTOR, _globals)
_builder.BuildTopDescriptorsAndMessages(DESCRIPTOR, "device_sync.sync.proto.sync_details_pb2", _globals)
