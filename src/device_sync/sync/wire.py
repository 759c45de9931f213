"""Stream framing for sync record streams.

Peer devices write each record body as a protobuf message preceded by its
varint length. Record bodies themselves are handled by the generated
``sync_details_pb2`` classes; this module only reads and writes the frame
around them and the raw avatar bytes that may follow.
"""

from __future__ import annotations

from typing import BinaryIO

from google.protobuf.internal.decoder import _DecodeVarint32
from google.protobuf.internal.encoder import _VarintBytes

_MAX_VARINT32_BYTES = 5
_SKIP_CHUNK = 64 * 1024


class RecordFormatError(ValueError):
    """A single record could not be decoded."""


class StreamTruncatedError(RecordFormatError):
    """The stream ended or lost alignment; no further records can be read."""


def write_delimited(sink: BinaryIO, body: bytes) -> None:
    """Write a varint length prefix followed by ``body``."""
    sink.write(_VarintBytes(len(body)))
    sink.write(body)


def read_varint32(source: BinaryIO) -> int | None:
    """Read a varint length prefix from a stream.

    Returns:
        The decoded value, or None on a clean end of stream.

    Raises:
        StreamTruncatedError: If the stream ends inside the varint or the
            varint is longer than a 32-bit value allows.
    """
    prefix = bytearray()
    while True:
        byte = source.read(1)
        if not byte:
            if not prefix:
                return None
            raise StreamTruncatedError("stream ended inside a length prefix")
        prefix += byte
        if not byte[0] & 0x80:
            break
        if len(prefix) == _MAX_VARINT32_BYTES:
            raise StreamTruncatedError("malformed length prefix")
    value, _ = _DecodeVarint32(bytes(prefix), 0)
    return value


def read_exact(source: BinaryIO, length: int) -> bytes:
    """Read exactly ``length`` bytes or raise StreamTruncatedError."""
    data = source.read(length)
    if len(data) != length:
        raise StreamTruncatedError(f"expected {length} bytes, stream had {len(data)}")
    return data


def skip_exact(source: BinaryIO, length: int) -> None:
    """Consume ``length`` bytes without keeping them."""
    remaining = length
    while remaining > 0:
        chunk = source.read(min(remaining, _SKIP_CHUNK))
        if not chunk:
            raise StreamTruncatedError(f"stream ended with {remaining} bytes left to skip")
        remaining -= len(chunk)
