import asyncio
from dataclasses import dataclass
from typing import ClassVar

from framelink.core.errors import FrameError, InvalidStateError
from framelink.core.helpers.bits import (
    U16_MAX,
    U32_MAX,
    pack_u16,
    pack_u32,
    unpack_u16,
    unpack_u32,
)

MEDIUM_MARKER = 254
LONG_MARKER = 255

SHORT_LIMIT = MEDIUM_MARKER         # lengths 1..254 fit in the marker byte
MEDIUM_LIMIT = U16_MAX + 1          # lengths 255..65536 use a u16 extension
MAX_PAYLOAD_SIZE = U32_MAX          # anything above uses a u32 extension


@dataclass(frozen=True, slots=True)
class ShortPrefix:
    """
    Single byte prefix. The marker stores ``length - 1``: a zero-length
    payload cannot be framed, so marker 0 is reclaimed for length 1.
    """
    length: int
    extension_size: ClassVar[int] = 0

    def encode(self) -> bytes:
        return bytes((self.length - 1,))

    @classmethod
    def from_marker(cls, marker: int) -> "ShortPrefix":
        return cls(marker + 1)


@dataclass(frozen=True, slots=True)
class MediumPrefix:
    """
    Marker 254 followed by a u16 holding ``length - 1``.
    """
    length: int
    extension_size: ClassVar[int] = 2

    def encode(self) -> bytes:
        return bytes((MEDIUM_MARKER,)) + pack_u16(self.length - 1)

    @classmethod
    def from_extension(cls, extension: bytes) -> "MediumPrefix":
        return cls(unpack_u16(extension) + 1)


@dataclass(frozen=True, slots=True)
class LongPrefix:
    """
    Marker 255 followed by a u32 holding the length itself. Unlike the
    medium tier there is no offset here; wire compatibility depends on it.
    """
    length: int
    extension_size: ClassVar[int] = 4

    def encode(self) -> bytes:
        return bytes((LONG_MARKER,)) + pack_u32(self.length)

    @classmethod
    def from_extension(cls, extension: bytes) -> "LongPrefix":
        length = unpack_u32(extension)
        if length == 0:
            raise FrameError("Zero-length frame on the wire")
        return cls(length)


LengthPrefix = ShortPrefix | MediumPrefix | LongPrefix


def prefix_for(length: int) -> LengthPrefix:
    """Select the prefix representation for a payload of ``length`` bytes."""
    if length <= 0:
        raise InvalidStateError("Empty messages are not supported")
    if length <= SHORT_LIMIT:
        return ShortPrefix(length)
    if length <= MEDIUM_LIMIT:
        return MediumPrefix(length)
    if length <= MAX_PAYLOAD_SIZE:
        return LongPrefix(length)
    raise InvalidStateError(
        f"Message of {length} bytes exceeds the maximum of {MAX_PAYLOAD_SIZE}"
    )


def extension_size(marker: int) -> int:
    """Number of bytes following the marker byte before the payload."""
    if marker == MEDIUM_MARKER:
        return MediumPrefix.extension_size
    if marker == LONG_MARKER:
        return LongPrefix.extension_size
    return ShortPrefix.extension_size


def parse_prefix(marker: int, extension: bytes = b"") -> LengthPrefix:
    """
    Rebuild a prefix from its marker byte and the extension bytes that
    follow it. ``extension`` must hold exactly ``extension_size(marker)``
    bytes.
    """
    if len(extension) != extension_size(marker):
        raise FrameError(
            f"Marker {marker} expects {extension_size(marker)} extension "
            f"bytes, got {len(extension)}"
        )
    if marker == MEDIUM_MARKER:
        return MediumPrefix.from_extension(extension)
    if marker == LONG_MARKER:
        return LongPrefix.from_extension(extension)
    return ShortPrefix.from_marker(marker)


def encode_frame(payload: bytes | bytearray | memoryview) -> bytes:
    """
    Build the wire representation of ``payload``: prefix then payload bytes.
    Raises InvalidStateError for empty or oversized payloads.
    """
    prefix = prefix_for(len(payload))
    return prefix.encode() + bytes(payload)


def decode_frame(
    buffer: bytes | bytearray | memoryview,
    max_size: int | None = None,
) -> tuple[bytes | None, int]:
    """
    Parse one frame from the start of ``buffer``.

    Returns ``(payload, consumed)``. When the buffer does not yet hold a
    complete frame, ``(None, 0)`` is returned and nothing is consumed.
    """
    view = memoryview(buffer)
    if len(view) < 1:
        return None, 0

    marker = view[0]
    header_size = 1 + extension_size(marker)
    if len(view) < header_size:
        return None, 0

    prefix = parse_prefix(marker, bytes(view[1:header_size]))
    _check_size(prefix.length, max_size)

    end = header_size + prefix.length
    if len(view) < end:
        return None, 0
    return bytes(view[header_size:end]), end


async def read_frame(
    reader: asyncio.StreamReader,
    max_size: int | None = None,
) -> bytes | None:
    """
    Read exactly one frame from ``reader``.

    Returns ``None`` when the stream ends cleanly on a frame boundary.
    A stream ending inside a frame raises FrameError.
    """
    head = await reader.read(1)
    if not head:
        return None

    marker = head[0]
    try:
        extension = await reader.readexactly(extension_size(marker))
        prefix = parse_prefix(marker, extension)
        _check_size(prefix.length, max_size)
        return await reader.readexactly(prefix.length)
    except asyncio.IncompleteReadError as ex:
        raise FrameError(
            f"Stream ended inside a frame ({len(ex.partial)} of "
            f"{ex.expected} bytes read)"
        ) from ex


def _check_size(length: int, max_size: int | None) -> None:
    if max_size is not None and length > max_size:
        raise FrameError(
            f"Frame of {length} bytes exceeds the limit of {max_size}"
        )
