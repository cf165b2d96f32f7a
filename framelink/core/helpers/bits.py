import struct

# Extended length fields are little endian: low byte first.
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")

U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF


def pack_u16(value: int) -> bytes:
    return _U16.pack(value)


def unpack_u16(data: bytes | bytearray | memoryview) -> int:
    return _U16.unpack(data)[0]


def pack_u32(value: int) -> bytes:
    return _U32.pack(value)


def unpack_u32(data: bytes | bytearray | memoryview) -> int:
    return _U32.unpack(data)[0]
