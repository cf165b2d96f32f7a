import msgpack
from typing import Any

from framelink.core.ports.serializer import Serializer


class MsgPackSerializer(Serializer):
    """
    MsgPack-based Serializer. Every packed value is at least one byte
    long, so the output is always a valid frame payload.

    A payload that is not exactly one msgpack value (truncated, trailing
    bytes or an unknown type byte) is rejected with ValueError.
    """
    def serialize(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except (msgpack.UnpackException, ValueError) as ex:
            raise ValueError(f"Invalid msgpack payload ({len(data)} bytes): {ex}") from ex
