from typing import Protocol, Any


class Serializer(Protocol):
    """
    Turns structured application values into frame payloads and back.

    The connection itself only moves opaque bytes; a Serializer is what an
    application plugs in front of ``FrameOutput.write()`` and behind
    ``MessageProcessor.process()`` when it wants more than raw bytes.

    Implementations must never produce an empty payload, since empty
    frames cannot be sent.
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a Python value into a frame payload."""

    def deserialize(self, data: bytes) -> Any:
        """
        Decode a frame payload into a Python value.

        Raises ValueError when the payload is not a valid encoding.
        """
