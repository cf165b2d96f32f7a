from typing import TYPE_CHECKING

from framelink.core.errors import InvalidStateError
from framelink.core.transport.framing import encode_frame

if TYPE_CHECKING:
    from framelink.core.connections.client import ClientSocket


class FrameOutput:
    """
    Accumulates the payload of one outgoing message.

    Nothing reaches the wire until ``terminate()`` is called; the buffered
    bytes are then framed and written in a single call. A FrameOutput is
    single use: it cannot be terminated twice.

    Writers are not synchronized. Two coroutines may safely fill two
    separate outputs of the same connection, since ``terminate()`` does
    not yield to the event loop, but threads must not share a connection.
    """
    def __init__(self, connection: "ClientSocket") -> None:
        self._connection = connection
        self._buffer = bytearray()
        self._terminated = False

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def terminated(self) -> bool:
        return self._terminated

    def write(self, data: bytes | bytearray | memoryview) -> None:
        self._ensure_open()
        self._buffer.extend(data)

    def write_byte(self, value: int) -> None:
        self._ensure_open()
        self._buffer.append(value)

    def get_bytes(self) -> bytes:
        return bytes(self._buffer)

    def terminate(self) -> None:
        """
        Frame the buffered payload and hand it to the connection.

        An empty payload raises InvalidStateError and writes nothing.
        Transport failures are not raised here: they are reported through
        the connection's ``on_error`` hook.
        """
        self._ensure_open()
        frame = encode_frame(self._buffer)
        self._terminated = True
        self._connection.write_frame(frame)

    async def flush(self) -> None:
        """Terminate, then wait until the transport buffer has drained."""
        self.terminate()
        await self._connection.drain()

    def _ensure_open(self) -> None:
        if self._terminated:
            raise InvalidStateError("Output already terminated")
