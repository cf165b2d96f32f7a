import logging
from dataclasses import dataclass, field
from typing import Any

from framelink.core.connections.client import ClientSocket
from framelink.core.errors import IOFailure
from framelink.core.helpers.utils import hex_preview
from framelink.core.ports.serializer import Serializer


@dataclass
class ConsoleState:
    """Per-connection state of the console client."""
    outgoing: list[bytes] = field(default_factory=list)
    received: int = 0
    failure: IOFailure | None = None


class LoggingProcessor:
    """
    Logs every received frame. With a serializer, the decoded value is
    logged instead of the hex preview. Payloads the serializer rejects are
    logged as warnings and the connection stays up.
    """
    def __init__(self, serializer: Serializer | None = None) -> None:
        self._serializer = serializer
        self._logger = logging.getLogger("bootstrap.console")

    async def process(self, payload: bytes, connection: ClientSocket[ConsoleState]) -> None:
        state = connection.get_state()
        state.received += 1

        if self._serializer is None:
            body: Any = hex_preview(payload)
        else:
            try:
                body = self._serializer.deserialize(payload)
            except ValueError as ex:
                self._logger.warning(
                    f"frame #{state.received} ({len(payload)} bytes) could not be decoded: "
                    f"{ex}; raw: {hex_preview(payload)}"
                )
                return

        self._logger.info(f"frame #{state.received} ({len(payload)} bytes): {body}")


class ConsoleClient(ClientSocket[ConsoleState]):
    """
    ClientSocket used by the command line: sends the queued messages as
    soon as the handshake completes and records the first failure.
    """
    async def on_connect(self) -> None:
        self._logger.info(f"Connected to {self.remote_host}:{self.remote_port}")
        for message in self.get_state().outgoing:
            output = self.create_output()
            output.write(message)
            await output.flush()

    async def on_error(self, ex: IOFailure) -> None:
        state = self.get_state()
        if state.failure is None:
            state.failure = ex

    async def on_close(self) -> None:
        self._logger.info(
            f"Disconnected from {self.remote_host}:{self.remote_port} "
            f"after {self.get_state().received} frame(s)"
        )
