import asyncio
import contextlib
import logging
from typing import Any, Generic, TypeVar

from framelink.core.connections.output import FrameOutput
from framelink.core.errors import InvalidArgumentError, InvalidStateError, IOFailure
from framelink.core.helpers.spawn import TaskSpawner
from framelink.core.models.config import ClientConfig
from framelink.core.models.state import ConnectionPhase
from framelink.core.ports.processor import MessageProcessor
from framelink.core.transport.framing import read_frame
from framelink.core.transport.handshake import echo_challenge

StateT = TypeVar("StateT")

MAX_PORT = 0xFFFF


class ClientSocket(Generic[StateT]):
    """
    Maintains one persistent TCP connection to a server and feeds every
    frame it receives to a MessageProcessor.

    ``start()`` spawns the serving sequence as a background task and
    returns immediately. The sequence connects, answers the 8-byte
    handshake challenge, runs ``on_connect()``, then reads frames one at a
    time until the server ends the stream. Frame N is fully processed
    before frame N+1 is read.

    ``close()`` is the only way to stop the sequence early: it aborts the
    transport, dropping unsent output, so that the pending read sees end of
    stream. Frames already buffered are not dispatched. Because the
    stopping flag is set first, whatever failure that read produces is
    treated as a clean stop and never reaches ``on_error()``. Any other
    I/O failure is reported to ``on_error()`` exactly once.

    ``on_close()`` always runs exactly once, as the very last event.
    A connection is single shot: there is no retry or reconnection, a new
    instance is needed to connect again.

    Subclasses customise behaviour by overriding the ``on_connect``,
    ``on_close`` and ``on_error`` hooks.
    """
    def __init__(
        self,
        processor: MessageProcessor,
        state: StateT,
        config: ClientConfig | None = None,
        spawner: TaskSpawner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._processor = processor
        self._state = state
        self._config = config or ClientConfig()
        self._spawner = spawner or TaskSpawner()
        self._logger = logger or logging.getLogger("core.connections.client")

        self._host: str | None = None
        self._port: int | None = None

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._task: asyncio.Task[Any] | None = None
        self._closed = asyncio.Event()

        self._phase = ConnectionPhase.idle
        self._stopping = False

    @property
    def phase(self) -> ConnectionPhase:
        return self._phase

    @property
    def remote_host(self) -> str | None:
        return self._host

    @property
    def remote_port(self) -> int | None:
        return self._port

    @property
    def stopping(self) -> bool:
        return self._stopping

    def get_state(self) -> StateT:
        return self._state

    def start(self, host: str, port: int) -> asyncio.Task[Any]:
        """
        Begin connecting to ``host:port`` in the background.

        The port is validated before anything else happens. Must be called
        from a running event loop, at most once per instance.
        """
        if not 0 <= port <= MAX_PORT:
            raise InvalidArgumentError(f"Invalid port number: {port}")
        if self._phase is not ConnectionPhase.idle:
            raise InvalidStateError(
                f"Client socket already started (phase: {self._phase})"
            )

        self._host = host
        self._port = port
        self._phase = ConnectionPhase.connecting
        self._task = self._spawner.spawn(self._serve(), name=f"serve-{self._who}")
        return self._task

    def close(self, reason: str) -> None:
        """
        Request the connection to stop. Safe to call at any time and any
        number of times; errors raised while closing the transport are
        ignored.
        """
        self._logger.info(
            f"{self._who} - Stopping client socket because: {reason}",
            extra={"reason": reason, "phase": str(self._phase)},
        )
        self._stopping = True

        if self._writer is not None:
            with contextlib.suppress(OSError, RuntimeError):
                self._writer.transport.abort()

    def is_online(self) -> bool:
        writer = self._writer
        return (
            writer is not None
            and self._phase is not ConnectionPhase.closed
            and not writer.is_closing()
        )

    def create_output(self) -> FrameOutput:
        return FrameOutput(self)

    def send(self, payload: bytes | bytearray | memoryview) -> None:
        """Frame and write ``payload`` as one message."""
        output = self.create_output()
        output.write(payload)
        output.terminate()

    async def wait_closed(self) -> None:
        """Wait until the serving sequence has finished, on_close included."""
        if self._task is None:
            return
        await self._closed.wait()

    def write_frame(self, frame: bytes) -> None:
        """
        Write an already framed message. Failures are routed to on_error
        from a background task instead of being raised.
        """
        writer = self._writer
        try:
            if writer is None or writer.is_closing():
                raise ConnectionError("Connection is not open")
            writer.write(frame)
        except (OSError, RuntimeError) as ex:
            self._spawner.spawn(
                self._report(ex, "write failed"), name=f"write-error-{self._who}"
            )

    async def drain(self) -> None:
        writer = self._writer
        if writer is None:
            return
        try:
            await writer.drain()
        except OSError as ex:
            await self._report(ex, "drain failed")

    async def on_connect(self) -> None:
        """Called once the handshake succeeded; messages may now be sent."""

    async def on_close(self) -> None:
        """Called exactly once, when the serving sequence ends."""

    async def on_error(self, ex: IOFailure) -> None:
        """Called for an I/O failure that was not caused by close()."""

    async def _serve(self) -> None:
        try:
            if self._stopping:
                return

            await self._open()
            if self._stopping:
                return

            await echo_challenge(self._reader, self._writer)  # type: ignore[arg-type]
            self._phase = ConnectionPhase.connected
            self._logger.debug(f"{self._who} - Handshake completed")

            await self.on_connect()

            max_size = self._config.max_message_size
            while not self._stopping:
                payload = await read_frame(self._reader, max_size)  # type: ignore[arg-type]
                if payload is None:
                    self._logger.debug(f"{self._who} - Stream ended by peer")
                    break
                if self._stopping:
                    break
                await self._processor.process(payload, self)
        except OSError as ex:
            await self._fail(ex)
        finally:
            await self._release()
            self._phase = ConnectionPhase.closed
            try:
                await self.on_close()
            finally:
                self._closed.set()

    async def _open(self) -> None:
        kwargs: dict[str, Any] = {}
        if self._config.ssl_ctx is not None:
            kwargs["ssl"] = self._config.ssl_ctx
            kwargs["server_hostname"] = self._config.server_hostname or self._host

        self._logger.debug(f"{self._who} - Connecting")
        self._reader, self._writer = await asyncio.wait_for(
            asyncio.open_connection(self._host, self._port, **kwargs),
            timeout=self._config.connect_timeout,
        )

    async def _release(self) -> None:
        writer, self._writer = self._writer, None
        self._reader = None
        if writer is None:
            return

        if self._stopping:
            with contextlib.suppress(OSError, RuntimeError):
                writer.transport.abort()
            return

        try:
            writer.close()
            await asyncio.wait_for(writer.wait_closed(), timeout=self._config.close_timeout)
        except (OSError, RuntimeError):
            # Peer stopped reading or the transport broke: drop unsent output.
            with contextlib.suppress(OSError, RuntimeError):
                writer.transport.abort()

    async def _fail(self, ex: OSError) -> None:
        if self._stopping:
            self._logger.debug(f"{self._who} - Ignoring error after stop request: {ex}")
            return
        await self._report(ex, "connection failed")

    async def _report(self, ex: OSError | RuntimeError, what: str) -> None:
        if isinstance(ex, IOFailure):
            failure = ex
        else:
            failure = IOFailure(f"{what}: {ex}")
            failure.__cause__ = ex

        self._logger.warning(f"{self._who} - {failure}")
        await self.on_error(failure)

    @property
    def _who(self) -> str:
        return f"{self._host}:{self._port}"
