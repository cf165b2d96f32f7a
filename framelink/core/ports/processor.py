from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from framelink.core.connections.client import ClientSocket


class MessageProcessor(Protocol):
    """
    Consumer of decoded frames.

    ``process`` is awaited once per frame, in arrival order, from the
    connection's serving task. The next frame is not read before it
    returns. The connection is passed along so the processor can read
    the application state with ``get_state()`` or reply through
    ``create_output()``.

    Exceptions raised here are not I/O failures: they end the serving
    task and are logged by the TaskSpawner, after on_close has run.
    """
    async def process(self, payload: bytes, connection: "ClientSocket") -> None:
        ...
