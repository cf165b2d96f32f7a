import asyncio

from framelink.bootstrap.config.loader import get_cli_args
from framelink.bootstrap.config.settings import FrameLinkConfig
from framelink.bootstrap.console import ConsoleClient, ConsoleState, LoggingProcessor
from framelink.bootstrap.deps import get_config, get_serializer
from framelink.core.helpers.utils import setup_logging, setup_signal_handler
from framelink.core.ports.serializer import Serializer


def encode_messages(texts: list[str], serializer: Serializer | None) -> list[bytes]:
    messages = []
    for text in texts:
        payload = serializer.serialize(text) if serializer else text.encode("utf-8")
        if not payload:
            raise SystemExit("[send] Empty messages cannot be sent.")
        messages.append(payload)
    return messages


async def run_client(
    config: FrameLinkConfig,
    serializer: Serializer | None,
    outgoing: list[bytes],
) -> int:
    """
    Run one connection until the server ends it or a shutdown signal
    arrives. Returns the process exit code.
    """
    loop = asyncio.get_running_loop()
    state = ConsoleState(outgoing=outgoing)
    client = ConsoleClient(
        processor=LoggingProcessor(serializer),
        state=state,
        config=config.get_client_config(),
    )

    with setup_signal_handler(loop) as stop_event:
        client.start(config.server.host, config.server.port)

        stopper = asyncio.create_task(stop_event.wait())
        closer = asyncio.create_task(client.wait_closed())
        await asyncio.wait({stopper, closer}, return_when=asyncio.FIRST_COMPLETED)

        if stopper.done():
            client.close("interrupted by signal")
        stopper.cancel()
        await closer

    return 1 if state.failure is not None else 0


def main() -> int:
    cli = get_cli_args()
    setup_logging(cli.log_level)

    config = get_config()
    serializer = get_serializer(cli.msgpack)
    outgoing = encode_messages(cli.send, serializer)

    return asyncio.run(run_client(config, serializer, outgoing))


if __name__ == "__main__":
    raise SystemExit(main())
