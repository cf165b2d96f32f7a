import argparse
import os
from functools import lru_cache
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="framelink",
        description=(
            "Connect to a framelink server and print every frame it sends.\n\n"
            "The client answers the 8-byte handshake challenge, then logs\n"
            "the size and a hex preview of each received message."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a framelink configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "DEBUG    → connection lifecycle tracing.\n"
            "INFO     → received frames and close reasons (default).\n"
            "WARNING  → only I/O failures.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    parser.add_argument(
        "-s", "--send",
        action="append",
        default=[],
        metavar="TEXT",
        help=(
            "Message to send once connected, UTF-8 encoded.\n"
            "May be repeated; messages are sent in order."
        ),
    )

    parser.add_argument(
        "--msgpack",
        action="store_true",
        help="Pack outgoing messages and unpack incoming ones with msgpack."
    )

    return parser


@lru_cache
def get_cli_args() -> argparse.Namespace:
    return build_parser().parse_args()


def resolve_configfile(raw: str | None) -> Path | None:
    """
    Priority: explicit path > FRAMELINKCONFIG > ./framelink.yaml.

    An explicit path that does not exist is an error; a missing default
    file only means the built-in defaults are used.
    """
    raw = raw or os.getenv("FRAMELINKCONFIG")

    if raw is None:
        default = Path.cwd() / "framelink.yaml"
        return default if default.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the FRAMELINKCONFIG environment variable\n"
            "  - Or place a 'framelink.yaml' file in the current working directory."
        )

    return file


@lru_cache
def get_configfile() -> Path | None:
    return resolve_configfile(get_cli_args().config)
