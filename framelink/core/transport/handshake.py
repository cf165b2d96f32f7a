import asyncio

from framelink.core.errors import IOFailure

CHALLENGE_SIZE = 8


async def echo_challenge(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
) -> bytes:
    """
    Answer the server's address check: read the 8-byte challenge it sends
    right after accepting the connection and write it back unchanged.

    The bytes are not interpreted. Returns the challenge.
    """
    try:
        challenge = await reader.readexactly(CHALLENGE_SIZE)
    except asyncio.IncompleteReadError as ex:
        raise IOFailure(
            f"Stream ended during handshake ({len(ex.partial)} of "
            f"{CHALLENGE_SIZE} bytes received)"
        ) from ex

    writer.write(challenge)
    await writer.drain()
    return challenge
