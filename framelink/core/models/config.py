import ssl
from dataclasses import dataclass


@dataclass
class ClientConfig:
    """
    Static configuration for a ClientSocket.

    Everything here is optional: a default ClientConfig opens a plain TCP
    connection and accepts any frame the protocol can express.
    """
    ssl_ctx: ssl.SSLContext | None = None
    """
    TLS context used to wrap the connection before the handshake.
    When None the connection is plain TCP.
    """

    server_hostname: str | None = None
    """
    Host name checked against the server certificate. Defaults to the
    host given to start() when TLS is enabled.
    """

    max_message_size: int | None = None
    """
    Largest payload accepted on decode. Larger frames are reported as
    FrameError and end the connection. None means the protocol maximum.
    """

    connect_timeout: float | None = None
    """
    Maximum time (in seconds) to establish the TCP connection.
    Reads after the handshake are never timed out.
    """

    close_timeout: float = 5.0
    """
    Maximum time (in seconds) to flush pending output when the server
    ends the connection. After it the transport is aborted. A close()
    request never waits: it aborts at once.
    """
