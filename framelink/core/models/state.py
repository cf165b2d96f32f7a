from enum import StrEnum


class ConnectionPhase(StrEnum):
    """
    Lifecycle of a ClientSocket. Transitions only move forward:

        idle -> connecting -> connected -> closed

    A connection that fails before the handshake goes from connecting
    straight to closed. ``closed`` is terminal.
    """
    idle = "idle"
    connecting = "connecting"
    connected = "connected"
    closed = "closed"
