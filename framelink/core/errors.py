class FrameLinkError(Exception):
    """Base class for every error raised by framelink."""


class InvalidArgumentError(FrameLinkError, ValueError):
    """
    A caller passed a value outside of its accepted domain,
    e.g. a port number outside 0..65535.
    """


class InvalidStateError(FrameLinkError, RuntimeError):
    """
    An operation is not allowed in the current state: an empty or oversized
    message was terminated, or a connection was started twice.
    """


class IOFailure(FrameLinkError, OSError):
    """
    Transport-level read or write failure. The underlying exception,
    if any, is chained as ``__cause__``.
    """


class FrameError(IOFailure):
    """The byte stream does not hold a well-formed frame."""
