from __future__ import annotations


class EdisonError(Exception):
    """Base class for every failure the client and server report to the operator."""


class ArgumentError(EdisonError):
    """Missing or invalid command-line input, with the usage text of the parser that rejected it."""

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.usage = usage


class TransportError(EdisonError):
    """A socket-level operation failed."""


class ResolutionError(TransportError):
    pass


class SocketCreateError(TransportError):
    pass


class BindError(TransportError):
    pass


class ListenError(TransportError):
    pass


class ConnectError(TransportError):
    pass


class AcceptError(TransportError):
    pass


class SessionStateError(TransportError):
    """An operation was attempted on a session in the wrong role."""


class SendError(TransportError):
    pass


class ReceiveError(TransportError):
    pass


class ShortWriteError(SendError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"expected to send {expected} bytes but actually sent {actual} bytes"
        )
        self.expected = expected
        self.actual = actual


class ShortReadError(ReceiveError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"expected to read {expected} bytes but actually read {actual}"
        )
        self.expected = expected
        self.actual = actual
