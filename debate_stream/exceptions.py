"""Exceptions raised while consuming a debate stream."""


class EventDecodeError(ValueError):
    """A frame payload could not be decoded into a debate event."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class DebateTransportError(RuntimeError):
    """The debate stream could not be opened or broke mid-flight."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
