"""Exception types raised at the replay engine's boundaries."""


class ReplayError(Exception):
    """Base for all trickreplay errors."""


class MatchRecordError(ReplayError):
    """Raised when a delivered match payload is not a well-formed record.

    Raised by the reader, before any replay session is constructed.
    """

    def __init__(self, reason: str, path: str | None = None):
        self.reason = reason
        self.path = path  # JSON path of the offending field, if known
        where = f" at {path}" if path else ""
        super().__init__(f"Malformed match record{where}: {reason}")


class SessionClosedError(ReplayError):
    """Raised when a command reaches a session that has been torn down."""
