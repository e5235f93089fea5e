"""Error taxonomy for the remote control channel."""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CLIENT_UNAVAILABLE = "cannot get client (unexpected)"
    ALREADY_LOGGED_IN = "unexpected login (logout was expected before)"
    NO_SERVER = "no server"
    NOT_INSTALLED = "Voicemeeter not installed"
    UNKNOWN_TYPE = "unknown Voicemeeter type"
    UNKNOWN_PARAMETER = "unknown parameter"
    STRUCTURE_MISMATCH = "structure mismatch"

    # raw status the driver returned is outside every known table
    UNEXPECTED = "unexpected driver status"


class ProtocolError(Exception):
    """A driver failure mapped to a semantic kind.

    Raw status codes never leave the engine; only the kind (and a readable
    message) travel with the error.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"ProtocolError({self.kind.name}, {self.message!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProtocolError):
            return NotImplemented

        return self.kind == other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))


class RemoteLibraryError(Exception):
    """The vendor remote library could not be located or loaded."""
