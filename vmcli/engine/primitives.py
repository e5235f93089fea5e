"""Pure types, constants, and status decoding helpers with no driver access."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final, Generic, NoReturn, TypeAlias, TypeVar

from loguru import logger

from vmcli.engine.errors import ErrorKind, ProtocolError

T = TypeVar("T")
V = TypeVar("V")

# The string probe needs at least this much room; the driver writes
# null-terminated text and never reports how long it is.
MIN_STRING_BUFFER: Final = 512

STATUS_OK: Final = 0

# login() answers 1 when the channel opened but the engine is not running yet
STATUS_NOT_RUNNING: Final = 1

STATUS_DIRTY: Final = 1
STATUS_CLEAN: Final = 0


class MixerType(enum.IntEnum):
    """Product variants the engine may be running as."""

    Normal = 1
    Banana = 2
    Potato = 3
    Potato64 = 6

    @classmethod
    def fromName(cls, name: str) -> MixerType:
        """Case-insensitive lookup by name or numeric code ("banana", "2")."""
        name = name.strip()
        if name.isdigit():
            return cls(int(name))

        for member in cls:
            if member.name.lower() == name.lower():
                return member

        raise ValueError(f"Unknown mixer type: {name}")


class SessionState(enum.Enum):
    LoggedOut = "logged out"
    LoggedIn = "logged in"


@dataclass(slots=True, frozen=True)
class Version:
    """Four byte-wide version components, most significant first."""

    major: int
    minor: int
    patch: int
    build: int

    @classmethod
    def fromPacked(cls, packed: int) -> Version:
        # drivers hand this back through a signed long, so fold to 32 bits first
        packed &= 0xFFFFFFFF
        return cls(
            (packed >> 24) & 0xFF,
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
        )

    def packed(self) -> int:
        return (self.major << 24) | (self.minor << 16) | (self.patch << 8) | self.build

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.{self.build}"


# ── Parameter values ────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class Numeric:
    """A parameter that answered the float probe."""

    value: float

    def __str__(self) -> str:
        return f"{self.value:g}"


@dataclass(slots=True, frozen=True)
class Text:
    """A parameter that only answered the string probe."""

    value: str

    def __str__(self) -> str:
        return self.value


ParameterValue: TypeAlias = Numeric | Text


# ── Results ─────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(slots=True, frozen=True)
class Err:
    error: ProtocolError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    def unwrap(self) -> NoReturn:
        raise self.error


Result: TypeAlias = Ok[V] | Err


# ── Status tables ───────────────────────────────────────────────────
# Failure codes are only meaningful per-operation: -2 means "unexpected login"
# for login but "no server" everywhere else.

LOGIN_ERRORS: Final = {
    -1: ErrorKind.CLIENT_UNAVAILABLE,
    -2: ErrorKind.ALREADY_LOGGED_IN,
}

RUN_ERRORS: Final = {
    -1: ErrorKind.NOT_INSTALLED,
    -2: ErrorKind.UNKNOWN_TYPE,
}

QUERY_ERRORS: Final = {
    -1: ErrorKind.CLIENT_UNAVAILABLE,
    -2: ErrorKind.NO_SERVER,
}

STRING_PARAMETER_ERRORS: Final = {
    -2: ErrorKind.NO_SERVER,
    -3: ErrorKind.UNKNOWN_PARAMETER,
    -5: ErrorKind.STRUCTURE_MISMATCH,
}

FLOAT_PARAMETER_ERRORS: Final = {
    -1: ErrorKind.CLIENT_UNAVAILABLE,
    **STRING_PARAMETER_ERRORS,
}


def errorFor(op: str, code: int, table: dict[int, ErrorKind]) -> Err:
    """Map a raw failure status to an Err using the operation's table.

    Codes missing from the table become ErrorKind.UNEXPECTED; the raw value
    is only ever written to the log.
    """
    kind = table.get(code)
    if kind is None:
        logger.warning("[{}] Unmapped driver status: {}", op, code)
        return Err(ProtocolError(ErrorKind.UNEXPECTED, f"{op}: unexpected driver status"))

    logger.debug("[{}] Driver status {} -> {}", op, code, kind.name)
    return Err(ProtocolError(kind))
