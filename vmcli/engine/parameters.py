"""Parameter reads whose value type is not known up front.

The remote library has no "what type is this parameter" call, so
``getParameter`` probes: a float read first and, only if that fails, a
string read. The order matters beyond efficiency: the failure reported for
a genuinely missing parameter is the one from the string probe.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from vmcli.engine.primitives import (
    FLOAT_PARAMETER_ERRORS,
    MIN_STRING_BUFFER,
    QUERY_ERRORS,
    STATUS_CLEAN,
    STATUS_DIRTY,
    STATUS_OK,
    STRING_PARAMETER_ERRORS,
    Numeric,
    Ok,
    ParameterValue,
    Result,
    Text,
    errorFor,
)
from vmcli.engine.protocols import DriverBridge
from vmcli.engine.session import Session


def decodeCString(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode a driver-filled buffer up to its first NUL."""
    return raw.split(b"\x00", 1)[0].decode(encoding, errors="replace")


@dataclass(slots=True)
class ParameterResolver:
    driver: DriverBridge
    session: Session

    # capacity handed to the string probe (driver-defined maximum, 512 by convention)
    bufferSize: int = MIN_STRING_BUFFER

    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.bufferSize < MIN_STRING_BUFFER:
            raise ValueError(
                f"String buffer must hold at least {MIN_STRING_BUFFER} bytes (got {self.bufferSize})"
            )

    def getParameter(self, name: str) -> Result[ParameterValue]:
        """Read a parameter as Numeric if the float probe succeeds, else as Text."""
        with self.session.lock:
            self.session.warnIfLoggedOut("get")

            status, value = self.driver.getParameterFloat(name)
            if status == STATUS_OK:
                logger.trace("[get] {} = {} (float)", name, value)
                return Ok(Numeric(value))

            logger.trace("[get] {} float probe status {}, trying string", name, status)

            status, raw = self.driver.getParameterString(name, self.bufferSize)

        if status == STATUS_OK:
            text = decodeCString(raw, self.encoding)
            logger.trace("[get] {} = {!r} (string)", name, text)
            return Ok(Text(text))

        return errorFor(f"get {name}", status, STRING_PARAMETER_ERRORS)

    def getParameterFloat(self, name: str) -> Result[float]:
        with self.session.lock:
            self.session.warnIfLoggedOut("getf")
            status, value = self.driver.getParameterFloat(name)

        if status != STATUS_OK:
            return errorFor(f"getf {name}", status, FLOAT_PARAMETER_ERRORS)

        return Ok(value)

    def getParameterString(self, name: str) -> Result[str]:
        with self.session.lock:
            self.session.warnIfLoggedOut("gets")
            status, raw = self.driver.getParameterString(name, self.bufferSize)

        if status != STATUS_OK:
            return errorFor(f"gets {name}", status, STRING_PARAMETER_ERRORS)

        return Ok(decodeCString(raw, self.encoding))

    def isParametersDirty(self) -> Result[bool]:
        """Whether any parameter changed since the previous poll.

        Polling primitive only: callers schedule repeated calls themselves.
        """
        with self.session.lock:
            self.session.warnIfLoggedOut("dirty")
            status = self.driver.isParametersDirty()

        if status == STATUS_DIRTY:
            return Ok(True)

        if status == STATUS_CLEAN:
            return Ok(False)

        return errorFor("dirty", status, QUERY_ERRORS)
