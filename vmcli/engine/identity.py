"""Decoding of the engine's identity: mixer type and packed version."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from vmcli.engine.errors import ErrorKind, ProtocolError
from vmcli.engine.primitives import (
    QUERY_ERRORS,
    STATUS_OK,
    Err,
    MixerType,
    Ok,
    Result,
    Version,
    errorFor,
)
from vmcli.engine.protocols import DriverBridge
from vmcli.engine.session import Session


@dataclass(slots=True)
class IdentityDecoder:
    driver: DriverBridge
    session: Session

    def getMixerType(self) -> Result[MixerType]:
        """Which product variant the running engine is."""
        with self.session.lock:
            self.session.warnIfLoggedOut("type")
            status, code = self.driver.getVoicemeeterType()

        if status != STATUS_OK:
            return errorFor("type", status, QUERY_ERRORS)

        try:
            return Ok(MixerType(code))
        except ValueError:
            logger.warning("[type] Unknown mixer type code: {}", code)
            return Err(ProtocolError(ErrorKind.UNEXPECTED, "type: unknown mixer type reported"))

    def getVersionInfo(self) -> Result[Version]:
        with self.session.lock:
            self.session.warnIfLoggedOut("version")
            status, packed = self.driver.getVoicemeeterVersion()

        if status != STATUS_OK:
            return errorFor("version", status, QUERY_ERRORS)

        return Ok(Version.fromPacked(packed))

    def getVersion(self) -> Result[str]:
        """Engine version as dotted "major.minor.patch.build"."""
        match self.getVersionInfo():
            case Ok(version):
                return Ok(str(version))
            case err:
                return err
