"""Session lifecycle: login, logout, and launching the engine."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from vmcli.engine.primitives import (
    LOGIN_ERRORS,
    RUN_ERRORS,
    STATUS_NOT_RUNNING,
    STATUS_OK,
    MixerType,
    Ok,
    Result,
    errorFor,
)
from vmcli.engine.protocols import DriverBridge
from vmcli.engine.session import Session


@dataclass(slots=True)
class SessionManager:
    """Owns the LoggedOut/LoggedIn transitions of a Session."""

    driver: DriverBridge
    session: Session

    def login(self) -> Result[bool]:
        """Open the control channel.

        Returns Ok(True) when the engine is already running and Ok(False) when
        the channel opened but the engine has not started yet (the channel is
        usable either way). A second login without a logout is not suppressed
        here: the driver reports the collision and it surfaces as
        ALREADY_LOGGED_IN.
        """
        with self.session.lock:
            status = self.driver.login()
            logger.trace("[login] status {}", status)

            if status == STATUS_OK:
                self.session.markLoggedIn()
                logger.info("Logged in")
                return Ok(True)

            if status == STATUS_NOT_RUNNING:
                self.session.markLoggedIn()
                logger.info("Logged in (engine not running)")
                return Ok(False)

            return errorFor("login", status, LOGIN_ERRORS)

    def logout(self) -> bool:
        """Close the control channel; best effort, never fails.

        The session is LoggedOut afterwards whatever the driver reports.
        """
        with self.session.lock:
            status = self.driver.logout()
            self.session.markLoggedOut()

            if status != STATUS_OK:
                logger.warning("[logout] Driver reported status {}", status)
                return False

            logger.info("Logged out")
            return True

    def runEngine(self, kind: MixerType) -> Result[None]:
        """Ask the driver to launch the engine as the given variant.

        Does not need a login and does not touch session state.
        """
        with self.session.lock:
            status = self.driver.runVoicemeeter(int(kind))
            logger.trace("[run] {} status {}", kind, status)

            if status == STATUS_OK:
                logger.info("Launch requested: {}", getattr(kind, "name", kind))
                return Ok(None)

            return errorFor("run", status, RUN_ERRORS)
