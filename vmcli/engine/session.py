"""Control channel session state shared by the engine components."""
from __future__ import annotations

import dataclasses
import threading

from loguru import logger

from vmcli.engine.primitives import SessionState


@dataclasses.dataclass
class Session:
    """Login state of the single control channel.

    The driver is not reentrant, so every component issues its calls while
    holding ``lock``. The lock is reentrant so a component may call another
    component's operation from inside its own critical section.
    """

    state: SessionState = SessionState.LoggedOut
    lock: threading.RLock = dataclasses.field(default_factory=threading.RLock, repr=False)

    @property
    def loggedIn(self) -> bool:
        return self.state is SessionState.LoggedIn

    def markLoggedIn(self) -> None:
        if self.state is not SessionState.LoggedIn:
            logger.debug("Session: {} -> {}", self.state.value, SessionState.LoggedIn.value)

        self.state = SessionState.LoggedIn

    def markLoggedOut(self) -> None:
        if self.state is not SessionState.LoggedOut:
            logger.debug("Session: {} -> {}", self.state.value, SessionState.LoggedOut.value)

        self.state = SessionState.LoggedOut

    def warnIfLoggedOut(self, op: str) -> None:
        """Warn when an operation that needs the channel runs without it.

        The call still goes through; the driver answers with its own
        "no server" status which the caller receives as usual.
        """
        if not self.loggedIn:
            logger.warning("[{}] Called while logged out", op)
