"""One control session wired to the three engine components."""

from __future__ import annotations

from loguru import logger

from vmcli.config import Settings
from vmcli.engine.driver import RemoteDriver
from vmcli.engine.identity import IdentityDecoder
from vmcli.engine.library import findRemoteLibrary, loadRemoteLibrary
from vmcli.engine.manager import SessionManager
from vmcli.engine.parameters import ParameterResolver
from vmcli.engine.primitives import (
    MixerType,
    ParameterValue,
    Result,
    SessionState,
    Version,
)
from vmcli.engine.protocols import DriverBridge
from vmcli.engine.session import Session


class Remote:
    """Client for a running engine.

    Each Remote owns an independent Session, so tests (or tools juggling
    several drivers) can build as many as they like; against the real
    library there should only ever be one per process.

    Usage:
        with Remote.open(settings) as vm:
            print(vm.getVersion().unwrap())
            print(vm.getParameter("Strip[0].Gain").unwrap())
    """

    def __init__(self, driver: DriverBridge, settings: Settings | None = None):
        settings = settings or Settings()

        self.driver = driver
        self.settings = settings
        self.session = Session()
        self.manager = SessionManager(driver, self.session)
        self.identity = IdentityDecoder(driver, self.session)
        self.parameters = ParameterResolver(
            driver,
            self.session,
            bufferSize=settings.stringBuffer,
            encoding=settings.textEncoding,
        )

    @classmethod
    def open(cls, settings: Settings | None = None) -> Remote:
        """Locate and load the vendor library, then bind a driver to it."""
        settings = settings or Settings()
        dll = loadRemoteLibrary(findRemoteLibrary(settings.dll))
        return cls(RemoteDriver(dll, encoding=settings.textEncoding), settings)

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def loggedIn(self) -> bool:
        return self.session.loggedIn

    # ── Session Manager ─────────────────────────────────────────────

    def login(self) -> Result[bool]:
        return self.manager.login()

    def logout(self) -> bool:
        return self.manager.logout()

    def runEngine(self, kind: MixerType) -> Result[None]:
        return self.manager.runEngine(kind)

    def close(self) -> None:
        """Teardown path: log out only if a session is open."""
        if self.session.loggedIn:
            self.manager.logout()

    def __enter__(self) -> Remote:
        self.login().unwrap()
        return self

    def __exit__(self, *exc) -> None:
        if not self.logout():
            logger.warning("Logout reported failure during teardown")

    # ── Identity Decoder ────────────────────────────────────────────

    def getMixerType(self) -> Result[MixerType]:
        return self.identity.getMixerType()

    def getVersion(self) -> Result[str]:
        return self.identity.getVersion()

    def getVersionInfo(self) -> Result[Version]:
        return self.identity.getVersionInfo()

    # ── Parameter Resolver ──────────────────────────────────────────

    def getParameter(self, name: str) -> Result[ParameterValue]:
        return self.parameters.getParameter(name)

    def getParameterFloat(self, name: str) -> Result[float]:
        return self.parameters.getParameterFloat(name)

    def getParameterString(self, name: str) -> Result[str]:
        return self.parameters.getParameterString(name)

    def isParametersDirty(self) -> Result[bool]:
        return self.parameters.isParametersDirty()
