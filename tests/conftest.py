"""Shared test fixtures for vmcli test suite.

FakeDriver provides a test double for the ctypes RemoteDriver, allowing
headless testing without the vendor remote library or a running engine.
"""

from dataclasses import dataclass, field

import pytest

from vmcli.config import Settings
from vmcli.engine.remote import Remote

# status codes the real library answers with
OK = 0
NO_CLIENT = -1
NO_SERVER = -2
UNKNOWN_PARAMETER = -3
STRUCTURE_MISMATCH = -5


@dataclass
class FakeDriver:
    """Test double for RemoteDriver.

    Status lists are consumed one call at a time; the last entry repeats,
    so ``loginStatus=[0, -2]`` models "first login fine, every later login
    collides".
    """

    loginStatus: list[int] = field(default_factory=lambda: [OK])
    logoutStatus: list[int] = field(default_factory=lambda: [OK])
    runStatus: list[int] = field(default_factory=lambda: [OK])
    dirtyStatus: list[int] = field(default_factory=lambda: [0])
    typeResult: tuple[int, int] = (OK, 2)
    versionResult: tuple[int, int] = (OK, 0x03000218)

    # name -> (status, value); names not listed answer "unknown parameter"
    floats: dict[str, tuple[int, float]] = field(default_factory=dict)
    strings: dict[str, tuple[int, bytes]] = field(default_factory=dict)

    # fail the test outright if the string probe is ever issued
    explodeOnString: bool = False

    calls: list[tuple] = field(default_factory=list)

    @staticmethod
    def _next(queue: list[int]) -> int:
        return queue.pop(0) if len(queue) > 1 else queue[0]

    # ── Session ──

    def login(self) -> int:
        self.calls.append(("login",))
        return self._next(self.loginStatus)

    def logout(self) -> int:
        self.calls.append(("logout",))
        return self._next(self.logoutStatus)

    def runVoicemeeter(self, kind: int) -> int:
        self.calls.append(("run", kind))
        return self._next(self.runStatus)

    # ── Identity ──

    def getVoicemeeterType(self) -> tuple[int, int]:
        self.calls.append(("type",))
        return self.typeResult

    def getVoicemeeterVersion(self) -> tuple[int, int]:
        self.calls.append(("version",))
        return self.versionResult

    # ── Parameters ──

    def isParametersDirty(self) -> int:
        self.calls.append(("dirty",))
        return self._next(self.dirtyStatus)

    def getParameterFloat(self, name: str) -> tuple[int, float]:
        self.calls.append(("float", name))
        return self.floats.get(name, (UNKNOWN_PARAMETER, 0.0))

    def getParameterString(self, name: str, size: int) -> tuple[int, bytes]:
        self.calls.append(("string", name, size))
        if self.explodeOnString:
            raise AssertionError(f"string probe issued for {name}")

        status, text = self.strings.get(name, (UNKNOWN_PARAMETER, b""))
        # mimic the driver filling a zeroed buffer of the requested size
        return status, text.ljust(size, b"\x00")

    def callNames(self) -> list[str]:
        return [c[0] for c in self.calls]


# ── Fixtures ──


@pytest.fixture
def fake_driver() -> FakeDriver:
    """FakeDriver with a couple of parameters of each shape."""
    driver = FakeDriver()
    driver.floats["Strip[0].Gain"] = (OK, -6.5)
    driver.floats["Bus[0].Mute"] = (OK, 1.0)
    driver.strings["Strip[0].Label"] = (OK, b"Mic")
    driver.strings["Strip[1].device.name"] = (OK, b"Line In (Realtek)")
    return driver


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def remote(fake_driver, settings) -> Remote:
    """Remote bound to fake_driver, not logged in."""
    return Remote(fake_driver, settings)


@pytest.fixture
def logged_in(remote) -> Remote:
    """Remote bound to fake_driver with an open session."""
    assert remote.login().unwrap() is True
    remote.driver.calls.clear()
    return remote
