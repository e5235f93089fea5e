"""Narrow protocol for the driver bridge.

The engine modules only need this call surface; the ctypes implementation
lives in vmcli.engine.driver and tests substitute their own double.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DriverBridge(Protocol):
    """Raw calls into the vendor remote library.

    Every method returns the driver's integer status first; calls with
    out-parameters return ``(status, value)``.
    """

    def login(self) -> int: ...
    def logout(self) -> int: ...
    def runVoicemeeter(self, kind: int) -> int: ...
    def getVoicemeeterType(self) -> tuple[int, int]: ...
    def getVoicemeeterVersion(self) -> tuple[int, int]: ...
    def isParametersDirty(self) -> int: ...
    def getParameterFloat(self, name: str) -> tuple[int, float]: ...
    def getParameterString(self, name: str, size: int) -> tuple[int, bytes]: ...
