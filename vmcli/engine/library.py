"""Locating and loading the vendor remote library."""

from __future__ import annotations

import ctypes
import ntpath
import os
import pathlib
import struct
from typing import Any, Final

from loguru import logger

from vmcli.engine.errors import RemoteLibraryError

UNINSTALL_KEY: Final = (
    r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"
    r"\VB:Voicemeeter {17359A74-1236-5467}"
)


def libraryName() -> str:
    """Remote library filename matching this interpreter's pointer width."""
    if struct.calcsize("P") == 8:
        return "VoicemeeterRemote64.dll"

    return "VoicemeeterRemote.dll"


def readUninstallString() -> str:
    """Read the installer's UninstallString from the registry."""
    if os.name != "nt":
        raise RemoteLibraryError("Registry lookup is only available on Windows; set VMCLI_DLL instead")

    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, UNINSTALL_KEY) as key:
            value, _ = winreg.QueryValueEx(key, "UninstallString")
    except OSError as e:
        raise RemoteLibraryError(f"Voicemeeter install not found in registry: {e}") from e

    return str(value)


def findRemoteLibrary(override: str = "") -> pathlib.Path:
    """Path to the remote library: an explicit override, else the installed copy."""
    if override:
        path = pathlib.Path(override)
        logger.debug("Using configured remote library: {}", path)
    else:
        uninstaller = readUninstallString().strip().strip('"')
        path = pathlib.Path(ntpath.dirname(uninstaller)) / libraryName()
        logger.debug("Discovered remote library: {}", path)

    if not path.is_file():
        raise RemoteLibraryError(f"Remote library not found: {path}")

    return path


def loadRemoteLibrary(path: pathlib.Path | str) -> Any:
    loader = getattr(ctypes, "WinDLL", ctypes.CDLL)
    try:
        dll = loader(str(path))
    except OSError as e:
        raise RemoteLibraryError(f"Failed to load remote library {path}: {e}") from e

    logger.info("Loaded remote library: {}", path)
    return dll
