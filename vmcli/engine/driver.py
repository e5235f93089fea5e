"""ctypes bridge to the vendor remote library.

Each ``VBVMR_*`` export returns a C ``long`` status; out-parameters are
passed by reference and read back after the call. Nothing here interprets
status codes; the engine components do that.
"""

from __future__ import annotations

import ctypes
from ctypes import POINTER, byref
from typing import Any, Final

from loguru import logger

from vmcli.engine.errors import RemoteLibraryError

# export name -> argtypes (every export returns a long status)
SIGNATURES: Final = {
    "VBVMR_Login": (),
    "VBVMR_Logout": (),
    "VBVMR_RunVoicemeeter": (ctypes.c_long,),
    "VBVMR_GetVoicemeeterType": (POINTER(ctypes.c_long),),
    "VBVMR_GetVoicemeeterVersion": (POINTER(ctypes.c_long),),
    "VBVMR_IsParametersDirty": (),
    "VBVMR_GetParameterFloat": (ctypes.c_char_p, POINTER(ctypes.c_float)),
    "VBVMR_GetParameterStringA": (ctypes.c_char_p, ctypes.c_char_p),
}


class RemoteDriver:
    """DriverBridge implementation over a loaded library handle."""

    def __init__(self, dll: Any, encoding: str = "utf-8"):
        self.dll = dll
        self.encoding = encoding
        self.fns: dict[str, Any] = {}

        for name, argtypes in SIGNATURES.items():
            try:
                fn = getattr(dll, name)
            except AttributeError as e:
                raise RemoteLibraryError(f"Remote library has no export {name}") from e

            fn.argtypes = list(argtypes)
            fn.restype = ctypes.c_long
            self.fns[name] = fn

        logger.debug("Bound {} remote library exports", len(self.fns))

    def _name(self, name: str) -> bytes:
        return name.encode(self.encoding)

    def login(self) -> int:
        return self.fns["VBVMR_Login"]()

    def logout(self) -> int:
        return self.fns["VBVMR_Logout"]()

    def runVoicemeeter(self, kind: int) -> int:
        return self.fns["VBVMR_RunVoicemeeter"](kind)

    def getVoicemeeterType(self) -> tuple[int, int]:
        kind = ctypes.c_long()
        status = self.fns["VBVMR_GetVoicemeeterType"](byref(kind))
        return status, kind.value

    def getVoicemeeterVersion(self) -> tuple[int, int]:
        version = ctypes.c_long()
        status = self.fns["VBVMR_GetVoicemeeterVersion"](byref(version))
        return status, version.value

    def isParametersDirty(self) -> int:
        return self.fns["VBVMR_IsParametersDirty"]()

    def getParameterFloat(self, name: str) -> tuple[int, float]:
        value = ctypes.c_float()
        status = self.fns["VBVMR_GetParameterFloat"](self._name(name), byref(value))
        return status, value.value

    def getParameterString(self, name: str, size: int) -> tuple[int, bytes]:
        buf = ctypes.create_string_buffer(size)
        status = self.fns["VBVMR_GetParameterStringA"](self._name(name), buf)
        return status, buf.raw
