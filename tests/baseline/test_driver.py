"""Tests for vmcli.engine.driver — ctypes binding against a fake library handle."""

import ctypes
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from vmcli.engine.driver import SIGNATURES, RemoteDriver
from vmcli.engine.errors import RemoteLibraryError
from vmcli.engine.protocols import DriverBridge


def make_dll(**behaviours):
    """Fake library handle: one MagicMock per export, returning 0 by default."""
    fns = {name: MagicMock(name=name, return_value=0) for name in SIGNATURES}
    for name, side_effect in behaviours.items():
        fns[name].side_effect = side_effect

    return SimpleNamespace(**fns)


def write_out(value, status=0):
    """side_effect storing `value` through the last by-reference argument."""

    def fn(*args):
        args[-1]._obj.value = value
        return status

    return fn


class TestBinding:
    def test_declares_signatures(self):
        dll = make_dll()
        RemoteDriver(dll)
        assert dll.VBVMR_Login.restype is ctypes.c_long
        assert dll.VBVMR_GetParameterFloat.argtypes == [
            ctypes.c_char_p,
            ctypes.POINTER(ctypes.c_float),
        ]
        assert dll.VBVMR_RunVoicemeeter.argtypes == [ctypes.c_long]

    def test_missing_export(self):
        dll = make_dll()
        del dll.VBVMR_GetParameterStringA
        with pytest.raises(RemoteLibraryError):
            RemoteDriver(dll)

    def test_satisfies_protocol(self):
        assert isinstance(RemoteDriver(make_dll()), DriverBridge)


class TestCalls:
    def test_status_only_calls(self):
        dll = make_dll()
        dll.VBVMR_Login.return_value = 1
        dll.VBVMR_Logout.return_value = 0
        dll.VBVMR_IsParametersDirty.return_value = 1
        driver = RemoteDriver(dll)

        assert driver.login() == 1
        assert driver.logout() == 0
        assert driver.isParametersDirty() == 1

    def test_run_passes_kind(self):
        dll = make_dll()
        driver = RemoteDriver(dll)
        driver.runVoicemeeter(6)
        dll.VBVMR_RunVoicemeeter.assert_called_once_with(6)

    def test_type_out_parameter(self):
        driver = RemoteDriver(make_dll(VBVMR_GetVoicemeeterType=write_out(2)))
        assert driver.getVoicemeeterType() == (0, 2)

    def test_version_out_parameter(self):
        driver = RemoteDriver(make_dll(VBVMR_GetVoicemeeterVersion=write_out(0x01020304)))
        assert driver.getVoicemeeterVersion() == (0, 0x01020304)

    def test_failure_status_is_returned_raw(self):
        driver = RemoteDriver(make_dll(VBVMR_GetVoicemeeterType=write_out(0, status=-2)))
        assert driver.getVoicemeeterType() == (-2, 0)

    def test_float_parameter(self):
        seen = []

        def fn(name, ref):
            seen.append(name)
            ref._obj.value = -6.5
            return 0

        driver = RemoteDriver(make_dll(VBVMR_GetParameterFloat=fn))
        assert driver.getParameterFloat("Strip[0].Gain") == (0, -6.5)
        assert seen == [b"Strip[0].Gain"]

    def test_string_parameter_returns_whole_buffer(self):
        def fn(name, buf):
            buf.value = b"Mic"
            return 0

        driver = RemoteDriver(make_dll(VBVMR_GetParameterStringA=fn))
        status, raw = driver.getParameterString("Strip[0].Label", 512)
        assert status == 0
        assert len(raw) == 512
        assert raw.startswith(b"Mic\x00")
