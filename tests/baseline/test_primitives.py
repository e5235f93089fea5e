"""Tests for vmcli.engine.primitives — pure types and status mapping."""

import pytest
from loguru import logger

from vmcli.engine.errors import ErrorKind, ProtocolError
from vmcli.engine.primitives import (
    LOGIN_ERRORS,
    QUERY_ERRORS,
    STRING_PARAMETER_ERRORS,
    Err,
    MixerType,
    Numeric,
    Ok,
    Text,
    Version,
    errorFor,
)


class TestVersion:
    @pytest.mark.parametrize("packed,expected", [
        (0x01020304, "1.2.3.4"),
        (0x00000000, "0.0.0.0"),
        (0x03000218, "3.0.2.24"),
        (0xFFFFFFFF, "255.255.255.255"),
    ])
    def test_from_packed(self, packed, expected):
        assert str(Version.fromPacked(packed)) == expected

    def test_signed_long_is_folded_to_32_bits(self):
        """A signed out-slot holding 0xFF000000 arrives negative."""
        assert str(Version.fromPacked(-0x01000000)) == "255.0.0.0"
        assert str(Version.fromPacked(-1)) == "255.255.255.255"

    def test_fields_are_most_significant_first(self):
        v = Version.fromPacked(0x0A0B0C0D)
        assert (v.major, v.minor, v.patch, v.build) == (10, 11, 12, 13)

    def test_packed_inverts_from_packed(self):
        assert Version(2, 1, 0, 7).packed() == 0x02010007


class TestMixerType:
    def test_protocol_values(self):
        assert MixerType(1) is MixerType.Normal
        assert MixerType(2) is MixerType.Banana
        assert MixerType(3) is MixerType.Potato
        assert MixerType(6) is MixerType.Potato64

    @pytest.mark.parametrize("name,expected", [
        ("banana", MixerType.Banana),
        ("POTATO64", MixerType.Potato64),
        (" Normal ", MixerType.Normal),
        ("3", MixerType.Potato),
    ])
    def test_from_name(self, name, expected):
        assert MixerType.fromName(name) is expected

    @pytest.mark.parametrize("name", ["tomato", "4", ""])
    def test_from_name_unknown(self, name):
        with pytest.raises(ValueError):
            MixerType.fromName(name)


class TestParameterValues:
    def test_numeric_and_text_are_distinct_cases(self):
        assert Numeric(1.0) != Text("1.0")
        assert isinstance(Numeric(0.5), Numeric)
        assert not isinstance(Numeric(0.5), Text)

    def test_str(self):
        assert str(Numeric(-6.5)) == "-6.5"
        assert str(Numeric(1.0)) == "1"
        assert str(Text("Mic")) == "Mic"


class TestResults:
    def test_ok_unwraps_to_value(self):
        r = Ok(42)
        assert r.ok
        assert r.unwrap() == 42

    def test_err_unwrap_raises_its_error(self):
        r = Err(ProtocolError(ErrorKind.NO_SERVER))
        assert not r.ok
        assert r.kind is ErrorKind.NO_SERVER
        with pytest.raises(ProtocolError) as exc:
            r.unwrap()

        assert exc.value.kind is ErrorKind.NO_SERVER
        assert str(exc.value) == "no server"

    def test_results_match_by_case(self):
        match Ok(Text("x")):
            case Ok(Text(value)):
                assert value == "x"
            case _:
                pytest.fail("Ok(Text) did not match")


class TestErrorFor:
    def test_same_code_maps_per_operation(self):
        """-2 is a login collision for login but "no server" for queries."""
        assert errorFor("login", -2, LOGIN_ERRORS).kind is ErrorKind.ALREADY_LOGGED_IN
        assert errorFor("type", -2, QUERY_ERRORS).kind is ErrorKind.NO_SERVER

    def test_unmapped_code_is_unexpected(self):
        err = errorFor("get x", -9, STRING_PARAMETER_ERRORS)
        assert err.kind is ErrorKind.UNEXPECTED

    def test_raw_code_only_reaches_the_log(self):
        messages = []
        handler = logger.add(messages.append, level="WARNING")
        try:
            err = errorFor("dirty", -42, QUERY_ERRORS)
        finally:
            logger.remove(handler)

        assert "-42" not in str(err.error)
        assert any("-42" in m for m in messages)
