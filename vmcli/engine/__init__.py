"""vmcli engine layer — the control-channel protocol with no UI dependency.

Modules
-------
primitives
    Pure types, constants, and decoding helpers.
    - ``MixerType``: product variants (Normal=1, Banana=2, Potato=3, Potato64=6)
    - ``SessionState``: LoggedOut / LoggedIn
    - ``Version``: four-byte version, ``Version.fromPacked(0x01020304)`` -> 1.2.3.4
    - ``Numeric`` / ``Text``: the two shapes a parameter value can take
    - ``Ok`` / ``Err``: operation results; ``Err.unwrap()`` raises its ProtocolError
    - Per-operation status tables and ``errorFor`` (raw status -> Err)

errors
    ``ErrorKind``, ``ProtocolError``, ``RemoteLibraryError``.

protocols
    ``DriverBridge``: the raw call surface the components consume.

session
    ``Session``: login state plus the lock serializing all driver calls.

manager / identity / parameters
    ``SessionManager`` (login, logout, runEngine), ``IdentityDecoder``
    (getMixerType, getVersion), ``ParameterResolver`` (getParameter,
    isParametersDirty).

remote
    ``Remote``: one Session wired to all three components.

driver / library
    ctypes ``RemoteDriver`` and discovery/loading of the vendor library.
"""

from vmcli.engine.errors import ErrorKind, ProtocolError, RemoteLibraryError
from vmcli.engine.primitives import (
    Err,
    MixerType,
    Numeric,
    Ok,
    SessionState,
    Text,
    Version,
)
from vmcli.engine.remote import Remote

__all__ = [
    "Err",
    "ErrorKind",
    "MixerType",
    "Numeric",
    "Ok",
    "ProtocolError",
    "Remote",
    "RemoteLibraryError",
    "SessionState",
    "Text",
    "Version",
]
