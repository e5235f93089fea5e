"""Layered configuration: built-in defaults < .env.vmcli < process environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from dotenv import dotenv_values

VM_DEFAULT: Final = dict(
    VMCLI_DLL="",
    VMCLI_POLL_INTERVAL="0.1",
    VMCLI_STRING_BUFFER="512",
    VMCLI_TEXT_ENCODING="utf-8",
    VMCLI_RUN_TYPE="",
    VMCLI_LOGDIR="runlogs",
    VMCLI_TIMEZONE="UTC",
)


def loadConfig(
    envfile: str = ".env.vmcli", environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Merge defaults, the dotenv file (if present), and the environment."""
    environ = os.environ if environ is None else environ
    fromfile = {k: v for k, v in dotenv_values(envfile).items() if v is not None}
    return {**VM_DEFAULT, **fromfile, **environ}


@dataclass(slots=True)
class Settings:
    # explicit remote library path; empty means discover via the registry
    dll: str = ""

    # seconds between dirty-flag polls while watching parameters
    pollInterval: float = 0.1

    # capacity of the string-read buffer (never below 512)
    stringBuffer: int = 512

    textEncoding: str = "utf-8"

    # mixer type name to launch when login finds the engine not running
    runType: str = ""

    logdir: str = "runlogs"
    timezone: str = "UTC"

    # untouched merged config, for `set info`
    raw: dict[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def fromConfig(cls, config: Mapping[str, str]) -> Settings:
        interval = float(config["VMCLI_POLL_INTERVAL"])
        if interval <= 0:
            raise ValueError(f"VMCLI_POLL_INTERVAL must be positive (got {interval})")

        buffer = int(config["VMCLI_STRING_BUFFER"])
        if buffer < 512:
            raise ValueError(f"VMCLI_STRING_BUFFER must be at least 512 (got {buffer})")

        return cls(
            dll=config["VMCLI_DLL"],
            pollInterval=interval,
            stringBuffer=buffer,
            textEncoding=config["VMCLI_TEXT_ENCODING"],
            runType=config["VMCLI_RUN_TYPE"],
            logdir=config["VMCLI_LOGDIR"],
            timezone=config["VMCLI_TIMEZONE"],
            raw={k: v for k, v in config.items() if k.startswith("VMCLI_")},
        )

    @classmethod
    def fromEnv(cls, envfile: str = ".env.vmcli") -> Settings:
        return cls.fromConfig(loadConfig(envfile))
