#!/usr/bin/env python3
"""Interactive console for a running Voicemeeter engine."""

from __future__ import annotations

original_print = print
import asyncio
import atexit
import inspect
import os
import pathlib
import shlex
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Final

import whenever
from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory, ThreadedHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style

from vmcli.completer import CommandCompleter
from vmcli.config import Settings
from vmcli.engine.errors import RemoteLibraryError
from vmcli.engine.primitives import (
    Err,
    MixerType,
    Ok,
    ParameterValue,
)
from vmcli.engine.remote import Remote

LOG_LEVELS: Final = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]


def split_commands(text: str) -> list[str]:
    """Split a line on semicolons that are not inside quotes."""
    cmds = []
    current: list[str] = []
    quote = ""
    for c in text:
        if quote:
            if c == quote:
                quote = ""
        elif c in "\"'":
            quote = c
        elif c == ";":
            cmds.append("".join(current).strip())
            current = []
            continue

        current.append(c)

    cmds.append("".join(current).strip())
    return [c for c in cmds if c]


@dataclass(slots=True)
class VMCmdlineApp:
    settings: Settings = field(default_factory=Settings.fromEnv)

    # The Connection (built from settings on startup unless provided)
    remote: Remote | None = None

    # identity snapshot refreshed on login
    mixerType: MixerType | None = None
    version: str = ""

    # number of dirty polls that reported a change, and when the last one happened
    changes: int = 0
    lastChange: whenever.ZonedDateTime | None = None

    # parameters re-read whenever the dirty flag is raised
    watching: list[str] = field(default_factory=list)
    watchValues: dict[str, ParameterValue] = field(default_factory=dict)
    watchTask: asyncio.Task | None = None

    # every parameter name the user asked for (completion source)
    seenNames: set[str] = field(default_factory=set)

    localvars: dict[str, str] = field(init=False)
    commands: dict[str, Callable[[list[str]], Any]] = field(init=False)

    exiting: bool = False

    _console_sink: Callable[[Any], None] | None = None
    _console_handler_id: int | None = None

    def __post_init__(self) -> None:
        self.localvars = dict(
            loglevel="INFO",
            timezone=self.settings.timezone,
            interval=str(self.settings.pollInterval),
        )

        self.commands = {
            "login": self.cmdLogin,
            "logout": self.cmdLogout,
            "run": self.cmdRun,
            "type": self.cmdType,
            "version": self.cmdVersion,
            "dirty": self.cmdDirty,
            "get": self.cmdGet,
            "watch": self.cmdWatch,
            "unwatch": self.cmdUnwatch,
            "set": self.cmdSet,
            "help": self.cmdHelp,
            "quit": self.cmdQuit,
            "exit": self.cmdQuit,
        }

    # ── Logging ─────────────────────────────────────────────────────

    def setupLogging(self) -> None:
        now = whenever.ZonedDateTime.now(self.localvars["timezone"]).py_datetime()
        LOGDIR = pathlib.Path(self.settings.logdir) / f"{now.year}" / f"{now.month:02}"
        LOGDIR.mkdir(parents=True, exist_ok=True)
        LOG_FILE_TEMPLATE = str(
            LOGDIR / f"vmcli-{now:%Y%m%d-%H%M%S}"
        )

        def asink(x):
            # print through the original print so patch_stdout() keeps the prompt intact
            original_print(x, end="")

        logger.remove()
        self._console_sink = asink
        self._console_handler_id = logger.add(asink, colorize=True, level=self.localvars["loglevel"])

        # everything, including user input at TRACE, goes to the session file
        logger.add(sink=LOG_FILE_TEMPLATE + "-vmcli.log", level="TRACE", colorize=False)

        logger.info("Logging session with prefix: {}", LOG_FILE_TEMPLATE)

    def setConsoleLogLevel(self, level: str) -> None:
        """Change the console log level at runtime.

        Removes the current console handler and re-adds it at the new level."""
        if self._console_handler_id is not None:
            logger.remove(self._console_handler_id)

        if self._console_sink is not None:
            self._console_handler_id = logger.add(self._console_sink, colorize=True, level=level)

        self.localvars["loglevel"] = level
        logger.info("Console log level set to {}", level)

    # ── Session ─────────────────────────────────────────────────────

    @property
    def vm(self) -> Remote:
        if self.remote is None:
            self.remote = Remote.open(self.settings)

        return self.remote

    def connect(self) -> bool:
        """Log in; launch the configured engine variant if nothing is running yet."""
        match self.vm.login():
            case Ok(True):
                self.refreshIdentity()
            case Ok(False):
                logger.warning("Engine is not running")
                if self.settings.runType:
                    self.launch(self.settings.runType)
            case Err(error):
                logger.error("[login] {}", error.message)
                return False

        return True

    def launch(self, name: str) -> bool:
        try:
            kind = MixerType.fromName(name)
        except ValueError as e:
            logger.error("[run] {}", e)
            return False

        match self.vm.runEngine(kind):
            case Ok():
                return True
            case Err(error):
                logger.error("[run] {}", error.message)

        return False

    def refreshIdentity(self) -> None:
        match self.vm.getMixerType():
            case Ok(kind):
                self.mixerType = kind
            case Err(error):
                logger.error("[type] {}", error.message)

        match self.vm.getVersion():
            case Ok(version):
                self.version = version
            case Err(error):
                logger.error("[version] {}", error.message)

    def markChanged(self) -> None:
        self.changes += 1
        self.lastChange = whenever.ZonedDateTime.now(self.localvars["timezone"])

    def readParameter(self, name: str) -> ParameterValue | None:
        self.seenNames.add(name)
        match self.vm.getParameter(name):
            case Ok(value):
                return value
            case Err(error):
                logger.error("[{}] {}", name, error.message)

        return None

    # ── Watching ────────────────────────────────────────────────────

    def refreshWatched(self, announce: bool = False) -> None:
        for name in self.watching:
            value = self.readParameter(name)
            if value is None:
                continue

            if announce or self.watchValues.get(name) != value:
                logger.info("{} = {}", name, value)

            self.watchValues[name] = value

    async def watchLoop(self) -> None:
        """Poll the dirty flag every interval; re-read watched names on change."""
        logger.info("Watching {} (every {}s)", ", ".join(self.watching), self.localvars["interval"])

        try:
            self.refreshWatched(announce=True)

            while self.watching:
                match self.vm.isParametersDirty():
                    case Ok(True):
                        self.markChanged()
                        self.refreshWatched()
                    case Ok(False):
                        pass
                    case Err(error):
                        logger.error("[watch] Stopping: {}", error.message)
                        break

                await asyncio.sleep(float(self.localvars["interval"]))
        except Exception:
            logger.exception("[watch] Stopping")
            self.watching.clear()
            self.watchValues.clear()
        finally:
            # a cancelled loop may already have been replaced by a newer one
            if self.watchTask is asyncio.current_task():
                self.watchTask = None

    def stopWatching(self) -> None:
        self.watching.clear()
        self.watchValues.clear()
        if self.watchTask:
            self.watchTask.cancel()
            self.watchTask = None

    # ── Commands ────────────────────────────────────────────────────

    def cmdLogin(self, args: list[str]) -> None:
        """Open the control channel."""
        self.connect()

    def cmdLogout(self, args: list[str]) -> None:
        """Close the control channel."""
        self.stopWatching()
        if not self.vm.logout():
            logger.warning("Logout reported failure")

        self.mixerType = None
        self.version = ""

    def cmdRun(self, args: list[str]) -> None:
        """Launch the engine: run <normal|banana|potato|potato64>"""
        if len(args) != 1:
            logger.error("Usage: run <{}>", "|".join(m.name.lower() for m in MixerType))
            return

        self.launch(args[0])

    def cmdType(self, args: list[str]) -> None:
        """Show the running mixer type."""
        match self.vm.getMixerType():
            case Ok(kind):
                self.mixerType = kind
                logger.info("Type: {} ({})", kind.name, int(kind))
            case Err(error):
                logger.error("[type] {}", error.message)

    def cmdVersion(self, args: list[str]) -> None:
        """Show the engine version."""
        match self.vm.getVersionInfo():
            case Ok(version):
                self.version = str(version)
                logger.info("Version: {} (0x{:08X})", version, version.packed())
            case Err(error):
                logger.error("[version] {}", error.message)

    def cmdDirty(self, args: list[str]) -> None:
        """Poll the dirty flag once."""
        match self.vm.isParametersDirty():
            case Ok(dirty):
                if dirty:
                    self.markChanged()

                logger.info("Parameters {}", "changed" if dirty else "unchanged")
            case Err(error):
                logger.error("[dirty] {}", error.message)

    def cmdGet(self, args: list[str]) -> None:
        """Read parameters: get <name> [name...]"""
        if not args:
            logger.error("Usage: get <name> [name...]")
            return

        for name in args:
            value = self.readParameter(name)
            if value is not None:
                logger.info("{} = {} ({})", name, value, type(value).__name__)

    def cmdWatch(self, args: list[str]) -> None:
        """Re-read parameters whenever they change: watch <name> [name...]"""
        if not args:
            if self.watching:
                logger.info("Watching: {}", ", ".join(self.watching))
            else:
                logger.info("Not watching anything")

            return

        for name in args:
            if name not in self.watching:
                self.watching.append(name)

        if self.watchTask is None or self.watchTask.done():
            self.watchTask = asyncio.get_running_loop().create_task(self.watchLoop())
        else:
            self.refreshWatched(announce=True)

    def cmdUnwatch(self, args: list[str]) -> None:
        """Stop watching some (or all) parameters: unwatch [name...]"""
        if not args:
            self.stopWatching()
            logger.info("Stopped watching")
            return

        for name in args:
            if name in self.watching:
                self.watching.remove(name)
                self.watchValues.pop(name, None)

        if not self.watching:
            self.stopWatching()

    def cmdSet(self, args: list[str]) -> None:
        """Show or change settings: set [info | <key> <value>]"""
        if not args:
            logger.info("Settings:")
            for k, v in self.localvars.items():
                logger.info("  {:<10} = {}", k, v)

            return

        if args[0] == "info":
            logger.info("VMCLI configuration:")
            for k, v in sorted(self.settings.raw.items()):
                logger.info("  {} = {}", k, v)

            return

        if len(args) != 2:
            logger.error("Usage: set <key> <value>")
            return

        key, val = args
        match key:
            case "loglevel":
                level = val.upper()
                if level not in LOG_LEVELS:
                    logger.error("Invalid log level '{}'. Valid: {}", val, ", ".join(LOG_LEVELS))
                    return

                self.setConsoleLogLevel(level)
                return
            case "timezone":
                try:
                    whenever.ZonedDateTime.now(val)
                except Exception:
                    logger.error("Unknown timezone: {}", val)
                    return
            case "interval":
                try:
                    interval = float(val)
                except ValueError:
                    interval = 0.0

                if interval <= 0:
                    logger.error("Interval must be a positive number of seconds")
                    return
            case _:
                logger.error("Unknown setting: {}", key)
                return

        original = self.localvars.get(key)
        self.localvars[key] = val
        logger.info("SET: {} = {} (previously: {})", key, val, original)

    def cmdHelp(self, args: list[str]) -> None:
        """List commands."""
        for name, fn in self.commands.items():
            doc = inspect.getdoc(fn) or ""
            logger.info("  {:<8} {}", name, doc.split("\n")[0])

    def cmdQuit(self, args: list[str]) -> None:
        """Log out and leave."""
        self.exiting = True

    # ── Dispatch ────────────────────────────────────────────────────

    def resolveCommand(self, typed: str) -> str | None:
        """Full command name for an exact name or unambiguous prefix."""
        typed = typed.lower()
        if typed in self.commands:
            return typed

        matches = [name for name in self.commands if name.startswith(typed)]
        if len(matches) == 1:
            return matches[0]

        if matches:
            logger.error("Ambiguous command '{}': {}", typed, ", ".join(sorted(matches)))
        else:
            logger.error("Unknown command: {}", typed)

        return None

    async def buildAndRun(self, text: str) -> None:
        for cmdline in split_commands(text):
            try:
                parts = shlex.split(cmdline)
            except ValueError as e:
                logger.error("Can't parse '{}': {}", cmdline, e)
                continue

            name = self.resolveCommand(parts[0])
            if name is None:
                continue

            result = self.commands[name](parts[1:])
            if inspect.isawaitable(result):
                await result

    def bottomToolbar(self):
        state = self.remote.state.value if self.remote else "no library"
        kind = self.mixerType.name if self.mixerType else "-"
        last = f"{self.lastChange.py_datetime():%H:%M:%S}" if self.lastChange else "never"
        watching = len(self.watching)

        return HTML(
            f"<b>{state}</b>  type: {kind}  version: {self.version or '-'}"
            f"  changes: {self.changes} (last {last})  watching: {watching}"
        )

    async def dorepl(self):
        completer = CommandCompleter(self)
        session: PromptSession = PromptSession(
            history=ThreadedHistory(FileHistory(os.path.expanduser("~/.vmcli_history"))),
            auto_suggest=AutoSuggestFromHistory(),
            completer=completer,
        )

        style = Style.from_dict({"bottom-toolbar": "fg:default bg:default"})

        while not self.exiting:
            try:
                text1 = await session.prompt_async(
                    "vm> ",
                    enable_history_search=True,
                    bottom_toolbar=self.bottomToolbar,
                    refresh_interval=1,
                    complete_while_typing=True,
                    search_ignore_case=True,
                    style=style,
                )

                # log user input to our active logfile(s)
                logger.trace("vm> {}", text1)

                await self.buildAndRun(text1)
            except KeyboardInterrupt:
                # Control-C pressed. Try again.
                continue
            except EOFError:
                # Control-D pressed
                logger.error("Exiting...")
                self.exiting = True
                break
            except RemoteLibraryError as e:
                logger.error("{}", e)
            except Exception:
                logger.exception("Command failed")

    def stop(self) -> None:
        self.exiting = True
        self.stopWatching()
        if self.remote:
            self.remote.close()

    async def runall(self) -> None:
        self.setupLogging()

        try:
            remote = self.vm
        except RemoteLibraryError as e:
            logger.error("{}", e)
            raise

        atexit.register(remote.close)
        self.connect()

        try:
            with patch_stdout():
                await self.dorepl()
        finally:
            self.stop()


def runit() -> None:
    try:
        app = VMCmdlineApp()
    except ValueError as e:
        logger.error("Invalid configuration: {}", e)
        sys.exit(1)

    try:
        asyncio.run(app.runall())
    except RemoteLibraryError:
        sys.exit(1)


if __name__ == "__main__":
    runit()
