"""Command autocompletion for the vmcli REPL.

Provides completion for command names (with docstring descriptions)
and context-aware argument completion (mixer types, parameter names, settings).
"""

import inspect

from prompt_toolkit.completion import Completer, Completion

from vmcli.engine.primitives import MixerType


class CommandCompleter(Completer):
    """Completer for vmcli commands and their arguments."""

    # Map resolved command names to argument completer method names
    _ARG_COMPLETERS = {
        "run": "_complete_mixer_types",
        "get": "_complete_parameters",
        "watch": "_complete_parameters",
        "unwatch": "_complete_watched",
        "set": "_complete_set_keys",
    }

    # Known value sets for specific localvar keys
    _SET_VALUE_COMPLETIONS = {
        "loglevel": ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        "interval": ["0.05", "0.1", "0.5", "1"],
        "timezone": ["UTC", "US/Eastern", "Europe/Berlin"],
    }

    def __init__(self, app):
        """app is the VMCmdlineApp instance."""
        self.app = app

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor

        # Handle multi-command: find text after the last ";"
        last_semi = text.rfind(";")
        if last_semi >= 0:
            segment = text[last_semi + 1 :].lstrip()
        else:
            segment = text

        parts = segment.split(None, 1)
        if len(parts) <= 1 and not segment.endswith(" "):
            # Still typing the command name
            prefix = parts[0] if parts else ""
            yield from self._complete_command_name(prefix)
        else:
            cmd_name = parts[0]
            arg_text = parts[1] if len(parts) > 1 else ""
            yield from self._complete_arguments(cmd_name, arg_text)

    def _complete_command_name(self, prefix):
        prefix_lower = prefix.lower()
        for cmd_name, fn in sorted(self.app.commands.items()):
            if cmd_name.startswith(prefix_lower):
                doc = (inspect.getdoc(fn) or "").split("\n")[0]
                yield Completion(cmd_name, start_position=-len(prefix), display_meta=doc)

    def _resolve_command(self, typed):
        """Resolve a possibly-abbreviated command to its full name."""
        typed_lower = typed.lower()
        if typed_lower in self.app.commands:
            return typed_lower

        matches = [name for name in self.app.commands if name.startswith(typed_lower)]
        if len(matches) == 1:
            return matches[0]

        return typed_lower

    def _complete_arguments(self, cmd_name, arg_text):
        method_name = self._ARG_COMPLETERS.get(self._resolve_command(cmd_name))
        if method_name:
            method = getattr(self, method_name)
            # Get the word being typed (last whitespace-separated token)
            words = arg_text.split()
            current_word = words[-1] if words and not arg_text.endswith(" ") else ""
            yield from method(current_word, arg_text=arg_text)

    def _complete_mixer_types(self, prefix, **kwargs):
        for kind in MixerType:
            name = kind.name.lower()
            if name.startswith(prefix.lower()):
                yield Completion(name, start_position=-len(prefix), display_meta=str(int(kind)))

    def _complete_parameters(self, prefix, **kwargs):
        for name in sorted(self.app.seenNames):
            if name.lower().startswith(prefix.lower()):
                yield Completion(name, start_position=-len(prefix))

    def _complete_watched(self, prefix, **kwargs):
        for name in self.app.watching:
            if name.lower().startswith(prefix.lower()):
                yield Completion(name, start_position=-len(prefix))

    def _complete_set_keys(self, prefix, arg_text=""):
        words = arg_text.split()
        # Second argument position: complete known values for the key
        if len(words) >= 2 or (len(words) == 1 and arg_text.endswith(" ")):
            key = words[0] if words else ""
            values = self._SET_VALUE_COMPLETIONS.get(key.lower())
            if values:
                for val in values:
                    if val.lower().startswith(prefix.lower()):
                        yield Completion(val, start_position=-len(prefix))
            return

        if "info".startswith(prefix.lower()):
            yield Completion("info", start_position=-len(prefix), display_meta="Show VMCLI_ configuration")

        for key in sorted(self.app.localvars.keys()):
            if key.lower().startswith(prefix.lower()):
                val = self.app.localvars[key]
                yield Completion(key, start_position=-len(prefix), display_meta=str(val))
