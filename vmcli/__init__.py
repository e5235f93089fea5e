"""vmcli — control-session client for the Voicemeeter mixing engine."""

__version__ = "0.1.0"
