"""Exceptions raised by Scriptpad."""


class ScriptpadError(Exception):
    """Base class for all Scriptpad errors."""


class ConfigError(ScriptpadError):
    """Raised when the configuration file holds an unusable value."""


class RunnerError(ScriptpadError):
    """Raised when the script cannot be written or the interpreter cannot be started."""


class RunInProgressError(RunnerError):
    """Raised when a run is requested while another one is still in flight."""

    def __init__(self, message: str = "a run is already in progress"):
        super().__init__(message)
