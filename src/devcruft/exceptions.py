"""Exceptions raised by devcruft.

Per-entry problems met while scanning or cleaning are not exceptions: they
are collected as data (see ``ScanError`` and ``CleanupResult``). Only
invocation-level problems raise.
"""


class DevcruftError(Exception):
    """Base class for devcruft errors."""


class InvalidRootError(DevcruftError):
    """The directory to scan does not exist or is not a directory."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot scan {path}: {reason}")


class SizeParseError(DevcruftError, ValueError):
    """A human-readable size string could not be parsed."""


class ConfigError(DevcruftError):
    """The configuration file could not be read or is invalid."""
