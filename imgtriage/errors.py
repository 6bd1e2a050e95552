"""Exception taxonomy shared across imgtriage.

Fatal errors (config, source directory, terminal) abort in the CLI before the
classification loop starts. Per-file problems never raise out of the loop.
"""

from __future__ import annotations


class TriageError(Exception):
    """Base application exception."""


class ConfigError(TriageError):
    """Configuration document is missing, malformed, or inconsistent."""


class SourceDirectoryError(TriageError):
    """Source directory cannot be enumerated."""


class DecodeError(TriageError):
    """Image bytes could not be turned into a displayable pixel buffer."""


class TerminalError(TriageError):
    """Interactive terminal is unavailable."""


__all__ = [
    "TriageError",
    "ConfigError",
    "SourceDirectoryError",
    "DecodeError",
    "TerminalError",
]
