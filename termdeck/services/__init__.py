"""Service layer: shell process adapters and errors."""

from .shell import ShellForwarder, SubprocessShell
from .exceptions import (
    TermdeckError,
    HandlerError,
    ShellForwardError,
    ConfigError,
)

__all__ = [
    "ShellForwarder",
    "SubprocessShell",
    "TermdeckError",
    "HandlerError",
    "ShellForwardError",
    "ConfigError",
]
