"""Custom exceptions for termdeck."""


class TermdeckError(Exception):
    """Base exception for all termdeck errors."""

    pass


class HandlerError(TermdeckError):
    """Raised by a built-in command for a failure the user should see."""

    pass


class ShellForwardError(TermdeckError):
    """Raised when a command cannot be handed to the shell process."""

    pass


class ConfigError(TermdeckError):
    """Raised when the stored configuration cannot be read."""

    pass
