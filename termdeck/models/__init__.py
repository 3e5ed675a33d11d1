"""Models for termdeck."""

from .command import Command, ParseFailure, ParseErrorKind
from .config import StoreConfig
from .profile import TerminalProfile
from .session import Session, SessionMetrics

__all__ = [
    'Command',
    'ParseFailure',
    'ParseErrorKind',
    'StoreConfig',
    'TerminalProfile',
    'Session',
    'SessionMetrics'
]
