"""Core functionality for termdeck."""

from .context import CommandContext, SessionContext, TabDescriptor
from .dispatcher import CommandDispatcher
from .parser import parse_command
from .performance import OperationMetrics, PerformanceTracker
from .profiles import ProfileRegistry
from .session_store import SessionStore

__all__ = [
    'CommandContext',
    'SessionContext',
    'TabDescriptor',
    'CommandDispatcher',
    'parse_command',
    'OperationMetrics',
    'PerformanceTracker',
    'ProfileRegistry',
    'SessionStore'
]
