"""Session model for terminal sessions."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Optional


@dataclass
class SessionMetrics:
    """Per-session usage counters."""

    command_count: int = 0
    output_bytes: int = 0

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        return {
            'command_count': self.command_count,
            'output_bytes': self.output_bytes
        }


@dataclass
class Session:
    """Represents one interactive shell session."""

    id: str
    title: str
    created_at: datetime
    last_activity_at: datetime
    is_active: bool = False
    current_directory: str = "~"
    command_history: Deque[str] = field(default_factory=deque)
    output_buffer: Deque[str] = field(default_factory=deque)
    profile_id: Optional[str] = None
    metrics: SessionMetrics = field(default_factory=SessionMetrics)
    history_index: Optional[int] = None  # None means "not navigating"

    def idle_for(self, now: datetime):
        """Time elapsed since the last recorded activity."""
        return now - self.last_activity_at

    def touch(self, now: datetime):
        """Record activity at the given time."""
        self.last_activity_at = now

    def to_dict(self) -> dict:
        """Convert session to dictionary."""
        return {
            'id': self.id,
            'title': self.title,
            'created_at': self.created_at.isoformat(),
            'last_activity_at': self.last_activity_at.isoformat(),
            'is_active': self.is_active,
            'current_directory': self.current_directory,
            'command_history': list(self.command_history),
            'output_buffer': list(self.output_buffer),
            'profile_id': self.profile_id,
            'metrics': self.metrics.to_dict()
        }
