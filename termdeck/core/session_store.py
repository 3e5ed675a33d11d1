"""In-memory store of terminal sessions."""

import logging
import uuid
from collections import deque
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from ..models.config import StoreConfig
from ..models.session import Session
from .constants import DEFAULT_DIRECTORY, DEFAULT_TITLE_PREFIX
from .profiles import ProfileRegistry

logger = logging.getLogger(__name__)

# history_index is only moved by navigate_history and reset_history_index
IMMUTABLE_FIELDS = {'id', 'created_at', 'history_index'}
HISTORY_UP = 'up'
HISTORY_DOWN = 'down'


class SessionStore:
    """Owns every live Session and enforces capacity and retention limits.

    All operations are synchronous. Operations on an unknown session ID are
    silent no-ops, and accessors return None, so callers check existence with
    get_session() instead of catching exceptions.

    The store is safe to share between coroutines on one event loop. It does
    no locking of its own, so threads must wrap it in an external mutex.
    """

    def __init__(self, config: Optional[StoreConfig] = None,
                 profiles: Optional[ProfileRegistry] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize session store.

        Args:
            config: Capacity and retention limits (defaults if omitted)
            profiles: Profile registry used to seed new sessions
            clock: Source of the current time
        """
        self.config = config or StoreConfig()
        self.profiles = profiles or ProfileRegistry()
        self._clock = clock
        # Insertion order doubles as creation order
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def create_session(self, title: Optional[str] = None,
                       profile_id: Optional[str] = None) -> str:
        """Create a new session and make it the active one.

        Evicts the oldest session first if the store is at capacity.

        Args:
            title: Display label, defaults to "Terminal N"
            profile_id: Profile to open the session with

        Returns:
            The new session ID
        """
        while len(self._sessions) >= self.config.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.created_at)
            logger.debug(f"Session limit {self.config.max_sessions} reached, evicting {oldest.id}")
            self.remove_session(oldest.id)

        profile = self.profiles.get_profile(profile_id)
        now = self._clock()
        session = Session(
            id=str(uuid.uuid4()),
            title=title or f"{DEFAULT_TITLE_PREFIX} {len(self._sessions) + 1}",
            created_at=now,
            last_activity_at=now,
            current_directory=profile.working_directory or DEFAULT_DIRECTORY,
            command_history=deque(maxlen=self.config.max_history_entries),
            output_buffer=deque(maxlen=self.config.max_output_lines),
            profile_id=profile.id
        )
        self._sessions[session.id] = session
        self.set_active_session(session.id)
        logger.debug(f"Created session {session.id} ({session.title})")
        return session.id

    def remove_session(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed.

        Removing the active session leaves no session active.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.is_active = False
        logger.debug(f"Removed session {session_id}")
        return True

    def set_active_session(self, session_id: str) -> None:
        """Give a session focus, clearing the flag on all others."""
        target = self._sessions.get(session_id)
        if target is None:
            return
        for session in self._sessions.values():
            session.is_active = False
        target.is_active = True
        target.touch(self._clock())

    def update_session(self, session_id: str, **updates) -> None:
        """Merge fields into a session.

        Unknown fields are ignored, as are id, created_at and history_index.
        History and output lists are re-bounded to the configured limits.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return

        for key, value in updates.items():
            if key in IMMUTABLE_FIELDS or not hasattr(session, key):
                continue
            if key == 'is_active':
                if value:
                    self.set_active_session(session_id)
                else:
                    session.is_active = False
            elif key == 'command_history':
                session.command_history = deque(value, maxlen=self.config.max_history_entries)
                session.history_index = None
            elif key == 'output_buffer':
                session.output_buffer = deque(value, maxlen=self.config.max_output_lines)
            else:
                setattr(session, key, value)

        session.touch(self._clock())

    def add_output(self, session_id: str, chunk: str) -> None:
        """Append to a session's output buffer, dropping the oldest lines past the bound."""
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.output_buffer.append(chunk)
        session.metrics.output_bytes += len(chunk)
        session.touch(self._clock())

    def add_to_history(self, session_id: str, line: str) -> None:
        """Append to a session's command history, dropping the oldest entries past the bound."""
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.command_history.append(line)
        session.metrics.command_count += 1
        session.history_index = None
        session.touch(self._clock())

    def clear_session(self, session_id: str) -> None:
        """Empty a session's output buffer."""
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.output_buffer.clear()
        session.touch(self._clock())

    def clear_all_sessions(self) -> None:
        """Remove every session."""
        self._sessions.clear()

    def cleanup_sessions(self) -> int:
        """Remove every session idle for longer than the configured timeout.

        Returns:
            Number of sessions removed
        """
        now = self._clock()
        timeout = self.config.session_idle_timeout
        expired = [s.id for s in self._sessions.values() if s.idle_for(now) > timeout]
        for session_id in expired:
            self.remove_session(session_id)
        if expired:
            logger.info(f"Cleaned up {len(expired)} idle session(s)")
        return len(expired)

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_active_session(self) -> Optional[Session]:
        return next((s for s in self._sessions.values() if s.is_active), None)

    def list_sessions(self) -> List[Session]:
        """List sessions in creation order."""
        return list(self._sessions.values())

    def session_ids(self) -> Iterable[str]:
        return list(self._sessions.keys())

    def navigate_history(self, session_id: str, direction: str) -> Optional[str]:
        """Step through a session's command history.

        "up" moves to older entries, "down" to newer ones. Moving down past
        the newest entry leaves navigation and returns None. An empty history
        or an unknown direction also returns None.
        """
        session = self._sessions.get(session_id)
        if session is None or not session.command_history:
            return None

        history = session.command_history
        index = session.history_index

        if direction == HISTORY_UP:
            if index is None:
                index = len(history) - 1
            else:
                index = max(index - 1, 0)
        elif direction == HISTORY_DOWN:
            if index is None:
                return None
            index += 1
            if index >= len(history):
                session.history_index = None
                return None
        else:
            logger.debug(f"Ignoring unknown history direction: {direction}")
            return None

        session.history_index = index
        return history[index]

    def reset_history_index(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.history_index = None
