"""Configuration models for the session store."""

from datetime import timedelta

from pydantic import BaseModel, Field, field_validator


DEFAULT_MAX_SESSIONS = 10
DEFAULT_MAX_OUTPUT_LINES = 5000
DEFAULT_MAX_HISTORY_ENTRIES = 1000
DEFAULT_SESSION_IDLE_TIMEOUT = timedelta(hours=2)


class StoreConfig(BaseModel):
    """Capacity and retention limits for a SessionStore."""
    max_sessions: int = Field(DEFAULT_MAX_SESSIONS, ge=1,
                              description="Maximum number of live sessions")
    max_output_lines: int = Field(DEFAULT_MAX_OUTPUT_LINES, ge=1,
                                  description="Output buffer bound per session")
    max_history_entries: int = Field(DEFAULT_MAX_HISTORY_ENTRIES, ge=1,
                                     description="Command history bound per session")
    session_idle_timeout: timedelta = Field(DEFAULT_SESSION_IDLE_TIMEOUT,
                                            description="Idle age after which cleanup removes a session")

    @field_validator('session_idle_timeout')
    @classmethod
    def _positive_timeout(cls, value: timedelta) -> timedelta:
        if value.total_seconds() <= 0:
            raise ValueError("session_idle_timeout must be positive")
        return value

    def to_display_dict(self) -> dict:
        """Plain values for display, with the timeout in seconds."""
        data = self.model_dump()
        data['session_idle_timeout'] = int(self.session_idle_timeout.total_seconds())
        return data
