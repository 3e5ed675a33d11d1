"""Tests for config models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from termdeck.models.config import StoreConfig


class TestStoreConfig:
    """Test suite for StoreConfig."""

    def test_defaults(self):
        """Test the documented default limits."""
        config = StoreConfig()
        assert config.max_sessions == 10
        assert config.max_output_lines == 5000
        assert config.max_history_entries == 1000
        assert config.session_idle_timeout == timedelta(hours=2)

    def test_timeout_from_seconds(self):
        """Test the idle timeout accepts plain seconds."""
        config = StoreConfig(session_idle_timeout=90)
        assert config.session_idle_timeout == timedelta(seconds=90)

    @pytest.mark.parametrize('field', ['max_sessions', 'max_output_lines', 'max_history_entries'])
    def test_limits_must_be_positive(self, field):
        """Test zero limits are rejected."""
        with pytest.raises(ValidationError):
            StoreConfig(**{field: 0})

    def test_timeout_must_be_positive(self):
        """Test a zero idle timeout is rejected."""
        with pytest.raises(ValidationError, match="session_idle_timeout must be positive"):
            StoreConfig(session_idle_timeout=timedelta(0))

    def test_to_display_dict(self):
        """Test display values use seconds for the timeout."""
        assert StoreConfig(max_sessions=3).to_display_dict() == {
            'max_sessions': 3,
            'max_output_lines': 5000,
            'max_history_entries': 1000,
            'session_idle_timeout': 7200
        }
