import pytest
from click.testing import CliRunner
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from termdeck.core.context import CommandContext
from termdeck.core.session_store import SessionStore
from termdeck.models.config import StoreConfig


class FakeClock:
    """Manually advanced clock for retention tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def clock():
    """Provides a controllable clock."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Provides a session store with default limits and a fake clock."""
    return SessionStore(StoreConfig(), clock=clock)


@pytest.fixture
def small_store(clock):
    """Provides a session store with tiny limits."""
    config = StoreConfig(
        max_sessions=3,
        max_output_lines=5,
        max_history_entries=4,
        session_idle_timeout=timedelta(minutes=30)
    )
    return SessionStore(config, clock=clock)


@pytest.fixture
def mock_context(tmp_path):
    """Provides a mocked command context rooted at a temporary directory."""
    context = MagicMock(spec=CommandContext)
    context.get_current_directory.return_value = str(tmp_path)
    context.get_history.return_value = []
    return context


@pytest.fixture
def written():
    """Collects everything a mocked context wrote to the terminal."""
    def collect(context):
        return "".join(call.args[0] for call in context.write_to_terminal.call_args_list)
    return collect


@pytest.fixture
def isolated_cli_runner(cli_runner):
    """Provides a CLI runner with isolated filesystem."""
    with cli_runner.isolated_filesystem():
        yield cli_runner
