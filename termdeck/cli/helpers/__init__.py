"""CLI Helper Functions for termdeck.

This module provides reusable helper functions for CLI commands to reduce
code duplication and standardize behavior across all commands.

The helpers provide:
- Project context and configuration loading
- Shared store-limit options
- Logging setup
- Consistent table formatting for output
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from tabulate import tabulate

from termdeck.core.constants import DATA_DIR_NAME, ENV_PREFIX
from termdeck.models.config import StoreConfig
from termdeck.models.session import Session
from termdeck.services.exceptions import ConfigError
from termdeck.utils.config_manager import ConfigManager

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

STORE_OPTION_KEYS = (
    'max_sessions',
    'max_output_lines',
    'max_history_entries',
    'session_idle_timeout',
)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def get_project_context() -> tuple[Path, Path]:
    """Get project root and data directory.

    Returns:
        Tuple of (project_root, data_dir)

    Note:
        Does not check if data_dir exists - callers should validate as needed.
    """
    project_root = Path.cwd()
    data_dir = project_root / DATA_DIR_NAME
    return project_root, data_dir


def get_config_manager() -> ConfigManager:
    """Get a ConfigManager for the current project."""
    _, data_dir = get_project_context()
    return ConfigManager(data_dir)


def store_options(func):
    """Add the store limit options shared by commands that build a store."""
    options = [
        click.option('--max-sessions', type=click.IntRange(min=1),
                     envvar=f'{ENV_PREFIX}_MAX_SESSIONS',
                     help='Maximum number of live sessions'),
        click.option('--max-output-lines', type=click.IntRange(min=1),
                     envvar=f'{ENV_PREFIX}_MAX_OUTPUT_LINES',
                     help='Output lines kept per session'),
        click.option('--max-history', 'max_history_entries', type=click.IntRange(min=1),
                     envvar=f'{ENV_PREFIX}_MAX_HISTORY',
                     help='History entries kept per session'),
        click.option('--idle-timeout', 'session_idle_timeout', type=click.IntRange(min=1),
                     envvar=f'{ENV_PREFIX}_IDLE_TIMEOUT',
                     help='Seconds of inactivity before a session is cleaned up'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_store_config(overrides: Dict[str, Any]) -> StoreConfig:
    """Load the project configuration with command-line overrides applied.

    Exits with status 1 when the stored configuration is invalid.
    """
    values = {key: overrides.get(key) for key in STORE_OPTION_KEYS}
    try:
        return get_config_manager().resolve_config(values)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def format_age(moment: datetime, now: Optional[datetime] = None) -> str:
    """Human readable age such as "5s", "3m" or "2h"."""
    seconds = int(((now or datetime.now()) - moment).total_seconds())
    if seconds < 60:
        return f"{max(seconds, 0)}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    return f"{seconds // 3600}h"


def format_session_table(sessions: List[Session], now: Optional[datetime] = None) -> str:
    """Format sessions as a table.

    Args:
        sessions: Sessions in display order
        now: Reference time for the idle column

    Returns:
        Formatted table string
    """
    headers = ["#", "TITLE", "DIRECTORY", "ACTIVE", "HISTORY", "OUTPUT", "IDLE"]
    rows = []
    for number, session in enumerate(sessions, 1):
        rows.append([
            number,
            session.title,
            session.current_directory,
            "*" if session.is_active else "",
            len(session.command_history),
            len(session.output_buffer),
            format_age(session.last_activity_at, now)
        ])
    return tabulate(rows, headers=headers, tablefmt="simple")


def print_table(headers: list[str], rows: list[list[Any]],
                tablefmt: str = "simple") -> None:
    """Print a table with project-wide defaults.

    Args:
        headers: Table headers
        rows: Table rows
        tablefmt: Table format (default: "simple")
    """
    table_str = tabulate(rows, headers=headers, tablefmt=tablefmt)
    click.echo(table_str)


# Re-export commonly used functions for convenience
__all__ = [
    'configure_logging',
    'get_project_context',
    'get_config_manager',
    'store_options',
    'load_store_config',
    'format_age',
    'format_session_table',
    'print_table',
]
