"""Interactive terminal session command."""

import asyncio
import logging
from typing import Callable, Optional

import click
from rich.console import Console
from rich.text import Text

from ...core.constants import CLEAR_SCREEN, CRLF
from ...core.context import SessionContext, TabDescriptor
from ...core.dispatcher import CommandDispatcher
from ...core.session_store import SessionStore
from ...models.session import Session
from ...services.shell import SubprocessShell
from ..helpers import format_session_table, load_store_config, store_options

logger = logging.getLogger(__name__)

EXIT_WORDS = ('exit', 'quit')
META_PREFIX = ':'
META_HELP = """Session commands:
  :sessions        List open sessions
  :new [TITLE]     Open a new session
  :switch N        Switch to session number N
  :close           Close the current session
  :help            Show this help
  exit             Leave the shell"""


def prompt_line(prompt: str) -> Optional[str]:
    """Read one line from the user, or None at end of input."""
    try:
        return click.prompt(prompt, default='', show_default=False, prompt_suffix=' ')
    except click.Abort:
        return None


class InteractiveShell:
    """Read-dispatch loop over one SessionStore."""

    def __init__(self, store: SessionStore, console: Console,
                 read_line: Callable[[str], Optional[str]] = prompt_line):
        self.store = store
        self.console = console
        self.read_line = read_line
        self.shell = SubprocessShell(store, on_output=self._shell_output)
        self.dispatcher = CommandDispatcher(store=store, shell=self.shell)

    def _write(self, text: str) -> None:
        if text == CLEAR_SCREEN:
            self.console.clear()
            return
        self.console.print(Text.from_ansi(text.replace(CRLF, '\n')), end='')

    def _shell_output(self, session_id: Optional[str], line: str) -> None:
        self.console.print(Text(line))

    def _open_tab(self, descriptor: TabDescriptor) -> None:
        if descriptor.type == 'terminal':
            title = descriptor.title if descriptor.title != 'Terminal' else None
            session_id = self.store.create_session(title)
            session = self.store.get_session(session_id)
            self.console.print(f"[green]Switched to new session '{session.title}'[/green]")
            return
        target = descriptor.path or ''
        if descriptor.line:
            target = f"{target}:{descriptor.line}"
        self.console.print(f"[cyan]{descriptor.type} tab:[/cyan] {target}")

    def context_for(self, session_id: str) -> SessionContext:
        return SessionContext(self.store, session_id,
                              on_tab=self._open_tab, on_write=self._write)

    def ensure_session(self, title: Optional[str] = None) -> Session:
        session = self.store.get_active_session()
        if session is None:
            sessions = self.store.list_sessions()
            if sessions:
                self.store.set_active_session(sessions[-1].id)
            else:
                self.store.create_session(title)
            session = self.store.get_active_session()
        return session

    def handle_meta(self, line: str) -> None:
        """Handle a ':' session-management command."""
        parts = line[len(META_PREFIX):].split(maxsplit=1)
        name = parts[0] if parts else ''
        argument = parts[1] if len(parts) > 1 else None

        if name == 'sessions':
            click.echo(format_session_table(self.store.list_sessions()))
        elif name == 'new':
            session_id = self.store.create_session(argument)
            self.console.print(f"[green]Opened '{self.store.get_session(session_id).title}'[/green]")
        elif name == 'switch':
            sessions = self.store.list_sessions()
            if not argument or not argument.isdigit() or not 1 <= int(argument) <= len(sessions):
                self.console.print(f"[red]Choose a session between 1 and {len(sessions)}[/red]")
                return
            self.store.set_active_session(sessions[int(argument) - 1].id)
        elif name == 'close':
            active = self.store.get_active_session()
            if active:
                self.store.remove_session(active.id)
                self.console.print(f"[yellow]Closed '{active.title}'[/yellow]")
        elif name == 'help':
            click.echo(META_HELP)
        else:
            self.console.print(f"[red]Unknown session command '{name}'. Try :help[/red]")

    async def run(self, title: Optional[str] = None) -> None:
        while True:
            removed = self.store.cleanup_sessions()
            if removed:
                self.console.print(f"[yellow]Closed {removed} idle session(s)[/yellow]")

            session = self.ensure_session(title)
            line = self.read_line(f"{session.title} {session.current_directory} $")
            if line is None or line.strip() in EXIT_WORDS:
                break
            if line.strip().startswith(META_PREFIX):
                self.handle_meta(line.strip())
                continue

            self.dispatcher.submit(line, self.context_for(session.id), session.id)
            await self.dispatcher.drain(session.id)


@click.command()
@click.option('--title', help='Title for the first session')
@store_options
def shell(title, **store_limits):
    """Start an interactive terminal session"""
    config = load_store_config(store_limits)
    store = SessionStore(config)
    console = Console()

    console.print("[bold cyan]termdeck[/bold cyan] - type 'help' for commands, ':help' for sessions, 'exit' to leave")
    repl = InteractiveShell(store, console)
    asyncio.run(repl.run(title))
    logger.debug(f"Shell closed with {len(store)} open session(s)")
