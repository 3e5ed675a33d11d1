"""Command dispatcher: built-in handlers or the shell process."""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ..models.command import Command, ParseFailure
from ..services.exceptions import HandlerError, ShellForwardError
from .builtins import BUILTIN_HANDLERS, Handler
from .constants import BUILTIN_COMMANDS, CRLF, DISPATCH_TIMING_PREFIX
from .context import CommandContext
from .parser import parse_command
from .performance import PerformanceTracker
from .session_store import SessionStore

logger = logging.getLogger(__name__)


def _error_line(text: str) -> str:
    return f"{CRLF}[Error: {text}]{CRLF}"


class CommandDispatcher:
    """Routes parsed commands and keeps per-session submission order.

    Built-in commands run in-process against a CommandContext. Anything else
    is forwarded verbatim to the shell collaborator, whose output reaches the
    session through SessionStore.add_output. No command failure escapes
    execute() or submit(); failures are written to the terminal instead.
    """

    def __init__(self, store: Optional[SessionStore] = None, shell=None,
                 tracker: Optional[PerformanceTracker] = None,
                 handlers: Optional[Dict[str, Handler]] = None):
        """Initialize the dispatcher.

        Args:
            store: Session store used to record history for submitted lines
            shell: ShellForwarder that receives unrecognised commands
            tracker: Optional tracker timing each execution
            handlers: Built-in handler table (defaults to BUILTIN_HANDLERS)
        """
        self.store = store
        self.shell = shell
        self.tracker = tracker
        self.handlers = dict(BUILTIN_HANDLERS if handlers is None else handlers)
        self._pending: Dict[Optional[str], asyncio.Task] = {}

    def is_builtin(self, name: str) -> bool:
        return name in self.handlers

    def builtin_commands(self) -> List[Tuple[str, str]]:
        """(name, description) pairs for every registered built-in."""
        return [(name, BUILTIN_COMMANDS.get(name, '')) for name in self.handlers]

    async def execute(self, command: Command, context: CommandContext,
                      session_id: Optional[str] = None) -> None:
        """Run one parsed command to completion.

        Args:
            command: Parsed command
            context: Capabilities for built-in handlers
            session_id: Session the command belongs to, passed to the shell
        """
        end_timing = None
        if self.tracker:
            end_timing = self.tracker.start_timing(f"{DISPATCH_TIMING_PREFIX}{command.name}")
        try:
            handler = self.handlers.get(command.name)
            if handler is not None:
                await self._run_builtin(handler, command, context)
            else:
                await self._forward(command, context, session_id)
        finally:
            if end_timing:
                end_timing()

    async def _run_builtin(self, handler: Handler, command: Command,
                           context: CommandContext) -> None:
        try:
            await handler(command, context)
        except HandlerError as e:
            context.write_to_terminal(_error_line(str(e)))
        except Exception as e:
            logger.warning(f"Built-in '{command.name}' failed: {type(e).__name__}: {e}", exc_info=True)
            context.write_to_terminal(f"{CRLF}[Error executing '{command.name}': {e}]{CRLF}")

    async def _forward(self, command: Command, context: CommandContext,
                       session_id: Optional[str]) -> None:
        if self.shell is None:
            context.write_to_terminal(_error_line(f"Unknown command '{command.name}'"))
            return

        logger.debug(f"Forwarding '{command.name}' for session {session_id}")
        try:
            await self.shell.send(session_id, command.raw)
        except ShellForwardError as e:
            context.write_to_terminal(_error_line(str(e)))
        except Exception as e:
            logger.warning(f"Shell forwarding failed for '{command.name}': {e}", exc_info=True)
            context.write_to_terminal(_error_line(f"Shell failed to run '{command.name}': {e}"))

    def submit(self, line: str, context: CommandContext,
               session_id: Optional[str] = None) -> asyncio.Task:
        """Parse and schedule one raw input line.

        The returned task runs after every earlier submission for the same
        session has finished. Submissions for different sessions run
        concurrently. Must be called from a running event loop.

        Args:
            line: Raw text as typed
            context: Capabilities for built-in handlers
            session_id: Owning session; its history records the line

        Returns:
            Task that completes when the line has been handled
        """
        previous = self._pending.get(session_id)
        task = asyncio.ensure_future(self._run_in_order(previous, line, context, session_id))
        self._pending[session_id] = task
        task.add_done_callback(lambda done: self._release(session_id, done))
        return task

    def _release(self, session_id: Optional[str], task: asyncio.Task) -> None:
        if self._pending.get(session_id) is task:
            del self._pending[session_id]

    async def _run_in_order(self, previous: Optional[asyncio.Task], line: str,
                            context: CommandContext, session_id: Optional[str]) -> None:
        if previous is not None and not previous.done():
            # wait() never re-raises, so a cancelled predecessor does not stop this line
            await asyncio.wait([previous])
        await self.run_line(line, context, session_id)

    async def run_line(self, line: str, context: CommandContext,
                       session_id: Optional[str] = None) -> None:
        """Parse, record and execute one line without queueing."""
        parsed = parse_command(line)
        if parsed is None:
            return

        if self.store is not None and session_id is not None:
            self.store.add_to_history(session_id, line.strip())

        if isinstance(parsed, ParseFailure):
            context.write_to_terminal(_error_line(parsed.message))
            return

        await self.execute(parsed, context, session_id)

    async def drain(self, session_id: Optional[str] = None) -> None:
        """Wait until pending submissions have finished.

        Args:
            session_id: Only wait for this session; all sessions when omitted
        """
        if session_id is not None:
            tasks = [self._pending[session_id]] if session_id in self._pending else []
        else:
            tasks = list(self._pending.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def pending_sessions(self) -> List[Optional[str]]:
        return list(self._pending.keys())
