"""Shell process adapters that receive forwarded commands."""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple

from ..core.session_store import SessionStore
from .exceptions import ShellForwardError

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024
MAX_LINE_BYTES = 1024 * 1024  # longer lines are emitted in pieces

# Flag that makes each shell run a command string
COMMAND_FLAGS = {'cmd': '/c', 'powershell': '-Command'}
DEFAULT_COMMAND_FLAG = '-c'


class ShellForwarder(ABC):
    """Receives raw command text that no built-in handles."""

    @abstractmethod
    async def send(self, session_id: Optional[str], raw: str) -> None:
        """Run raw command text for a session.

        Output is expected to reach the session through
        SessionStore.add_output. Implementations raise ShellForwardError when
        the command cannot be started.
        """

    async def terminate(self, session_id: Optional[str]) -> bool:
        """Stop whatever is running for a session. Returns True if something was stopped."""
        return False


class SubprocessShell(ShellForwarder):
    """Runs each forwarded command in a subprocess shell.

    Commands run in the session's current directory with the session
    profile's shell, arguments and environment variables. Each stdout/stderr
    line is appended to the session output; a non-zero exit status is
    reported as "[exit N]". A child still running when send() is left, for
    example on cancellation, is killed and reaped.
    """

    def __init__(self, store: SessionStore,
                 on_output: Optional[Callable[[Optional[str], str], None]] = None):
        """Initialize the subprocess shell.

        Args:
            store: Store that owns the sessions output is written to
            on_output: Optional callback receiving (session_id, line) for display
        """
        self.store = store
        self.on_output = on_output
        self._processes: Dict[Optional[str], asyncio.subprocess.Process] = {}

    def _emit(self, session_id: Optional[str], text: str) -> None:
        if session_id is not None:
            self.store.add_output(session_id, text)
        if self.on_output:
            self.on_output(session_id, text)

    def _emit_line(self, session_id: Optional[str], data: bytes) -> None:
        self._emit(session_id, data.decode('utf-8', errors='replace').rstrip('\r'))

    def _launch_settings(self, session_id: Optional[str]) -> Tuple[Optional[List[str]], dict]:
        """Work out the profile shell command prefix and process settings.

        Returns:
            (argv prefix or None to use the system shell, subprocess kwargs)
        """
        settings = {'env': dict(os.environ)}
        session = self.store.get_session(session_id) if session_id else None
        if session is None:
            return None, settings

        cwd = os.path.expanduser(session.current_directory)
        if os.path.isdir(cwd):
            settings['cwd'] = cwd
        else:
            logger.warning(f"Session {session_id} directory {cwd} is missing, using process cwd")

        profile = self.store.profiles.get_profile(session.profile_id)
        settings['env'].update(profile.env_variables)
        if not profile.shell_path or not os.path.exists(profile.shell_path):
            return None, settings

        command_flag = COMMAND_FLAGS.get(profile.shell, DEFAULT_COMMAND_FLAG)
        return [profile.shell_path, *profile.shell_args, command_flag], settings

    async def _start(self, raw: str, argv: Optional[List[str]],
                     settings: dict) -> asyncio.subprocess.Process:
        streams = {
            'stdin': asyncio.subprocess.DEVNULL,
            'stdout': asyncio.subprocess.PIPE,
            'stderr': asyncio.subprocess.STDOUT,
        }
        if argv:
            return await asyncio.create_subprocess_exec(*argv, raw, **streams, **settings)
        return await asyncio.create_subprocess_shell(raw, **streams, **settings)

    async def _stream_output(self, session_id: Optional[str],
                             stream: asyncio.StreamReader) -> None:
        pending = b''
        split_line = False
        while True:
            chunk = await stream.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            pending += chunk
            *lines, pending = pending.split(b'\n')
            if lines:
                if split_line and not lines[0]:
                    # Newline closing a line already emitted in pieces
                    lines.pop(0)
                split_line = False
            for line in lines:
                self._emit_line(session_id, line)
            if len(pending) >= MAX_LINE_BYTES:
                self._emit_line(session_id, pending)
                pending = b''
                split_line = True
        if pending:
            self._emit_line(session_id, pending)

    async def send(self, session_id: Optional[str], raw: str) -> None:
        argv, settings = self._launch_settings(session_id)
        logger.debug(f"Forwarding to shell for session {session_id}: {raw}")

        try:
            process = await self._start(raw, argv, settings)
        except OSError as e:
            raise ShellForwardError(f"Failed to start shell command: {e}") from e

        self._processes[session_id] = process
        try:
            await self._stream_output(session_id, process.stdout)
            exit_code = await process.wait()
        finally:
            self._processes.pop(session_id, None)
            if process.returncode is None:
                logger.debug(f"Killing unfinished shell command for session {session_id}")
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        logger.debug(f"Shell command for session {session_id} exited with {exit_code}")
        if exit_code != 0:
            self._emit(session_id, f"[exit {exit_code}]")

    async def terminate(self, session_id: Optional[str]) -> bool:
        process = self._processes.get(session_id)
        if process is None or process.returncode is not None:
            return False
        try:
            process.terminate()
        except ProcessLookupError:
            return False
        logger.info(f"Terminated shell command for session {session_id}")
        return True
