"""Tests for the interactive shell command."""

import asyncio
import io
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from termdeck.cli.commands.shell import InteractiveShell, shell
from termdeck.core.session_store import SessionStore
from termdeck.models.config import StoreConfig


class ScriptedInput:
    """Feeds prepared lines to the shell loop, then signals end of input."""

    def __init__(self, *lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.lines.pop(0) if self.lines else None


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


def run_shell(store, console, *lines, title=None):
    script = ScriptedInput(*lines)
    repl = InteractiveShell(store, console, read_line=script)
    repl.shell.send = AsyncMock()
    asyncio.run(repl.run(title))
    return repl, script


class TestInteractiveShell:
    """Test suite for InteractiveShell."""

    def test_first_session_created_with_title(self, store, console):
        """Test the loop opens a session on start."""
        _, script = run_shell(store, console, title="work")

        assert [s.title for s in store.list_sessions()] == ["work"]
        assert script.prompts == ["work ~ $"]

    def test_builtin_output_is_printed_and_buffered(self, store, console, tmp_path):
        """Test built-in output reaches the console and the session."""
        run_shell(store, console, f"cd {tmp_path}", "pwd")

        session = store.get_active_session()
        assert session.current_directory == str(tmp_path)
        assert list(session.command_history) == [f"cd {tmp_path}", "pwd"]
        assert str(tmp_path) in console.file.getvalue()

    def test_prompt_follows_directory(self, store, console, tmp_path):
        """Test the prompt shows the session directory."""
        _, script = run_shell(store, console, f"cd {tmp_path}", "pwd")
        assert script.prompts[-1] == f"Terminal 1 {tmp_path} $"

    def test_other_commands_go_to_shell(self, store, console):
        """Test non built-ins are forwarded."""
        repl, _ = run_shell(store, console, "git status")

        session_id = store.get_active_session().id
        repl.shell.send.assert_awaited_once_with(session_id, "git status")

    def test_exit_word_stops_loop(self, store, console):
        """Test exit ends the loop before later lines run."""
        repl, script = run_shell(store, console, "exit", "pwd")

        assert script.lines == ["pwd"]
        assert list(store.get_active_session().command_history) == []

    def test_new_tab_opens_session(self, store, console):
        """Test new-tab creates and focuses a session."""
        run_shell(store, console, "new-tab logs")

        titles = [s.title for s in store.list_sessions()]
        assert titles == ["Terminal 1", "logs"]
        assert store.get_active_session().title == "logs"
        assert "Switched to new session 'logs'" in console.file.getvalue()

    def test_editor_tab_is_announced(self, store, console, tmp_path):
        """Test editor tabs are shown with their path."""
        target = tmp_path / "notes.txt"
        target.write_text("hello\n")

        run_shell(store, console, f"open {target} --line 4")

        assert f"editor tab: {target}:4" in console.file.getvalue()

    def test_parse_error_is_shown(self, store, console):
        """Test parse failures are printed, not raised."""
        run_shell(store, console, 'echo "oops')
        assert "Unterminated" in console.file.getvalue()

    def test_clear_clears_session_output(self, store, console):
        """Test clear empties the session buffer."""
        run_shell(store, console, "pwd", "clear")
        assert list(store.get_active_session().output_buffer) == []


class TestSessionMetaCommands:
    """Test suite for ':' session commands."""

    def test_new_and_switch(self, store, console):
        run_shell(store, console, ":new second", ":switch 1")

        sessions = store.list_sessions()
        assert [s.title for s in sessions] == ["Terminal 1", "second"]
        assert store.get_active_session().id == sessions[0].id

    def test_switch_out_of_range(self, store, console):
        run_shell(store, console, ":switch 9")
        assert "Choose a session between 1 and 1" in console.file.getvalue()

    def test_close_then_fresh_session(self, store, console):
        _, script = run_shell(store, console, ":close", "pwd")

        assert "Closed 'Terminal 1'" in console.file.getvalue()
        assert len(store) == 1
        assert len(script.prompts) == 3

    def test_sessions_table(self, store, console, capsys):
        run_shell(store, console, ":new build", ":sessions")

        output = capsys.readouterr().out
        assert "TITLE" in output
        assert "build" in output

    def test_unknown_meta_command(self, store, console):
        run_shell(store, console, ":bogus")
        assert "Unknown session command 'bogus'" in console.file.getvalue()

    def test_idle_sessions_cleaned_between_lines(self, clock, console):
        store = SessionStore(StoreConfig(session_idle_timeout=60), clock=clock)
        old = store.create_session("old")

        class AdvancingInput(ScriptedInput):
            def __call__(self, prompt):
                clock.advance(minutes=5)
                return super().__call__(prompt)

        repl = InteractiveShell(store, console, read_line=AdvancingInput(":new fresh"))
        asyncio.run(repl.run())

        assert old not in store
        assert [s.title for s in store.list_sessions()] == ["fresh"]
        assert "Closed 1 idle session(s)" in console.file.getvalue()


class TestShellCommand:
    """Test the click entry point."""

    def test_shell_reads_until_eof(self, isolated_cli_runner):
        """Test the command runs lines from stdin and exits at EOF."""
        result = isolated_cli_runner.invoke(shell, ['--title', 'cli'], input="pwd\nhistory\n")

        assert result.exit_code == 0
        assert "termdeck" in result.output
        assert "1  pwd" in result.output

    def test_shell_rejects_bad_limits(self, isolated_cli_runner):
        """Test store limit options are validated."""
        result = isolated_cli_runner.invoke(shell, ['--max-sessions', '0'])
        assert result.exit_code == 2
