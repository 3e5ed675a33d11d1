"""Tests for built-in command handlers."""

import asyncio
from pathlib import Path

import pytest

from termdeck.core import builtins
from termdeck.core.builtins import BUILTIN_HANDLERS, resolve_path
from termdeck.core.constants import BUILTIN_COMMANDS, CLEAR_SCREEN
from termdeck.core.context import TabDescriptor
from termdeck.core.parser import parse_command
from termdeck.services.exceptions import HandlerError


def invoke(line, context):
    command = parse_command(line)
    asyncio.run(BUILTIN_HANDLERS[command.name](command, context))


def added_tab(context) -> TabDescriptor:
    context.add_tab.assert_called_once()
    return context.add_tab.call_args.args[0]


@pytest.fixture
def project(tmp_path):
    """A small project tree."""
    (tmp_path / "README.md").write_text("# Demo\nSome TODO here\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')\n# todo: refactor\n")
    (tmp_path / ".env").write_text("SECRET=1\n")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "dep.js").write_text("// TODO vendored\n")
    return tmp_path


class TestResolvePath:
    """Test cases for resolve_path."""

    def test_relative_to_session_directory(self, mock_context, tmp_path):
        assert resolve_path("a/../b.txt", mock_context) == tmp_path / "b.txt"

    def test_absolute_path_unchanged(self, mock_context):
        assert resolve_path("/etc/hosts", mock_context) == Path("/etc/hosts")

    def test_home_expansion(self, mock_context):
        assert resolve_path("~/x", mock_context) == Path.home() / "x"


class TestHelp:
    def test_lists_every_builtin(self, mock_context, written):
        invoke('help', mock_context)
        output = written(mock_context)
        for name in BUILTIN_COMMANDS:
            assert name in output
        assert "Any other command is passed to the shell." in output


class TestOpen:
    """Test cases for open and edit."""

    def test_opens_file_from_argument(self, project, mock_context, written):
        invoke('open README.md', mock_context)

        tab = added_tab(mock_context)
        assert tab.type == 'editor'
        assert tab.title == 'README.md'
        assert tab.path == str(project / "README.md")
        assert tab.line is None
        assert "Opened 'README.md' in editor" in written(mock_context)

    def test_opens_file_from_flags(self, project, mock_context):
        invoke('open --file src/app.py --line 2', mock_context)

        tab = added_tab(mock_context)
        assert tab.path == str(project / "src" / "app.py")
        assert tab.line == 2

    def test_edit_is_alias(self, project, mock_context):
        invoke('edit README.md', mock_context)
        assert added_tab(mock_context).type == 'editor'

    def test_missing_file_argument(self, mock_context):
        with pytest.raises(HandlerError, match="No file specified"):
            invoke('open', mock_context)

    def test_file_not_found(self, project, mock_context):
        with pytest.raises(HandlerError, match="File not found: nope.txt"):
            invoke('open nope.txt', mock_context)
        mock_context.add_tab.assert_not_called()

    def test_directory_rejected(self, project, mock_context):
        with pytest.raises(HandlerError, match="'src' is a directory"):
            invoke('open src', mock_context)

    @pytest.mark.parametrize('value', ['abc', '0', '-3'])
    def test_invalid_line_number(self, project, mock_context, value):
        with pytest.raises(HandlerError, match="Invalid line number"):
            invoke(f'open README.md --line={value}', mock_context)


class TestNewFileAndTab:
    """Test cases for new-file and new-tab."""

    def test_new_file_default_name(self, tmp_path, mock_context, written):
        invoke('new-file', mock_context)

        tab = added_tab(mock_context)
        assert tab.title == 'untitled.txt'
        assert tab.content == ''
        assert tab.path == str(tmp_path / 'untitled.txt')
        assert "Created new file 'untitled.txt' in editor" in written(mock_context)

    def test_new_file_named(self, mock_context):
        invoke('new-file notes.md', mock_context)
        assert added_tab(mock_context).title == 'notes.md'

    def test_new_file_does_not_touch_disk(self, tmp_path, mock_context):
        invoke('new-file draft.txt', mock_context)
        assert not (tmp_path / 'draft.txt').exists()

    def test_new_tab(self, mock_context, written):
        invoke('new-tab', mock_context)
        tab = added_tab(mock_context)
        assert tab == TabDescriptor(title='Terminal', type='terminal')
        assert "Opened new terminal tab" in written(mock_context)

    def test_new_tab_with_title(self, mock_context):
        invoke('new-tab --title logs', mock_context)
        assert added_tab(mock_context).title == 'logs'


class TestPreview:
    """Test cases for preview."""

    def test_preview_file(self, project, mock_context, written):
        invoke('preview README.md', mock_context)

        tab = added_tab(mock_context)
        assert tab.type == 'browser'
        assert tab.title == 'Preview: README.md'
        assert tab.path == str(project / 'README.md')
        assert "Opened 'README.md' in browser preview" in written(mock_context)

    def test_preview_url(self, mock_context):
        invoke('preview https://example.com', mock_context)
        assert added_tab(mock_context).path == 'https://example.com'

    def test_preview_missing_file(self, mock_context):
        with pytest.raises(HandlerError, match="File not found"):
            invoke('preview missing.html', mock_context)


class TestDirectoryCommands:
    """Test cases for clear, pwd and cd."""

    def test_clear(self, mock_context):
        invoke('clear', mock_context)
        mock_context.write_to_terminal.assert_called_once_with(CLEAR_SCREEN)
        mock_context.clear_output.assert_called_once()

    def test_pwd(self, tmp_path, mock_context, written):
        invoke('pwd', mock_context)
        assert written(mock_context) == f"\r\n{tmp_path}\r\n"

    def test_cd(self, project, mock_context):
        invoke('cd src', mock_context)
        mock_context.set_current_directory.assert_called_once_with(str(project / 'src'))

    def test_cd_parent(self, project, mock_context):
        invoke('cd ..', mock_context)
        mock_context.set_current_directory.assert_called_once_with(str(project.parent))

    def test_cd_missing_directory(self, mock_context):
        with pytest.raises(HandlerError, match="No such directory: nowhere"):
            invoke('cd nowhere', mock_context)

    def test_cd_into_file(self, project, mock_context):
        with pytest.raises(HandlerError, match="No such directory"):
            invoke('cd README.md', mock_context)


class TestLs:
    """Test cases for ls."""

    def test_lists_entries(self, project, mock_context, written):
        invoke('ls', mock_context)
        assert written(mock_context) == "\r\nnode_modules/\r\nREADME.md\r\nsrc/\r\n"

    def test_hidden_files_with_short_option(self, project, mock_context, written):
        invoke('ls -a', mock_context)
        assert '.env' in written(mock_context)

    def test_hidden_files_with_long_flag(self, project, mock_context, written):
        invoke('ls --all', mock_context)
        assert '.env' in written(mock_context)

    def test_subdirectory(self, project, mock_context, written):
        invoke('ls src', mock_context)
        assert written(mock_context) == "\r\napp.py\r\n"

    def test_missing_target(self, mock_context):
        with pytest.raises(HandlerError, match="No such file or directory: ghost"):
            invoke('ls ghost', mock_context)


class TestCat:
    """Test cases for cat."""

    def test_prints_file_with_crlf(self, project, mock_context, written):
        invoke('cat README.md', mock_context)
        assert written(mock_context) == "\r\n# Demo\r\nSome TODO here\r\n"

    def test_multiple_files(self, project, mock_context):
        invoke('cat README.md src/app.py', mock_context)
        assert mock_context.write_to_terminal.call_count == 2

    def test_no_file(self, mock_context):
        with pytest.raises(HandlerError, match="No file specified"):
            invoke('cat', mock_context)

    def test_missing_file(self, mock_context):
        with pytest.raises(HandlerError, match="File not found: gone.txt"):
            invoke('cat gone.txt', mock_context)

    def test_too_large(self, project, mock_context, monkeypatch):
        monkeypatch.setattr(builtins, 'MAX_CAT_BYTES', 4)
        with pytest.raises(HandlerError, match="File too large to display"):
            invoke('cat README.md', mock_context)


class TestSearch:
    """Test cases for search."""

    def test_case_insensitive_matches(self, project, mock_context, written):
        invoke('search todo', mock_context)
        output = written(mock_context)

        assert "README.md:2: Some TODO here" in output
        assert "app.py:2: # todo: refactor" in output
        assert "2 match(es) for 'todo'" in output

    def test_skips_vendored_directories(self, project, mock_context, written):
        invoke('search vendored', mock_context)
        assert "No matches for 'vendored'" in written(mock_context)

    def test_max_results(self, project, mock_context, written):
        invoke('search todo --max 1', mock_context)
        assert "1 match(es) for 'todo'" in written(mock_context)

    def test_search_root_argument(self, project, mock_context, written):
        invoke('search todo src', mock_context)
        output = written(mock_context)
        assert "README.md" not in output
        assert "1 match(es)" in output

    def test_no_term(self, mock_context):
        with pytest.raises(HandlerError, match="No search term specified"):
            invoke('search', mock_context)

    def test_invalid_max(self, project, mock_context):
        with pytest.raises(HandlerError, match="Invalid --max value"):
            invoke('search todo --max lots', mock_context)


class TestHistory:
    """Test cases for history."""

    def test_empty_history(self, mock_context, written):
        invoke('history', mock_context)
        assert "History is empty" in written(mock_context)

    def test_numbered_rows(self, mock_context, written):
        mock_context.get_history.return_value = ['ls', 'pwd']
        invoke('history', mock_context)
        assert written(mock_context) == "\r\n  1  ls\r\n  2  pwd\r\n"
