"""Built-in terminal commands.

Each handler takes ``(command, context)`` and writes its output through the
context. Expected failures are raised as HandlerError and turned into a
terminal message by the dispatcher; handlers never touch the session store
directly.
"""

import asyncio
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from ..models.command import Command
from ..services.exceptions import HandlerError
from .constants import (
    BUILTIN_COMMANDS,
    CLEAR_SCREEN,
    CRLF,
    DEFAULT_SEARCH_RESULTS,
    MAX_CAT_BYTES,
    SEARCH_SKIP_DIRS,
)
from .context import CommandContext, TabDescriptor

Handler = Callable[[Command, CommandContext], Awaitable[None]]

URL_PREFIXES = ('http://', 'https://', 'file://')


def resolve_path(name: str, context: CommandContext) -> Path:
    """Resolve a user-supplied path against the session directory."""
    path = Path(name).expanduser()
    if path.is_absolute():
        return Path(os.path.normpath(path))
    base = Path(context.get_current_directory()).expanduser()
    return Path(os.path.normpath(base / path))


def _message(text: str) -> str:
    return f"{CRLF}[{text}]{CRLF}"


def _target_file(command: Command) -> Optional[str]:
    if command.args:
        return command.args[0]
    value = command.flag('file')
    return value if isinstance(value, str) and value else None


def _line_number(command: Command) -> Optional[int]:
    value = command.flag('line')
    if value is None or value is True:
        return None
    try:
        line = int(value)
    except (TypeError, ValueError):
        raise HandlerError(f"Invalid line number: {value}")
    if line < 1:
        raise HandlerError(f"Invalid line number: {value}")
    return line


async def _require_file(name: str, path: Path) -> None:
    if not await asyncio.to_thread(path.exists):
        raise HandlerError(f"File not found: {name}")
    if await asyncio.to_thread(path.is_dir):
        raise HandlerError(f"'{name}' is a directory")


async def handle_help(command: Command, context: CommandContext) -> None:
    context.write_to_terminal(f"{CRLF}\x1b[1;36mtermdeck commands:\x1b[0m{CRLF}{CRLF}")
    for name, description in BUILTIN_COMMANDS.items():
        context.write_to_terminal(f"  \x1b[1;33m{name:<12}\x1b[0m {description}{CRLF}")
    context.write_to_terminal(CRLF)
    context.write_to_terminal(f"Any other command is passed to the shell.{CRLF}")


async def handle_open(command: Command, context: CommandContext) -> None:
    """Open an existing file in an editor tab."""
    name = _target_file(command)
    if not name:
        raise HandlerError("No file specified")
    line = _line_number(command)
    path = resolve_path(name, context)
    await _require_file(name, path)

    context.add_tab(TabDescriptor(title=name, type='editor', path=str(path), line=line))
    context.write_to_terminal(_message(f"Opened '{name}' in editor"))


async def handle_new_file(command: Command, context: CommandContext) -> None:
    name = _target_file(command) or 'untitled.txt'
    path = resolve_path(name, context)
    context.add_tab(TabDescriptor(title=name, type='editor', path=str(path), content=''))
    context.write_to_terminal(_message(f"Created new file '{name}' in editor"))


async def handle_new_tab(command: Command, context: CommandContext) -> None:
    title = command.args[0] if command.args else command.flag('title')
    if not isinstance(title, str) or not title:
        title = 'Terminal'
    context.add_tab(TabDescriptor(title=title, type='terminal'))
    context.write_to_terminal(_message("Opened new terminal tab"))


async def handle_preview(command: Command, context: CommandContext) -> None:
    """Open a file or URL in a browser tab."""
    name = _target_file(command)
    if not name:
        raise HandlerError("No file specified")

    if name.startswith(URL_PREFIXES):
        target = name
    else:
        path = resolve_path(name, context)
        await _require_file(name, path)
        target = str(path)

    context.add_tab(TabDescriptor(title=f"Preview: {name}", type='browser', path=target))
    context.write_to_terminal(_message(f"Opened '{name}' in browser preview"))


async def handle_clear(command: Command, context: CommandContext) -> None:
    context.write_to_terminal(CLEAR_SCREEN)
    context.clear_output()


async def handle_pwd(command: Command, context: CommandContext) -> None:
    context.write_to_terminal(f"{CRLF}{context.get_current_directory()}{CRLF}")


async def handle_cd(command: Command, context: CommandContext) -> None:
    target = command.args[0] if command.args else '~'
    path = resolve_path(target, context)
    if not await asyncio.to_thread(path.is_dir):
        raise HandlerError(f"No such directory: {target}")
    context.set_current_directory(str(path))


def _list_directory(path: Path, show_all: bool) -> List[str]:
    if path.is_file():
        return [path.name]
    entries = []
    for entry in sorted(path.iterdir(), key=lambda p: p.name.lower()):
        if not show_all and entry.name.startswith('.'):
            continue
        entries.append(entry.name + ('/' if entry.is_dir() else ''))
    return entries


async def handle_ls(command: Command, context: CommandContext) -> None:
    # Short options such as -la arrive as positional args
    short_options = [a for a in command.args if a.startswith('-') and len(a) > 1]
    targets = [a for a in command.args if a not in short_options]
    show_all = bool(command.flag('all')) or any('a' in o for o in short_options)

    target = targets[0] if targets else '.'
    path = resolve_path(target, context)
    if not await asyncio.to_thread(path.exists):
        raise HandlerError(f"No such file or directory: {target}")

    try:
        entries = await asyncio.to_thread(_list_directory, path, show_all)
    except PermissionError:
        raise HandlerError(f"Permission denied: {target}")

    if entries:
        context.write_to_terminal(CRLF + CRLF.join(entries) + CRLF)


def _read_text(path: Path) -> str:
    if path.stat().st_size > MAX_CAT_BYTES:
        raise HandlerError(f"File too large to display: {path.name}")
    return path.read_text(errors='replace')


async def handle_cat(command: Command, context: CommandContext) -> None:
    if not command.args:
        raise HandlerError("No file specified")

    for name in command.args:
        path = resolve_path(name, context)
        await _require_file(name, path)
        try:
            content = await asyncio.to_thread(_read_text, path)
        except PermissionError:
            raise HandlerError(f"Permission denied: {name}")
        context.write_to_terminal(CRLF + CRLF.join(content.splitlines()) + CRLF)


def _search_files(root: Path, term: str, limit: int) -> List[str]:
    """Case-insensitive substring search, returning "path:line: text" rows."""
    needle = term.lower()
    matches = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SEARCH_SKIP_DIRS)
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            try:
                with open(file_path, encoding='utf-8') as f:
                    for number, text in enumerate(f, 1):
                        if needle in text.lower():
                            relative = file_path.relative_to(root)
                            matches.append(f"{relative}:{number}: {text.strip()}")
                            if len(matches) >= limit:
                                return matches
            except (OSError, UnicodeDecodeError):
                # Binary or unreadable file
                continue
    return matches


async def handle_search(command: Command, context: CommandContext) -> None:
    if not command.args:
        raise HandlerError("No search term specified")
    term = command.args[0]

    root = resolve_path(command.args[1] if len(command.args) > 1 else '.', context)
    if not await asyncio.to_thread(root.is_dir):
        raise HandlerError(f"No such directory: {root}")

    limit = command.flag('max', DEFAULT_SEARCH_RESULTS)
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise HandlerError(f"Invalid --max value: {limit}")
    if limit < 1:
        raise HandlerError(f"Invalid --max value: {limit}")

    matches = await asyncio.to_thread(_search_files, root, term, limit)
    if not matches:
        context.write_to_terminal(_message(f"No matches for '{term}'"))
        return
    context.write_to_terminal(CRLF + CRLF.join(matches) + CRLF)
    context.write_to_terminal(_message(f"{len(matches)} match(es) for '{term}'"))


async def handle_history(command: Command, context: CommandContext) -> None:
    history = context.get_history()
    if not history:
        context.write_to_terminal(_message("History is empty"))
        return
    width = len(str(len(history)))
    rows = [f"  {number:>{width}}  {line}" for number, line in enumerate(history, 1)]
    context.write_to_terminal(CRLF + CRLF.join(rows) + CRLF)


BUILTIN_HANDLERS: Dict[str, Handler] = {
    'help': handle_help,
    'open': handle_open,
    'edit': handle_open,
    'new-file': handle_new_file,
    'new-tab': handle_new_tab,
    'preview': handle_preview,
    'clear': handle_clear,
    'pwd': handle_pwd,
    'cd': handle_cd,
    'ls': handle_ls,
    'cat': handle_cat,
    'search': handle_search,
    'history': handle_history,
}
