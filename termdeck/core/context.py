"""Capabilities built-in commands act through."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..services.exceptions import HandlerError
from .session_store import SessionStore


@dataclass
class TabDescriptor:
    """A request to open a UI tab."""
    title: str
    type: str  # editor, browser, terminal
    path: Optional[str] = None
    content: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert descriptor to dictionary, omitting unset fields."""
        result = {'title': self.title, 'type': self.type}
        if self.path is not None:
            result['path'] = self.path
        if self.content is not None:
            result['content'] = self.content
        if self.line is not None:
            result['line'] = self.line
        return result


class CommandContext(ABC):
    """What a built-in command may do to the UI and its session.

    Only add_tab, write_to_terminal and get_current_directory are required.
    The remaining methods have conservative defaults for hosts that do not
    track session state.
    """

    @abstractmethod
    def add_tab(self, descriptor: TabDescriptor) -> None:
        ...

    @abstractmethod
    def write_to_terminal(self, text: str) -> None:
        ...

    @abstractmethod
    def get_current_directory(self) -> str:
        ...

    def set_current_directory(self, path: str) -> None:
        raise HandlerError("Changing directory is not supported in this terminal")

    def clear_output(self) -> None:
        pass

    def get_history(self) -> List[str]:
        return []


class SessionContext(CommandContext):
    """Context bound to one session of a SessionStore.

    Terminal writes land in the session's output buffer and directory
    changes update the session record. Tab requests go to on_tab, and every
    write is also passed to on_write when given.
    """

    def __init__(self, store: SessionStore, session_id: str,
                 on_tab: Optional[Callable[[TabDescriptor], None]] = None,
                 on_write: Optional[Callable[[str], None]] = None):
        self.store = store
        self.session_id = session_id
        self.on_tab = on_tab
        self.on_write = on_write
        self.tabs: List[TabDescriptor] = []

    def add_tab(self, descriptor: TabDescriptor) -> None:
        self.tabs.append(descriptor)
        if self.on_tab:
            self.on_tab(descriptor)

    def write_to_terminal(self, text: str) -> None:
        self.store.add_output(self.session_id, text)
        if self.on_write:
            self.on_write(text)

    def get_current_directory(self) -> str:
        session = self.store.get_session(self.session_id)
        return session.current_directory if session else "~"

    def set_current_directory(self, path: str) -> None:
        self.store.update_session(self.session_id, current_directory=path)

    def clear_output(self) -> None:
        self.store.clear_session(self.session_id)

    def get_history(self) -> List[str]:
        session = self.store.get_session(self.session_id)
        return list(session.command_history) if session else []
