"""Parsed command models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union


FlagValue = Union[str, bool]


class ParseErrorKind(Enum):
    """Reasons a command line could not be parsed."""
    UNTERMINATED_QUOTE = "unterminated_quote"
    MISSING_COMMAND = "missing_command"


@dataclass
class Command:
    """One parsed input line."""
    name: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, FlagValue] = field(default_factory=dict)
    raw: str = ""

    def flag(self, name: str, default=None):
        """Return a flag value, or default when it was not given."""
        return self.flags.get(name, default)

    def to_dict(self) -> dict:
        """Convert command to dictionary."""
        return {
            'name': self.name,
            'args': list(self.args),
            'flags': dict(self.flags),
            'raw': self.raw
        }


@dataclass
class ParseFailure:
    """A line that could not be turned into a Command."""
    kind: ParseErrorKind
    message: str
    position: int = 0
    raw: str = ""

    def to_dict(self) -> dict:
        """Convert failure to dictionary."""
        return {
            'error': self.kind.value,
            'message': self.message,
            'position': self.position,
            'raw': self.raw
        }
