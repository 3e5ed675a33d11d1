"""Command line parser for terminal input.

Turns one raw input line into a :class:`Command`, a :class:`ParseFailure`,
or ``None`` for blank input. The parser keeps no state and never raises.

Tokenizing rules:

- whitespace outside quotes separates tokens
- ``"..."`` and ``'...'`` are literal spans closed by the same quote
- a backslash outside quotes takes the next character literally
- ``--name=value``, ``--name value`` and ``--name`` are flags, but only when
  the leading ``--`` was typed bare (not quoted or escaped)
- a bare ``--`` ends flag parsing
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from ..models.command import Command, FlagValue, ParseErrorKind, ParseFailure


QUOTE_CHARS = ('"', "'")
ESCAPE_CHAR = '\\'
FLAG_PREFIX = '--'
END_OF_FLAGS = '--'


@dataclass
class Token:
    """A single word from the input line."""
    text: str
    position: int
    bare_prefix: int  # leading characters typed without quoting or escaping

    @property
    def is_end_of_flags(self) -> bool:
        return self.text == END_OF_FLAGS and self.bare_prefix >= 2

    @property
    def is_flag(self) -> bool:
        return (self.bare_prefix >= 2 and self.text.startswith(FLAG_PREFIX)
                and len(self.text) > 2 and not self.text.startswith('--='))


class _Tokenizer:
    """Splits a line into tokens, tracking which characters were literal."""

    def __init__(self, line: str):
        self.line = line
        self.tokens: List[Token] = []
        self._chars: List[str] = []
        self._start = 0
        self._bare_prefix = 0
        self._plain = True
        self._in_token = False

    def _begin(self, position: int):
        if not self._in_token:
            self._in_token = True
            self._start = position

    def _append_bare(self, ch: str, position: int):
        self._begin(position)
        self._chars.append(ch)
        if self._plain:
            self._bare_prefix += 1

    def _append_literal(self, text: str, position: int):
        self._begin(position)
        self._chars.append(text)
        self._plain = False

    def _flush(self):
        if self._in_token:
            self.tokens.append(Token(''.join(self._chars), self._start, self._bare_prefix))
        self._chars = []
        self._bare_prefix = 0
        self._plain = True
        self._in_token = False

    def run(self) -> Optional[ParseFailure]:
        line = self.line
        quote = None
        quote_start = 0
        i = 0
        n = len(line)

        while i < n:
            ch = line[i]

            if quote is not None:
                if ch == quote:
                    quote = None
                else:
                    self._chars.append(ch)
                i += 1
                continue

            if ch in QUOTE_CHARS:
                # An empty quoted span still produces a token
                self._append_literal('', i)
                quote = ch
                quote_start = i
            elif ch == ESCAPE_CHAR:
                if i + 1 < n:
                    self._append_literal(line[i + 1], i)
                    i += 1
                else:
                    # Trailing backslash has nothing to escape; keep it
                    self._append_literal(ch, i)
            elif ch.isspace():
                self._flush()
            else:
                self._append_bare(ch, i)
            i += 1

        if quote is not None:
            return ParseFailure(
                kind=ParseErrorKind.UNTERMINATED_QUOTE,
                message=f"Unterminated {quote} quote starting at column {quote_start + 1}",
                position=quote_start,
                raw=line
            )

        self._flush()
        return None


def tokenize(line: str) -> Union[List[Token], ParseFailure]:
    """Split a line into tokens, or report an unterminated quote."""
    tokenizer = _Tokenizer(line)
    failure = tokenizer.run()
    if failure:
        return failure
    return tokenizer.tokens


def _split_flag(token: Token):
    body = token.text[len(FLAG_PREFIX):]
    if '=' in body:
        name, value = body.split('=', 1)
        return name, value
    return body, None


def parse_command(line: str) -> Union[Command, ParseFailure, None]:
    """Parse a raw input line.

    Args:
        line: Text exactly as the user submitted it

    Returns:
        A Command, a ParseFailure, or None for an empty/whitespace-only line
    """
    if not line or not line.strip():
        return None

    tokens = tokenize(line)
    if isinstance(tokens, ParseFailure):
        return tokens

    name: Optional[str] = None
    args: List[str] = []
    flags = {}
    flags_done = False
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if not flags_done and token.is_end_of_flags:
            flags_done = True
            i += 1
            continue

        if not flags_done and token.is_flag:
            flag_name, value = _split_flag(token)
            flag_value: FlagValue = True
            if value is not None:
                flag_value = value
            elif name is not None and i + 1 < len(tokens):
                following = tokens[i + 1]
                if not following.is_flag and not following.is_end_of_flags:
                    flag_value = following.text
                    i += 1
            flags[flag_name] = flag_value
            i += 1
            continue

        if name is None:
            name = token.text
        else:
            args.append(token.text)
        i += 1

    if name is None:
        return ParseFailure(
            kind=ParseErrorKind.MISSING_COMMAND,
            message="No command given, only flags",
            position=tokens[0].position if tokens else 0,
            raw=line
        )

    return Command(name=name, args=args, flags=flags, raw=line)
