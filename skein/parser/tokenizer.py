# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Shell-like tokenizer for in-progress command lines.

Unlike `shlex.split`, unterminated quotes and trailing backslashes never raise:
completion runs on half-typed lines. The returned `TokenStream` also reports
whether the line ended on a token boundary, which tells completion whether the
last token is still being typed.
"""
from __future__ import annotations

from dataclasses import dataclass, field

WHITESPACE = frozenset(" \t\n")


@dataclass(frozen=True)
class TokenStream:
    """
    Tokens of one command line.

    Attributes:
        tokens (list[str]): The tokens, with quotes and escapes removed.
        new_token (bool): True when the line ends on unescaped whitespace, meaning
            the next keystroke starts a new token.
        last_offset (int): Index in the raw line where the last token begins,
            quotes and backslashes included.
    """

    tokens: list[str] = field(default_factory=list)
    new_token: bool = False
    last_offset: int = field(default=0, compare=False)


class _Tokenizer:
    def __init__(self) -> None:
        self.parts: list[str] = []
        self.offsets: list[int] = []
        self.current: list[str] = []
        self.token_start: int | None = None
        self.in_single = False
        self.in_double = False
        self.escaped = False
        self.new_token = False

    def flush(self) -> None:
        if self.current:
            self.parts.append("".join(self.current))
            self.offsets.append(self.token_start or 0)
            self.current = []
        self.token_start = None

    def feed(self, index: int, char: str) -> None:
        if self.token_start is None and not (
            char in WHITESPACE
            and not self.escaped
            and not self.in_single
            and not self.in_double
        ):
            self.token_start = index

        if self.escaped:
            self.current.append(char)
            self.escaped = False
            self.new_token = False
            return

        if char == "\\" and not self.in_single:
            self.escaped = True
        elif char == "'" and not self.in_double:
            self.in_single = not self.in_single
        elif char == '"' and not self.in_single:
            self.in_double = not self.in_double
        elif char in WHITESPACE and not self.in_single and not self.in_double:
            self.flush()
            self.new_token = True
            return
        else:
            self.current.append(char)
        self.new_token = False

    def finish(self) -> TokenStream:
        if self.escaped:
            self.current.append("\\")
        self.flush()
        if self.in_single or self.in_double:
            self.new_token = False
        last_offset = self.offsets[-1] if self.offsets else 0
        return TokenStream(self.parts, self.new_token, last_offset)


def tokenize_command_line(line: str) -> TokenStream:
    """Split `line` into tokens honoring single quotes, double quotes and backslashes."""
    tokenizer = _Tokenizer()
    for index, char in enumerate(line):
        tokenizer.feed(index, char)
    return tokenizer.finish()
