# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Provides `SkeinCompleter`, a Prompt Toolkit completer over the Skein grammar.

The completer feeds the text before the cursor through the same resolver used
for shell completion, so interactive prompts and shells always agree:
- Root and subcommand names, siblings, and the reset token `^`
- Flags of the resolved command chain and reserved global flags
- Enum values for flags and positionals
- Longest-common-prefix insertion and quoting of suggestions with spaces
"""
from __future__ import annotations

import os
from typing import TYPE_CHECKING, Iterable, Sequence

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from skein.completion import suggest
from skein.node import CommandNode
from skein.parser.tokenizer import tokenize_command_line

if TYPE_CHECKING:
    from skein.app import Skein


def quote_suggestion(text: str) -> str:
    """Wrap `text` in double quotes when it contains whitespace."""
    if any(char.isspace() for char in text):
        return f'"{text}"'
    return text


class SkeinCompleter(Completer):
    """
    Prompt Toolkit completer for Skein command input.

    Args:
        source (Skein | Sequence[CommandNode]): The application, or its root nodes.
        program (str): Name standing in for the program token the resolver skips.
    """

    def __init__(
        self, source: "Skein" | Sequence[CommandNode], program: str = "skein"
    ) -> None:
        self.source = source
        self.program = program

    @property
    def roots(self) -> Sequence[CommandNode]:
        if isinstance(self.source, (list, tuple)):
            return self.source
        return self.source.roots  # type: ignore[union-attr]

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        """
        Yield completions for the token under the cursor.

        Suggestions are matched against the unquoted token, but each completion
        replaces the token as typed, quotes and backslashes included. When
        several suggestions share a prefix longer than the token, that prefix
        comes first so Tab extends the input before the menu is needed.
        """
        text = document.text_before_cursor
        stream = tokenize_command_line(text)
        if stream.new_token or not stream.tokens:
            stub, typed_length = "", 0
        else:
            stub = stream.tokens[-1]
            typed_length = len(text) - stream.last_offset

        matches = [
            suggestion
            for suggestion in suggest(self.roots, f"{self.program} {text}")
            if suggestion.startswith(stub)
        ]
        if not matches:
            return

        start = -typed_length
        shared = os.path.commonprefix(matches)
        if len(matches) > 1 and len(shared) > len(stub) and not shared.startswith("-"):
            yield Completion(self._open_quoted(shared), start_position=start, display=shared)
        for match in matches:
            yield Completion(quote_suggestion(match), start_position=start, display=match)

    @staticmethod
    def _open_quoted(prefix: str) -> str:
        # A partial insertion leaves the quote open for the rest of the word.
        if any(char.isspace() for char in prefix):
            return f'"{prefix}'
        return prefix
