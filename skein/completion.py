# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Shell completion for Skein command trees.

`suggest(roots, line)` takes the raw command line the shell is completing
(including the program name) and returns the legal next tokens, filtered by the
token currently being typed. It drives the same grammar parser used for
execution in lenient mode to find where the cursor is, then layers the
suggestion rules on top:

1. Command names: the single root itself, subcommands, siblings, and the
   reset token `^` once below the root.
2. Enum values when the previous token is an enum-constrained flag.
3. Flags of the whole resolved chain plus reserved global flags.
4. Enum values of the positional slot the cursor is on.
5. Other root commands once the current one is satisfied (multiple roots only).

Completion never raises. A parse failure stops resolution at the last good
context, and a failure while suggesting ends that suggestion category.

`completion_script(shell, program)` returns the bash, zsh or fish glue that
calls `<program> __complete "<line>"`.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Sequence, TextIO

from skein.exceptions import ShortFlagGroupNotBoolError, UnsupportedShellError
from skein.flags import COMPLETE_TOKEN, RESET_TOKEN, global_flags, root_only_flags
from skein.flags import strip_global_flags
from skein.logger import logger
from skein.node import CommandInstance, CommandNode, new_chain
from skein.parser.grammar import END_OF_OPTIONS, ParseResult, parse_command_args
from skein.parser.spec_collector import (
    FlagSpec,
    collect_positional_specs,
    completion_flag_specs,
    enum_values_by_flag,
    iter_flag_specs,
)
from skein.parser.tokenizer import tokenize_command_line

BASH_TEMPLATE = """
_{name}_completion() {{
    local request="${{COMP_LINE}}"
    local completions
    completions=$({program} {token} "$request")

    COMPREPLY=( $(compgen -W "$completions" -- "${{COMP_WORDS[COMP_CWORD]}}") )
}}
complete -F _{name}_completion {program}
"""

ZSH_TEMPLATE = """
#compdef {program}

_{name}_completion() {{
    local request="${{words[*]}}"
    local completions
    completions=("${{(@f)$({program} {token} "$request")}}")

    compadd -a completions
}}
compdef _{name}_completion {program}
"""

FISH_TEMPLATE = """
function __{name}_complete
    set -l request (commandline -cp)
    {program} {token} "$request"
end
complete -c {program} -a "(__{name}_complete)" -f
"""

SHELL_TEMPLATES = {
    "bash": BASH_TEMPLATE,
    "zsh": ZSH_TEMPLATE,
    "fish": FISH_TEMPLATE,
}


def completion_script(shell: str, program: str) -> str:
    """
    Return the completion script for `shell`.

    Raises:
        UnsupportedShellError: If the shell is not bash, zsh or fish.
    """
    template = SHELL_TEMPLATES.get(shell.lower())
    if template is None:
        raise UnsupportedShellError(shell)
    function_name = "".join(char if char.isalnum() else "_" for char in program)
    return template.format(name=function_name, program=program, token=COMPLETE_TOKEN)


def find_root(roots: Sequence[CommandNode], name: str) -> CommandNode | None:
    for root in roots:
        if root.name.lower() == name.lower():
            return root
    return None


def _drop_resets(args: list[str]) -> list[str]:
    index = 0
    while index < len(args) and args[index] == RESET_TOKEN:
        index += 1
    return args[index:]


def completion_parse(
    chain: Sequence[CommandInstance], args: Sequence[str], explicit: bool
) -> ParseResult:
    """Lenient parse of `args` against the terminal node of `chain`."""
    return parse_command_args(
        chain[-1].node,
        chain[-1].value,
        chain,
        args,
        set(),
        explicit=explicit,
        enforce_required=False,
        allow_incomplete=True,
    )


def is_grouped_short_flag(arg: str) -> bool:
    return (
        arg.startswith("-")
        and not arg.startswith("--")
        and len(arg) > 2
        and "=" not in arg
    )


def enum_values_for_arg(
    chain: Sequence[CommandInstance],
    args: Sequence[str],
    prefix: str,
    new_token: bool,
) -> tuple[str, ...] | None:
    """
    Enum values to suggest when the previous token is an enum-constrained flag.

    A grouped short flag (`-vao`) is looked up by its last letter. Returns None
    when no enum applies, including while a new flag is being typed.
    """
    by_flag = enum_values_by_flag(chain)
    if not by_flag or not args:
        return None
    if not new_token and prefix.startswith("-"):
        return None
    previous = args[-1]
    if previous in by_flag:
        return by_flag[previous]
    if is_grouped_short_flag(previous):
        return by_flag.get(f"-{previous[-1]}")
    return None


def expecting_flag_value(args: Sequence[str], specs: dict[str, FlagSpec]) -> bool:
    """Whether the last token is a flag still waiting for its value."""
    if not args:
        return False
    last = args[-1]
    if last == END_OF_OPTIONS or not last.startswith("-") or "=" in last:
        return False
    if last.startswith("--") or len(last) == 2:
        spec = specs.get(last)
        return spec is not None and spec.takes_value
    for index, letter in enumerate(last[1:]):
        spec = specs.get(f"-{letter}")
        if spec is not None and spec.takes_value:
            return index == len(last) - 2
    return False


def positional_index(args: Sequence[str], specs: dict[str, FlagSpec]) -> int:
    """Count positional tokens in `args`, skipping flags and the values they consume."""
    count = 0
    index = 0

    def skip_values(spec: FlagSpec | None) -> int:
        if spec is None or not spec.takes_value:
            return 0
        if not spec.variadic:
            return 1 if index + 1 < len(args) else 0
        skipped = 0
        while index + 1 + skipped < len(args):
            following = args[index + 1 + skipped]
            if following == END_OF_OPTIONS or following.startswith("-"):
                break
            skipped += 1
        return skipped

    while index < len(args):
        arg = args[index]
        if arg == END_OF_OPTIONS:
            pass
        elif arg.startswith("-") and len(arg) > 1:
            if "=" not in arg:
                if arg.startswith("--") or len(arg) == 2:
                    index += skip_values(specs.get(arg))
                else:
                    group = arg[1:]
                    for position, letter in enumerate(group):
                        spec = specs.get(f"-{letter}")
                        if spec is None or not spec.takes_value:
                            continue
                        if position == len(group) - 1:
                            index += skip_values(spec)
                        break
        else:
            count += 1
        index += 1
    return count


@dataclass
class CompletionState:
    """Where the cursor is in the grammar, plus completion-only bookkeeping."""

    roots: Sequence[CommandNode]
    prefix: str
    processed_args: list[str]
    new_token: bool
    current_node: CommandNode | None = None
    chain: list[CommandInstance] = field(default_factory=list)
    single_root: bool = False
    at_root: bool = True
    allow_root_suggests: bool = False
    positionals_complete: bool = False
    explicit: bool = False
    suggestions: list[str] = field(default_factory=list)

    def emit(self, candidate: str, prefix: str | None = None) -> None:
        if prefix is None:
            prefix = self.prefix
        if candidate.startswith(prefix) and candidate not in self.suggestions:
            self.suggestions.append(candidate)

    def suggest_roots_and_flags(self) -> None:
        for root in self.roots:
            self.emit(root.name)
        for flag in global_flags() + root_only_flags():
            self.emit(flag)

    def resolve_initial_root(self) -> bool:
        """Pick the starting node. Returns True when suggestions are already final."""
        if self.single_root:
            self.current_node = self.roots[0]
            self.explicit = False
            return False

        self.processed_args = _drop_resets(self.processed_args)
        if not self.processed_args:
            self.suggest_roots_and_flags()
            return True

        self.current_node = find_root(self.roots, self.processed_args[0])
        if self.current_node is None:
            for root in self.roots:
                self.emit(root.name, self.processed_args[0])
            return True

        self.processed_args = self.processed_args[1:]
        self.at_root = False
        self.explicit = True
        return False

    def follow_subcommand(self, result: ParseResult) -> None:
        self.current_node = result.subcommand
        self.processed_args = result.remaining
        self.explicit = True
        self.at_root = False

    def follow_remaining(self, result: ParseResult) -> bool | None:
        """
        Continue after leftover tokens.

        Returns True to keep resolving, False to stop, and None when the
        leftovers were only reset tokens, in which case no command is named yet.
        """
        remaining = _drop_resets(result.remaining)
        if self.single_root:
            if len(remaining) >= len(self.processed_args) and self.at_root:
                return False
            self.current_node = self.roots[0]
            self.processed_args = remaining
            self.explicit = False
            self.at_root = True
            return True

        if not remaining:
            return None
        next_root = find_root(self.roots, remaining[0])
        if next_root is None:
            return False
        self.current_node = next_root
        self.processed_args = remaining[1:]
        self.explicit = True
        self.at_root = False
        return True

    def resolve_command_chain(self) -> bool:
        """Follow hand-offs and leftovers. Returns True when suggestions are final."""
        while self.current_node is not None:
            chain = new_chain(self.current_node)
            try:
                result = completion_parse(chain, self.processed_args, self.explicit)
            except ShortFlagGroupNotBoolError as error:
                # keep the chain so its flags and enums can still be suggested
                self.chain = chain
                logger.debug("Completion stopped on short flag group: %s", error)
                return False
            except Exception as error:
                logger.debug("Completion stopped resolving: %s", error)
                return False

            self.chain = chain
            self.positionals_complete = result.positionals_complete

            if result.subcommand is not None:
                self.follow_subcommand(result)
                continue

            if result.remaining:
                followed = self.follow_remaining(result)
                if followed is None:
                    self.current_node = None
                    self.chain = []
                    self.suggest_roots_and_flags()
                    return True
                if followed:
                    continue
            return False
        return False

    def suggest_commands(self) -> None:
        node = self.current_node
        if node is None:
            return
        if self.single_root and self.at_root:
            self.emit(node.name)
        for name in node.subcommands:
            self.emit(name)
        if node.parent is not None:
            for name in node.parent.subcommands:
                self.emit(name)
        if not self.at_root:
            self.emit(RESET_TOKEN)

    def suggest_flags(self) -> None:
        if not self.chain:
            return
        for spec in iter_flag_specs(self.chain):
            self.emit(f"--{spec.name}")
            if spec.short:
                self.emit(f"-{spec.short}")
        for flag in global_flags():
            self.emit(flag)
        if self.at_root:
            for flag in root_only_flags():
                self.emit(flag)

    def suggest_positional_enum(self) -> bool:
        if not self.chain:
            return False
        specs = collect_positional_specs(self.chain[-1])
        if not specs:
            return False
        index = positional_index(self.processed_args, completion_flag_specs(self.chain))
        if index >= len(specs):
            if not specs[-1].variadic:
                return False
            index = len(specs) - 1
        if not specs[index].enum:
            return False
        for value in specs[index].enum:
            self.emit(value)
        return True

    def suggest_roots_if_allowed(self) -> None:
        if (
            not self.allow_root_suggests
            or not self.positionals_complete
            or self.prefix.startswith("-")
        ):
            return
        for root in self.roots:
            self.emit(root.name)

    def suggest_completions(self) -> None:
        self.suggest_commands()

        values = enum_values_for_arg(
            self.chain, self.processed_args, self.prefix, self.new_token
        )
        if values is not None:
            for value in values:
                self.emit(value)
            return

        if self.prefix.startswith("-") or not self.prefix:
            self.suggest_flags()
        if self.prefix.startswith("-"):
            return

        if expecting_flag_value(self.processed_args, completion_flag_specs(self.chain)):
            return
        if self.suggest_positional_enum():
            return
        self.suggest_roots_if_allowed()


def prepare_state(roots: Sequence[CommandNode], line: str) -> CompletionState | None:
    stream = tokenize_command_line(line)
    if not stream.tokens:
        return None
    parts = stream.tokens[1:]
    if not stream.new_token and parts:
        prefix, processed = parts[-1], parts[:-1]
    else:
        prefix, processed = "", parts
    return CompletionState(
        roots=roots,
        prefix=prefix,
        processed_args=strip_global_flags(processed),
        new_token=stream.new_token,
        single_root=len(roots) == 1,
        at_root=True,
        allow_root_suggests=len(roots) > 1,
    )


def suggest(roots: Sequence[CommandNode], line: str) -> list[str]:
    """Return the completion suggestions for `line`. Never raises."""
    if not roots:
        return []
    try:
        state = prepare_state(roots, line)
        if state is None:
            return []
        if state.resolve_initial_root():
            return state.suggestions
        if state.resolve_command_chain():
            return state.suggestions
        try:
            state.suggest_completions()
        except Exception as error:
            logger.debug("Completion suggestions cut short: %s", error)
        return state.suggestions
    except Exception as error:
        logger.debug("Completion failed for %r: %s", line, error)
        return []


def complete(
    roots: Sequence[CommandNode], line: str, stream: TextIO | None = None
) -> None:
    """Write one suggestion per line to `stream` (stdout by default)."""
    stream = stream or sys.stdout
    for suggestion in suggest(roots, line):
        stream.write(f"{suggestion}\n")


def resolve_context(roots: Sequence[CommandNode], args: Sequence[str]) -> CompletionState:
    """
    Resolve the node `args` point at, without suggesting anything.

    Used by help to find which command `--help` refers to.
    """
    state = CompletionState(
        roots=roots,
        prefix="",
        processed_args=strip_global_flags(list(args)),
        new_token=True,
        single_root=len(roots) == 1,
        allow_root_suggests=len(roots) > 1,
    )
    if roots and not state.resolve_initial_root():
        state.resolve_command_chain()
    state.suggestions = []
    return state
