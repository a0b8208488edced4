# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Grammar parser shared by execution and completion.

`parse_command_args` consumes an argument vector against one node of the
command tree. Flags of the whole chain are active; positionals belong to the
node being parsed. Each token is classified left to right:

- `--` closes a variadic positional and is otherwise ignored
- `-x`, `--name`, `-x=value`, `--name=value` are flags
- anything else fills the next positional slot, or names a subcommand
  once all positional slots are filled

The parse ends in one of three ways:

- a subcommand hand-off (`ParseResult.subcommand` plus the tokens after it)
- leftover tokens in explicit mode (the caller tries another root command)
- completion, after positional defaults and required checks are applied

Strict parses (execution) enforce required positionals and report missing flag
values. Lenient parses (completion) tolerate a value-taking flag at the very
end of the vector so that half-typed lines can still be resolved.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from skein.exceptions import (
    FlagNeedsArgumentError,
    FlagNotDefinedError,
    InvalidValueError,
    LongFlagFormatError,
    MissingRequiredPositionalError,
    ShortFlagGroupNotBoolError,
    UnknownCommandError,
)
from skein.logger import logger
from skein.node import CommandInstance, CommandNode
from skein.parser.spec_collector import (
    FlagSpec,
    PositionalSpec,
    collect_flag_specs,
    collect_positional_specs,
)

END_OF_OPTIONS = "--"


@dataclass
class ArgPosition:
    """Running count of bound values, stamped into `Interleaved` elements."""

    value: int = 0

    def advance(self) -> int:
        current = self.value
        self.value += 1
        return current


@dataclass
class ParseResult:
    """
    Outcome of parsing one node.

    Attributes:
        remaining (list[str]): Tokens after a subcommand name, or the leftover
            tokens of an explicit parse.
        subcommand (CommandNode | None): Node to continue parsing with.
        positionals_complete (bool): Whether every required positional is filled.
    """

    remaining: list[str] = field(default_factory=list)
    subcommand: CommandNode | None = None
    positionals_complete: bool = False


def looks_like_flag(token: str) -> bool:
    return token.startswith("-") and token != "-"


def _split_inline_value(name: str) -> tuple[str, str | None]:
    if "=" in name:
        name, value = name.split("=", 1)
        return name, value
    return name, None


def _should_expand(arg: str, long_names: set[str]) -> bool:
    if arg.startswith("--") or not arg.startswith("-") or len(arg) <= 2:
        return False
    if "=" in arg:
        return False
    return arg[1:] not in long_names


def expand_short_flag_groups(
    args: Sequence[str],
    specs: Sequence[FlagSpec],
    long_names: set[str],
) -> list[str]:
    """
    Expand grouped short flags: `-abc` becomes `-a -b -c`.

    Only the last letter of a group may take a value. A group containing a letter
    that is not a known short flag is left intact.

    Raises:
        ShortFlagGroupNotBoolError: If a value-taking letter is not last.
    """
    takes_value = {spec.short: spec.takes_value for spec in specs if spec.short}
    expanded: list[str] = []
    for arg in args:
        if not _should_expand(arg, long_names):
            expanded.append(arg)
            continue
        group = arg[1:]
        if any(letter not in takes_value for letter in group):
            expanded.append(arg)
            continue
        for index, letter in enumerate(group):
            if takes_value[letter] and index != len(group) - 1:
                raise ShortFlagGroupNotBoolError(arg)
        expanded.extend(f"-{letter}" for letter in group)
    return expanded


def validate_long_flag_args(args: Sequence[str], long_names: set[str]) -> None:
    """
    Reject long flag names written with a single dash (`-verbose`).

    Only tokens before the first `--` are checked.

    Raises:
        LongFlagFormatError: If a single-dash token names a long flag.
    """
    for arg in args:
        if arg == END_OF_OPTIONS:
            return
        if not arg.startswith("-") or arg.startswith("--") or len(arg) <= 2:
            continue
        name, _ = _split_inline_value(arg[1:])
        if len(name) > 1 and name in long_names:
            raise LongFlagFormatError(name)


class ParseContext:
    """Working state of one parse attempt over one node."""

    def __init__(
        self,
        node: CommandNode | None,
        instance: Any,
        chain: Sequence[CommandInstance],
        args: Sequence[str],
        visited: set[str],
        explicit: bool,
        allow_incomplete: bool,
        arg_position: ArgPosition,
    ) -> None:
        self.node = node
        self.visited = visited
        self.explicit = explicit
        self.allow_incomplete = allow_incomplete
        self.arg_position = arg_position

        specs, long_names = collect_flag_specs(chain)
        self.specs = specs
        self.expanded_args = expand_short_flag_groups(args, specs, long_names)
        validate_long_flag_args(self.expanded_args, long_names)
        self.spec_by_long: dict[str, FlagSpec] = {spec.name: spec for spec in specs}
        self.spec_by_short: dict[str, FlagSpec] = {
            spec.short: spec for spec in specs if spec.short
        }

        terminal = CommandInstance(node, instance) if node is not None else None
        self.positional_specs: list[PositionalSpec] = collect_positional_specs(terminal)
        self.positional_counts = [0] * len(self.positional_specs)
        self.positional_index = 0

    def _current_positional_is_variadic(self) -> bool:
        return (
            self.positional_index < len(self.positional_specs)
            and self.positional_specs[self.positional_index].variadic
        )

    def _bind(self, spec: FlagSpec | PositionalSpec, value: str, name: str) -> None:
        try:
            spec.bind(value, self.arg_position.advance())
        except (ValueError, TypeError) as error:
            raise InvalidValueError(name, value, str(error)) from error

    def parse_args(self) -> ParseResult | None:
        index = 0
        while index < len(self.expanded_args):
            result, consumed = self.parse_arg(index)
            if result is not None:
                return result
            index += consumed + 1
        return None

    def parse_arg(self, index: int) -> tuple[ParseResult | None, int]:
        arg = self.expanded_args[index]
        if arg == END_OF_OPTIONS:
            if self._current_positional_is_variadic():
                self.positional_index += 1
            return None, 0
        if looks_like_flag(arg):
            return None, self.parse_flag(index, arg)
        return self.parse_positional_or_subcommand(index, arg)

    def parse_flag(self, index: int, arg: str) -> int:
        if (
            self._current_positional_is_variadic()
            and self.positional_counts[self.positional_index] > 0
        ):
            self.positional_index += 1

        if arg.startswith("--"):
            name, value = _split_inline_value(arg[2:])
            spec = self.spec_by_long.get(name)
            if spec is None:
                raise FlagNotDefinedError(f"--{name}")
        else:
            name, value = _split_inline_value(arg[1:])
            spec = self.spec_by_short.get(name)
            if spec is None:
                raise FlagNotDefinedError(f"-{name}")

        self.visited.add(spec.name)
        if spec.short:
            self.visited.add(spec.short)

        if value is not None:
            self._bind(spec, value, f"--{spec.name}")
            return 0
        if not spec.takes_value:
            spec.set_true()
            self.arg_position.advance()
            return 0
        if spec.variadic:
            return self.parse_variadic_flag_value(spec, index)
        return self.parse_single_flag_value(spec, index)

    def parse_single_flag_value(self, spec: FlagSpec, index: int) -> int:
        if index + 1 >= len(self.expanded_args):
            if self.allow_incomplete:
                return 0
            raise FlagNeedsArgumentError(f"--{spec.name}")
        following = self.expanded_args[index + 1]
        if following == END_OF_OPTIONS or following.startswith("-"):
            raise FlagNeedsArgumentError(f"--{spec.name}")
        self._bind(spec, following, f"--{spec.name}")
        return 1

    def parse_variadic_flag_value(self, spec: FlagSpec, index: int) -> int:
        count = 0
        for following in self.expanded_args[index + 1 :]:
            if following == END_OF_OPTIONS or following.startswith("-"):
                break
            self._bind(spec, following, f"--{spec.name}")
            count += 1
        if count == 0:
            if self.allow_incomplete and index + 1 >= len(self.expanded_args):
                return 0
            raise FlagNeedsArgumentError(f"--{spec.name}")
        return count

    def parse_positional_or_subcommand(
        self, index: int, arg: str
    ) -> tuple[ParseResult | None, int]:
        if self.positional_index < len(self.positional_specs):
            spec = self.positional_specs[self.positional_index]
            self._bind(spec, arg, spec.display_name)
            self.positional_counts[self.positional_index] += 1
            if not spec.variadic:
                self.positional_index += 1
            return None, 0
        return self.try_subcommand_or_unknown(index, arg), 0

    def try_subcommand_or_unknown(self, index: int, arg: str) -> ParseResult:
        if self.node is not None:
            subcommand = self.node.get_subcommand(arg)
            if subcommand is not None:
                logger.debug("Handing off to subcommand '%s'", subcommand.name)
                return ParseResult(
                    remaining=list(self.expanded_args[index + 1 :]),
                    subcommand=subcommand,
                    positionals_complete=True,
                )
        if not self.explicit:
            raise UnknownCommandError(arg)
        logger.debug("Leftover tokens from '%s': %s", arg, self.expanded_args[index:])
        return ParseResult(remaining=list(self.expanded_args[index:]))

    def apply_positional_defaults(self, enforce_required: bool) -> None:
        for index, spec in enumerate(self.positional_specs):
            if self.positional_counts[index] == 0 and spec.default is not None:
                try:
                    spec.bind(spec.default)
                except (ValueError, TypeError) as error:
                    raise InvalidValueError(
                        spec.display_name, spec.default, str(error)
                    ) from error
                self.positional_counts[index] = 1
            if enforce_required and spec.required and self.positional_counts[index] == 0:
                raise MissingRequiredPositionalError(spec.display_name)

    def positionals_complete(self) -> bool:
        return all(
            count > 0 or not spec.required
            for spec, count in zip(self.positional_specs, self.positional_counts)
        )


def parse_command_args(
    node: CommandNode | None,
    instance: Any,
    chain: Sequence[CommandInstance],
    args: Sequence[str],
    visited: set[str] | None = None,
    *,
    explicit: bool,
    enforce_required: bool,
    allow_incomplete: bool,
    arg_position: ArgPosition | None = None,
) -> ParseResult:
    """
    Parse `args` against `node`, binding values into `instance` and the chain.

    Args:
        node (CommandNode | None): Node whose positionals and subcommands apply.
        instance (Any): Instance receiving the node's positional values.
        chain (Sequence[CommandInstance]): Root-to-node instances whose flags apply.
        args (Sequence[str]): Tokens to consume.
        visited (set[str] | None): Receives the long and short names of every flag seen.
        explicit (bool): Whether the user named the command. Unknown tokens are
            returned as leftovers in explicit mode and raise otherwise.
        enforce_required (bool): Whether missing required positionals raise.
        allow_incomplete (bool): Whether a value-taking flag may end the vector.
        arg_position (ArgPosition | None): Shared position counter across parses.

    Returns:
        ParseResult: Subcommand hand-off, leftovers, or completion status.

    Raises:
        CommandArgumentError: For any grammar violation.
    """
    context = ParseContext(
        node,
        instance,
        chain,
        args,
        visited if visited is not None else set(),
        explicit,
        allow_incomplete,
        arg_position if arg_position is not None else ArgPosition(),
    )
    result = context.parse_args()
    if result is not None:
        return result

    context.apply_positional_defaults(enforce_required)
    return ParseResult(positionals_complete=context.positionals_complete())
