# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Strict execution of parsed command chains.

`resolve_invocation` runs the strict parse for one command and follows
subcommand hand-offs until it reaches the terminal node. Then:

- unvisited flags take their environment value, else their declared default
- required flags that are still unset raise `MissingRequiredFlagError`
- values outside a declared enum raise `InvalidChoiceError`

`Executor` repeats this over the whole argument vector. With a single root,
the root is invoked again for every leftover run of tokens. With several
roots, each run of tokens must start with a root name. The reset token `^`
between invocations is skipped in both modes.

Only the terminal command runs. A `run(self, parents)` method receives the
ancestor instances in root-to-parent order.
"""
from __future__ import annotations

import inspect
import os
from dataclasses import dataclass, field
from typing import Any, Sequence

from skein.binders import enum_text
from skein.exceptions import (
    InvalidChoiceError,
    InvalidValueError,
    MissingRequiredFlagError,
    UnknownCommandError,
)
from skein.flags import RESET_TOKEN
from skein.logger import logger
from skein.node import CommandInstance, CommandNode
from skein.parser.grammar import ArgPosition, parse_command_args
from skein.parser.spec_collector import (
    FlagSpec,
    collect_flag_specs,
    collect_positional_specs,
)
from skein.schema import Interleaved
from skein.utils import ensure_async


@dataclass
class Invocation:
    """A fully parsed command chain ready to run."""

    chain: list[CommandInstance]
    remaining: list[str] = field(default_factory=list)
    specs: list[FlagSpec] = field(default_factory=list)

    @property
    def terminal(self) -> CommandInstance:
        return self.chain[-1]

    @property
    def runnable(self) -> bool:
        return self.terminal.node.runnable

    @property
    def parents(self) -> list[Any]:
        return [instance.value for instance in self.chain[:-1] if instance.value is not None]


def _is_flag_visited(spec: FlagSpec, visited: set[str]) -> bool:
    return spec.name in visited or (bool(spec.short) and spec.short in visited)


def apply_defaults_and_env(specs: Sequence[FlagSpec], visited: set[str]) -> set[str]:
    """
    Fill unvisited flags from their environment variable, else their default.

    Returns:
        set[str]: Long names of the flags that received a value.
    """
    applied: set[str] = set()
    for spec in specs:
        if _is_flag_visited(spec, visited):
            continue
        if spec.env:
            value = os.environ.get(spec.env, "")
            if value:
                try:
                    spec.bind(value)
                except (ValueError, TypeError) as error:
                    raise InvalidValueError(
                        f"env {spec.env}", value, str(error)
                    ) from error
                applied.add(spec.name)
                logger.debug("Set --%s from env %s", spec.name, spec.env)
                continue
        if spec.default is not None:
            try:
                spec.bind(spec.default)
            except (ValueError, TypeError) as error:
                raise InvalidValueError(f"--{spec.name}", spec.default, str(error)) from error
            applied.add(spec.name)
    return applied


def check_required_flags(
    specs: Sequence[FlagSpec], visited: set[str], applied: set[str]
) -> None:
    for spec in specs:
        if not spec.required:
            continue
        if _is_flag_visited(spec, visited) or spec.name in applied:
            continue
        raise MissingRequiredFlagError(spec.display)


def _values(current: Any) -> list[str]:
    if current is None:
        return []
    if isinstance(current, dict):
        return [enum_text(key) for key in current]
    if isinstance(current, (list, tuple)):
        return [
            enum_text(item.value if isinstance(item, Interleaved) else item)
            for item in current
        ]
    return [enum_text(current)]


def check_choices(
    chain: Sequence[CommandInstance],
    specs: Sequence[FlagSpec],
    visited: set[str],
    applied: set[str],
) -> None:
    """Validate flag and positional values against their declared enums."""
    for spec in specs:
        if not spec.enum:
            continue
        if not (_is_flag_visited(spec, visited) or spec.name in applied):
            continue
        for value in _values(spec.current):
            if value not in spec.enum:
                raise InvalidChoiceError(f"--{spec.name}", value, spec.enum)

    for positional in collect_positional_specs(chain[-1]):
        if not positional.enum:
            continue
        for value in _values(positional.current):
            if value and value not in positional.enum:
                raise InvalidChoiceError(positional.display_name, value, positional.enum)


def resolve_invocation(
    node: CommandNode,
    args: Sequence[str],
    parents: Sequence[CommandInstance] = (),
    visited: set[str] | None = None,
    explicit: bool = False,
    arg_position: ArgPosition | None = None,
) -> Invocation:
    """
    Strictly parse `args` starting at `node` and follow subcommands to the terminal.

    Raises:
        CommandArgumentError: For any grammar, required-value or choice violation.
    """
    visited = visited if visited is not None else set()
    arg_position = arg_position or ArgPosition()

    if node.is_group:
        chain = [*parents, CommandInstance(node, None)]
        if args:
            for name, subcommand in node.subcommands.items():
                if name.lower() == args[0].lower():
                    return resolve_invocation(
                        subcommand, args[1:], chain, visited, True, arg_position
                    )
        logger.debug("Group '%s' matched no subcommand in %s", node.name, list(args))
        return Invocation(chain=chain, remaining=list(args))

    instance = node.new_instance()
    chain = [*parents, CommandInstance(node, instance)]
    result = parse_command_args(
        node,
        instance,
        chain,
        args,
        visited,
        explicit=explicit,
        enforce_required=True,
        allow_incomplete=False,
        arg_position=arg_position,
    )
    if result.subcommand is not None:
        return resolve_invocation(
            result.subcommand, result.remaining, chain, visited, True, arg_position
        )

    specs, _ = collect_flag_specs(chain)
    applied = apply_defaults_and_env(specs, visited)
    check_required_flags(specs, visited, applied)
    check_choices(chain, specs, visited, applied)
    logger.debug(
        "Resolved %s with leftovers %s",
        " ".join(node.path),
        result.remaining,
    )
    return Invocation(chain=chain, remaining=list(result.remaining), specs=specs)


async def run_invocation(invocation: Invocation) -> Any:
    """Run the terminal command of an invocation."""
    terminal = invocation.terminal
    node = terminal.node
    if node.func is not None:
        return await ensure_async(node.func)()

    run = getattr(terminal.value, "run", None)
    if run is None:
        logger.debug("Command '%s' has nothing to run", node.name)
        return None
    kwargs: dict[str, Any] = {}
    if "parents" in inspect.signature(run).parameters:
        kwargs["parents"] = invocation.parents
    logger.debug("Running '%s'", " ".join(node.path))
    return await ensure_async(run)(**kwargs)


class Executor:
    """Runs every invocation named by an argument vector, in order."""

    def __init__(self, roots: Sequence[CommandNode]) -> None:
        self.roots = list(roots)

    def find_root(self, name: str) -> CommandNode | None:
        for root in self.roots:
            if root.name.lower() == name.lower():
                return root
        return None

    async def run(self, args: Sequence[str]) -> list[Invocation]:
        if len(self.roots) == 1:
            return await self.run_default(list(args))
        return await self.run_multi_root(list(args))

    async def _invoke(self, invocation: Invocation, results: list[Invocation]) -> None:
        results.append(invocation)
        if invocation.runnable:
            await run_invocation(invocation)

    async def run_default(self, args: list[str]) -> list[Invocation]:
        root = self.roots[0]
        results: list[Invocation] = []
        if not args:
            await self._invoke(resolve_invocation(root, []), results)
            return results

        remaining = args
        while remaining:
            if remaining[0] == RESET_TOKEN:
                remaining = remaining[1:]
                continue
            invocation = resolve_invocation(root, remaining)
            if len(invocation.remaining) == len(remaining):
                raise UnknownCommandError(remaining[0])
            await self._invoke(invocation, results)
            remaining = invocation.remaining
        return results

    async def run_multi_root(self, args: list[str]) -> list[Invocation]:
        results: list[Invocation] = []
        remaining = args
        while remaining:
            if remaining[0] == RESET_TOKEN:
                remaining = remaining[1:]
                continue
            root = self.find_root(remaining[0])
            if root is None:
                raise UnknownCommandError(remaining[0])
            invocation = resolve_invocation(root, remaining[1:], explicit=True)
            await self._invoke(invocation, results)
            remaining = invocation.remaining
        return results
