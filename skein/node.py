# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the command tree used by the Skein parser, completion and execution.

A `CommandNode` is built once per registered target and never mutated by
parsing. Targets may be:

- a dataclass type with a `run` method (fields become flags and positionals)
- a preconfigured dataclass instance (its field values are the starting state)
- a plain sync or async function taking no arguments
- a `Group`, a named container of other targets

The `@command` decorator overrides the derived name and description and attaches
subcommands to a dataclass target.
"""
from __future__ import annotations

import copy
import dataclasses
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from skein.binders import zero_instance
from skein.exceptions import InvalidCommandError
from skein.logger import logger
from skein.utils import to_kebab_case

COMMAND_META_ATTR = "__skein_command__"


@dataclass(frozen=True)
class CommandMeta:
    """Metadata attached by `@command`."""

    name: str | None = None
    description: str | None = None
    subcommands: tuple[Any, ...] = ()


def command(
    name: str | None = None,
    *,
    description: str | None = None,
    subcommands: Sequence[Any] = (),
) -> Callable[[Any], Any]:
    """Decorate a dataclass or function to set its command name, description and subcommands."""

    def decorator(target: Any) -> Any:
        setattr(
            target,
            COMMAND_META_ATTR,
            CommandMeta(name=name, description=description, subcommands=tuple(subcommands)),
        )
        return target

    return decorator


class Group:
    """A named container of commands with no fields of its own."""

    def __init__(self, name: str, *members: Any, description: str = "") -> None:
        if not name:
            raise InvalidCommandError("group name cannot be empty")
        self.name = name
        self.members = members
        self.description = description

    def __repr__(self) -> str:
        return f"Group(name={self.name!r}, members={len(self.members)})"


@dataclass(eq=False)
class CommandNode:
    """
    One command or subcommand in the tree.

    Attributes:
        name (str): Name typed on the command line.
        description (str): One-line description for help and listings.
        command_type (type | None): Dataclass describing the fields, if any.
        value (Any): Preconfigured instance used as the starting state.
        func (Callable | None): Function target, when the command is a function.
        subcommands (dict[str, CommandNode]): Children by name.
        parent (CommandNode | None): Read-only back reference.
        source (str): Module the target was registered from.
        is_group (bool): Whether the node only dispatches to its members.
    """

    name: str
    description: str = ""
    command_type: type | None = None
    value: Any = None
    func: Callable[..., Any] | None = None
    subcommands: dict[str, CommandNode] = field(default_factory=dict, repr=False)
    parent: CommandNode | None = field(default=None, repr=False)
    source: str = ""
    is_group: bool = False

    def new_instance(self) -> Any:
        """Fresh instance to parse into; the registered value is never mutated."""
        if self.value is not None:
            return copy.deepcopy(self.value)
        if self.command_type is None:
            return None
        return zero_instance(self.command_type)

    @property
    def path(self) -> list[str]:
        return [node.name for node in node_chain(self)]

    @property
    def runnable(self) -> bool:
        if self.func is not None:
            return True
        return self.command_type is not None and callable(
            getattr(self.command_type, "run", None)
        )

    def get_subcommand(self, name: str) -> CommandNode | None:
        return self.subcommands.get(name)


@dataclass
class CommandInstance:
    """A node paired with the instance being populated for it."""

    node: CommandNode
    value: Any


def node_chain(node: CommandNode | None) -> list[CommandNode]:
    """Return the nodes from the root down to `node`."""
    chain: list[CommandNode] = []
    current = node
    while current is not None:
        chain.append(current)
        current = current.parent
    chain.reverse()
    return chain


def new_chain(node: CommandNode) -> list[CommandInstance]:
    return [CommandInstance(current, current.new_instance()) for current in node_chain(node)]


def _first_doc_line(target: Any) -> str:
    doc = inspect.getdoc(target) or ""
    if dataclasses.is_dataclass(target) and isinstance(target, type):
        # dataclasses synthesize a signature docstring when none is written
        if doc.startswith(f"{target.__name__}("):
            return ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


def _attach(node: CommandNode, members: Sequence[Any], source: str | None) -> None:
    for member in members:
        child = build_node(member, parent=node, source=source)
        if child.name in node.subcommands:
            raise InvalidCommandError(
                f"duplicate subcommand '{child.name}' under '{node.name}'"
            )
        node.subcommands[child.name] = child


def build_node(
    target: Any,
    parent: CommandNode | None = None,
    source: str | None = None,
) -> CommandNode:
    """
    Build a `CommandNode` (and its subtree) from a target.

    Raises:
        InvalidCommandError: If the target is not a supported command shape.
    """
    if isinstance(target, CommandNode):
        return target

    if isinstance(target, Group):
        node = CommandNode(
            name=target.name,
            description=target.description,
            parent=parent,
            source=source or "",
            is_group=True,
        )
        _attach(node, target.members, source)
        logger.debug("Built group node '%s' with %d members", node.name, len(node.subcommands))
        return node

    if dataclasses.is_dataclass(target):
        command_type = target if isinstance(target, type) else type(target)
        value = None if isinstance(target, type) else target
        meta: CommandMeta = getattr(command_type, COMMAND_META_ATTR, CommandMeta())
        node = CommandNode(
            name=meta.name or to_kebab_case(command_type.__name__),
            description=(
                meta.description
                if meta.description is not None
                else _first_doc_line(command_type)
            ),
            command_type=command_type,
            value=value,
            parent=parent,
            source=source or command_type.__module__,
        )
        _attach(node, meta.subcommands, source)
        if not node.runnable and not node.subcommands:
            raise InvalidCommandError(
                f"{command_type.__name__} needs a run() method or subcommands"
            )
        logger.debug("Built command node '%s' from %s", node.name, command_type.__name__)
        return node

    if inspect.isfunction(target) or inspect.ismethod(target):
        signature = inspect.signature(target)
        required = [
            param
            for param in signature.parameters.values()
            if param.default is inspect.Parameter.empty
            and param.kind
            not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if required:
            raise InvalidCommandError(
                f"function command '{target.__name__}' must not require arguments"
            )
        meta = getattr(target, COMMAND_META_ATTR, CommandMeta())
        if meta.subcommands:
            raise InvalidCommandError(
                f"function command '{target.__name__}' cannot have subcommands"
            )
        node = CommandNode(
            name=meta.name or to_kebab_case(target.__name__),
            description=(
                meta.description
                if meta.description is not None
                else _first_doc_line(target)
            ),
            func=target,
            parent=parent,
            source=source or target.__module__,
        )
        logger.debug("Built function node '%s'", node.name)
        return node

    raise InvalidCommandError(f"unsupported command target: {target!r}")
