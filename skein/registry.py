# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Owned registry of root commands.

A `CommandRegistry` is created by the application and threaded explicitly to the
parser, completion and help layers. Registration builds the command tree once;
`resolve()` returns the immutable root set in registration order.
"""
from __future__ import annotations

from typing import Any

from skein.exceptions import CommandAlreadyExistsError, DeregistrationError
from skein.logger import logger
from skein.node import CommandNode, build_node


class CommandRegistry:
    """Register, deregister and resolve root commands."""

    def __init__(self) -> None:
        self._roots: list[CommandNode] = []

    def __len__(self) -> int:
        return len(self._roots)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> CommandNode | None:
        for root in self._roots:
            if root.name.lower() == name.lower():
                return root
        return None

    def register(self, *targets: Any, source: str | None = None) -> list[CommandNode]:
        """
        Build and register one root per target.

        Raises:
            CommandAlreadyExistsError: If a root with the same name (case-insensitive)
                is already registered.
        """
        nodes = [build_node(target, source=source) for target in targets]
        seen: set[str] = set()
        for node in nodes:
            key = node.name.lower()
            if key in seen or self.get(node.name) is not None:
                raise CommandAlreadyExistsError(node.name)
            seen.add(key)
        self._roots.extend(nodes)
        logger.debug("Registered roots: %s", [node.name for node in nodes])
        return nodes

    def deregister(self, source: str) -> list[CommandNode]:
        """
        Remove every root registered from `source`.

        Raises:
            DeregistrationError: If no root came from that source.
        """
        removed = [root for root in self._roots if root.source == source]
        if not removed:
            raise DeregistrationError(source)
        self._roots = [root for root in self._roots if root.source != source]
        logger.debug("Deregistered %d roots from '%s'", len(removed), source)
        return removed

    def resolve(self) -> tuple[CommandNode, ...]:
        return tuple(self._roots)
