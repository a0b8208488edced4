"""
Skein CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import logging

from .app import Skein
from .node import CommandNode, Group, command
from .registry import CommandRegistry
from .schema import Interleaved, TagOptions, embed, flag, positional

logger = logging.getLogger("skein")


__all__ = [
    "CommandNode",
    "CommandRegistry",
    "Group",
    "Interleaved",
    "Skein",
    "TagOptions",
    "command",
    "embed",
    "flag",
    "positional",
]
