"""
Skein CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .grammar import (
    ArgPosition,
    ParseContext,
    ParseResult,
    expand_short_flag_groups,
    parse_command_args,
    validate_long_flag_args,
)
from .spec_collector import (
    FlagSpec,
    PositionalSpec,
    collect_flag_specs,
    collect_positional_specs,
    completion_flag_specs,
    enum_values_by_flag,
)
from .tokenizer import TokenStream, tokenize_command_line

__all__ = [
    "ArgPosition",
    "FlagSpec",
    "ParseContext",
    "ParseResult",
    "PositionalSpec",
    "TokenStream",
    "collect_flag_specs",
    "collect_positional_specs",
    "completion_flag_specs",
    "enum_values_by_flag",
    "expand_short_flag_groups",
    "parse_command_args",
    "tokenize_command_line",
    "validate_long_flag_args",
]
