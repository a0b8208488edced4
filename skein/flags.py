# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Registry of framework-reserved flags.

These flags are consumed by the application layer before any command sees the
argument vector. Help, completion and flag stripping all derive from `ALL_FLAGS`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

COMPLETE_TOKEN = "__complete"
RESET_TOKEN = "^"


@dataclass(frozen=True)
class FlagDef:
    """Describes a reserved flag for help, completion and detection."""

    long: str
    short: str = ""
    desc: str = ""
    placeholder: str = ""
    takes_value: bool = False
    root_only: bool = False
    hidden: bool = False

    @property
    def dest(self) -> str:
        return self.long.replace("-", "_")


ALL_FLAGS: tuple[FlagDef, ...] = (
    FlagDef(long="help", short="h", desc="Show help"),
    FlagDef(long="verbose", desc="Enable debug logging"),
    FlagDef(
        long="completion",
        desc="Print the shell completion script",
        placeholder="SHELL",
        takes_value=True,
        root_only=True,
    ),
)


def find_flag(arg: str) -> FlagDef | None:
    """Return the reserved flag matching `arg` (`--long`, `--long=value` or `-s`)."""
    if arg.startswith("--"):
        name = arg[2:].split("=", 1)[0]
        for flag in ALL_FLAGS:
            if flag.long == name:
                return flag
        return None
    if arg.startswith("-") and len(arg) == 2:
        for flag in ALL_FLAGS:
            if flag.short and flag.short == arg[1:]:
                return flag
    return None


def global_flags() -> list[str]:
    return [f"--{flag.long}" for flag in ALL_FLAGS if not flag.root_only and not flag.hidden]


def root_only_flags() -> list[str]:
    return [f"--{flag.long}" for flag in ALL_FLAGS if flag.root_only and not flag.hidden]


def visible_flags() -> list[FlagDef]:
    return [flag for flag in ALL_FLAGS if not flag.hidden]


def extract_global_flags(args: list[str]) -> tuple[list[str], dict[str, Any]]:
    """
    Split reserved flags out of an argument vector.

    Returns the arguments with every reserved flag (and the value of value-taking
    ones) removed, plus a mapping of flag dest to its value. Boolean flags map to
    True. A value-taking flag at the end of the vector maps to an empty string.
    """
    remaining: list[str] = []
    found: dict[str, Any] = {}
    skip_next = False
    for index, arg in enumerate(args):
        if skip_next:
            skip_next = False
            continue
        flag = find_flag(arg)
        if flag is None:
            remaining.append(arg)
            continue
        if flag.takes_value:
            if "=" in arg:
                found[flag.dest] = arg.split("=", 1)[1]
            elif index + 1 < len(args):
                found[flag.dest] = args[index + 1]
                skip_next = True
            else:
                found[flag.dest] = ""
        elif "=" not in arg:
            found[flag.dest] = True
    return remaining, found


def strip_global_flags(args: list[str]) -> list[str]:
    """Remove reserved flags and their values from `args`."""
    remaining, _ = extract_global_flags(args)
    return remaining
