# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Rich help rendering for Skein commands.

Renders a usage line, description, positionals, flags (own and inherited from
ancestor commands), subcommands and the reserved global flags for a node, plus
a listing of root commands when several are registered.
"""
from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape

from skein.console import console as default_console
from skein.flags import FlagDef, RESET_TOKEN, visible_flags
from skein.node import CommandNode, new_chain
from skein.parser.spec_collector import (
    FlagSpec,
    PositionalSpec,
    collect_positional_specs,
    iter_flag_specs,
)

COLUMN_WIDTH = 30


def _choice_text(enum: Sequence[str]) -> str:
    return "{" + ",".join(enum) + "}"


def flag_text(spec: FlagSpec) -> str:
    names = f"-{spec.short}, --{spec.name}" if spec.short else f"--{spec.name}"
    if not spec.takes_value:
        return names
    if spec.placeholder:
        value = spec.placeholder
    elif spec.enum:
        value = _choice_text(spec.enum)
    else:
        value = spec.name.replace("-", "_").upper()
    if spec.variadic:
        value = f"{value} ..."
    return f"{names} {value}"


def positional_text(spec: PositionalSpec) -> str:
    text = spec.placeholder or spec.display_name
    if spec.enum and not spec.placeholder:
        text = _choice_text(spec.enum)
    if spec.variadic:
        text = f"{text}..."
    if not spec.required:
        text = f"[{text}]"
    return text


def reserved_flag_text(flag: FlagDef) -> str:
    names = f"-{flag.short}, --{flag.long}" if flag.short else f"--{flag.long}"
    if flag.takes_value:
        names = f"{names} {flag.placeholder or 'VALUE'}"
    return names


def get_usage(node: CommandNode, program: str = "", multi_root: bool = False) -> str:
    """Plain usage line for a node, e.g. `app deploy [--dry-run] target`."""
    chain = new_chain(node)
    if multi_root:
        parts = [program, *node.path] if program else list(node.path)
    else:
        parts = [program or node.path[0], *node.path[1:]]
    for spec in iter_flag_specs(chain):
        text = flag_text(spec)
        parts.append(text if spec.required else f"[{text.split(', ')[-1]}]")
    parts.extend(positional_text(spec) for spec in collect_positional_specs(chain[-1]))
    if node.subcommands:
        parts.append("<command>")
    return " ".join(parts)


def _print_row(console: Console, left: str, right: str, style: str = "") -> None:
    label = f"[{style}]{escape(left)}[/{style}]" if style else escape(left)
    padding = " " * max(COLUMN_WIDTH - len(left), 1)
    if right and len(left) > COLUMN_WIDTH:
        console.print(f"  {label}\n{'':<{COLUMN_WIDTH + 3}}{escape(right)}")
    else:
        console.print(f"  {label}{padding} {escape(right)}")


def render_help(
    node: CommandNode,
    program: str = "",
    console: Console | None = None,
    multi_root: bool = False,
) -> None:
    """Print formatted help for `node`."""
    console = console or default_console
    chain = new_chain(node)
    console.print(
        f"[bold]usage: {escape(get_usage(node, program, multi_root))}[/bold]\n",
        highlight=False,
    )
    if node.description:
        console.print(f"{escape(node.description)}\n")

    positionals = collect_positional_specs(chain[-1])
    if positionals:
        console.print("[bold]positional:[/bold]")
        for positional in positionals:
            description = positional.desc
            if positional.default is not None:
                description = f"{description} (default: {positional.default})".strip()
            _print_row(console, positional_text(positional), description, "skein.positional")

    own: list[FlagSpec] = []
    inherited: list[FlagSpec] = []
    for instance in chain:
        target = own if instance.node is node else inherited
        target.extend(iter_flag_specs([instance]))

    if own:
        console.print("[bold]options:[/bold]")
        for spec in own:
            _print_row(console, flag_text(spec), _flag_description(spec), "skein.flag")
    if inherited:
        console.print("[bold]inherited options:[/bold]")
        for spec in inherited:
            _print_row(console, flag_text(spec), _flag_description(spec), "skein.flag")

    if node.subcommands:
        console.print("[bold]commands:[/bold]")
        for name, subcommand in node.subcommands.items():
            _print_row(console, name, subcommand.description, "skein.command")

    console.print("[bold]global options:[/bold]")
    for flag in visible_flags():
        if flag.root_only and node.parent is not None:
            continue
        _print_row(console, reserved_flag_text(flag), flag.desc, "skein.muted")


def _flag_description(spec: FlagSpec) -> str:
    details = []
    if spec.required:
        details.append("required")
    if spec.default is not None:
        details.append(f"default: {spec.default}")
    if spec.env:
        details.append(f"env: {spec.env}")
    suffix = f" ({', '.join(details)})" if details else ""
    return f"{spec.desc}{suffix}".strip()


def render_root_listing(
    roots: Sequence[CommandNode],
    program: str = "",
    description: str = "",
    console: Console | None = None,
) -> None:
    """Print the list of root commands."""
    console = console or default_console
    usage = f"{program or '<program>'} <command> [args...] [{RESET_TOKEN} <command> ...]"
    console.print(
        f"[bold]usage: {escape(usage)}[/bold]\n",
        highlight=False,
    )
    if description:
        console.print(f"{description}\n")
    console.print("[bold]commands:[/bold]")
    for root in roots:
        _print_row(console, root.name, root.description, "skein.command")
    console.print("[bold]global options:[/bold]")
    for flag in visible_flags():
        _print_row(console, reserved_flag_text(flag), flag.desc, "skein.muted")
