# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Collects flag and positional specs for an active command chain.

Flags are collected across every instance of the chain (ancestors first), so a
subcommand sees its parents' flags. Positionals only come from the terminal
instance. Embedded records are flattened into their owner in declaration order,
and each field's options pass through the owning command's `tag_options`
override before its FlagSpec or PositionalSpec is built.

Collection has no side effects and is recomputed for every parse attempt, so
runtime enum overrides always reflect the instance state at that moment.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from skein.binders import bind_value, is_bool, is_list
from skein.exceptions import FlagAlreadyDefinedError
from skein.node import CommandInstance
from skein.schema import FieldKind, TagOptions, describe_fields, resolve_options


@dataclass
class FlagSpec:
    """A flag visible to the parser, bound to the field that receives its values."""

    name: str
    short: str
    takes_value: bool
    variadic: bool
    enum: tuple[str, ...]
    required: bool
    default: str | None
    env: str
    desc: str
    placeholder: str
    owner: Any
    attr: str
    annotation: Any

    @property
    def display(self) -> str:
        if self.short:
            return f"--{self.name}, -{self.short}"
        return f"--{self.name}"

    def bind(self, value: str, position: int | None = None) -> None:
        bind_value(self.owner, self.attr, self.annotation, value, position)

    def set_true(self) -> None:
        setattr(self.owner, self.attr, True)

    @property
    def current(self) -> Any:
        return getattr(self.owner, self.attr)


@dataclass
class PositionalSpec:
    """A positional slot of the terminal command, in declaration order."""

    attr: str
    display_name: str
    variadic: bool
    required: bool
    enum: tuple[str, ...]
    default: str | None
    placeholder: str
    desc: str
    owner: Any
    annotation: Any

    def bind(self, value: str, position: int | None = None) -> None:
        bind_value(self.owner, self.attr, self.annotation, value, position)

    @property
    def current(self) -> Any:
        return getattr(self.owner, self.attr)


def _walk_fields(
    instance: Any, owner: Any
) -> Iterator[tuple[Any, str, Any, TagOptions]]:
    """Yield (owner, attr, annotation, options) for every field, flattening embeds."""
    for descriptor in describe_fields(type(owner)):
        if descriptor.embedded:
            yield from _walk_fields(instance, getattr(owner, descriptor.attr))
            continue
        options = resolve_options(instance, descriptor)
        yield owner, descriptor.attr, descriptor.annotation, options


def _flag_spec(owner: Any, attr: str, annotation: Any, options: TagOptions) -> FlagSpec:
    return FlagSpec(
        name=options.name,
        short=options.short,
        takes_value=not is_bool(annotation),
        variadic=is_list(annotation),
        enum=tuple(options.enum),
        required=options.required,
        default=options.default,
        env=options.env,
        desc=options.desc,
        placeholder=options.placeholder,
        owner=owner,
        attr=attr,
        annotation=annotation,
    )


def iter_flag_specs(chain: Sequence[CommandInstance]) -> Iterator[FlagSpec]:
    """Yield every flag spec of the chain in order, without duplicate checks."""
    for current in chain:
        if current.value is None:
            continue
        for owner, attr, annotation, options in _walk_fields(current.value, current.value):
            if options.kind is FieldKind.FLAG:
                yield _flag_spec(owner, attr, annotation, options)


def _register_name(spec: FlagSpec, used_names: set[str]) -> None:
    if spec.name in used_names:
        raise FlagAlreadyDefinedError(spec.name)
    used_names.add(spec.name)
    if spec.short:
        if spec.short in used_names:
            raise FlagAlreadyDefinedError(spec.short)
        used_names.add(spec.short)


def collect_flag_specs(
    chain: Sequence[CommandInstance],
) -> tuple[list[FlagSpec], set[str]]:
    """
    Collect the flag specs of the whole chain.

    Returns:
        tuple[list[FlagSpec], set[str]]: The specs in declaration order and the set
        of long names.

    Raises:
        FlagAlreadyDefinedError: If a long or short name is declared twice.
        TagOptionsError: If an override capability fails.
    """
    specs: list[FlagSpec] = []
    used_names: set[str] = set()
    long_names: set[str] = set()
    for spec in iter_flag_specs(chain):
        _register_name(spec, used_names)
        long_names.add(spec.name)
        specs.append(spec)
    return specs, long_names


def collect_positional_specs(instance: CommandInstance | None) -> list[PositionalSpec]:
    """Collect the positional specs of the terminal instance."""
    if instance is None or instance.value is None:
        return []
    specs: list[PositionalSpec] = []
    for owner, attr, annotation, options in _walk_fields(instance.value, instance.value):
        if options.kind is not FieldKind.POSITIONAL:
            continue
        specs.append(
            PositionalSpec(
                attr=attr,
                display_name=options.name or attr,
                variadic=is_list(annotation),
                required=options.required,
                enum=tuple(options.enum),
                default=options.default,
                placeholder=options.placeholder,
                desc=options.desc,
                owner=owner,
                annotation=annotation,
            )
        )
    return specs


def completion_flag_specs(chain: Sequence[CommandInstance]) -> dict[str, FlagSpec]:
    """Map `--name` and `-s` to their spec; the first declaration of a name wins."""
    by_flag: dict[str, FlagSpec] = {}
    for spec in iter_flag_specs(chain):
        by_flag.setdefault(f"--{spec.name}", spec)
        if spec.short:
            by_flag.setdefault(f"-{spec.short}", spec)
    return by_flag


def enum_values_by_flag(chain: Sequence[CommandInstance]) -> dict[str, tuple[str, ...]]:
    """Map `--name` and `-s` to the enum of flags that declare one."""
    return {
        flag: spec.enum
        for flag, spec in completion_flag_specs(chain).items()
        if spec.enum
    }
