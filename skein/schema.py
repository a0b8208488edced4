# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Field-level schema description for Skein command records.

Commands are plain `dataclasses`. Every field is either a flag, a positional, or
an embedded record whose fields are flattened into the owning command:

    @dataclass
    class Deploy:
        target: str = positional(desc="Where to deploy", enum="dev|prod")
        dry_run: bool = flag(short="n", desc="Only print the plan")
        tags: list[str] = flag(desc="Extra tags")
        common: CommonFlags = embed()

        def run(self) -> None: ...

Fields declared without a helper are flags named after the field. Fields whose
name starts with an underscore are ignored.

Key Features:
- `TagOptions` holds the per-field options in their command-line string form.
- `flag()`, `positional()` and `embed()` return keyword-only dataclass fields.
- `TagOptionsProvider` lets a command instance adjust options at runtime,
  for example narrowing an enum based on values already bound.
- `Interleaved[T]` records the global argument position of each bound value.
"""
from __future__ import annotations

import dataclasses
import functools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, Sequence, TypeVar, get_type_hints
from typing import runtime_checkable

from skein.exceptions import InvalidCommandError, TagOptionsError
from skein.utils import to_kebab_case

T = TypeVar("T")

SKEIN_METADATA = "skein"


class FieldKind(Enum):
    """Kinds of command fields."""

    FLAG = "flag"
    POSITIONAL = "positional"


@dataclass(frozen=True)
class TagOptions:
    """
    Options describing one command field.

    `default` is kept in string form and bound exactly as if it had been typed
    on the command line. `enum` is the closed set of allowed strings.
    """

    kind: FieldKind = FieldKind.FLAG
    name: str = ""
    short: str = ""
    desc: str = ""
    env: str = ""
    default: str | None = None
    enum: tuple[str, ...] = ()
    placeholder: str = ""
    required: bool = False

    def replace(self, **changes: Any) -> TagOptions:
        if "enum" in changes:
            changes["enum"] = normalize_enum(changes["enum"])
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class Interleaved(Generic[T]):
    """A bound value plus its position among all values bound in one parse."""

    value: T
    position: int


@runtime_checkable
class TagOptionsProvider(Protocol):
    """Capability for command records that adjust their field options at runtime."""

    def tag_options(self, field_name: str, options: TagOptions) -> TagOptions: ...


class _Embedded:
    def __repr__(self) -> str:
        return "<embedded>"


EMBEDDED = _Embedded()


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a command record, in declaration order."""

    attr: str
    annotation: Any
    options: TagOptions | None

    @property
    def embedded(self) -> bool:
        return self.options is None


def normalize_enum(enum: str | Sequence[str] | type[Enum] | None) -> tuple[str, ...]:
    if not enum:
        return ()
    if isinstance(enum, str):
        return tuple(value for value in enum.split("|") if value)
    if isinstance(enum, type) and issubclass(enum, Enum):
        return tuple(member.name for member in enum)
    return tuple(str(value) for value in enum)


def _field(
    options: TagOptions | _Embedded,
    value: Any,
    value_factory: Any,
) -> Any:
    metadata = {SKEIN_METADATA: options}
    if value is not dataclasses.MISSING:
        return dataclasses.field(default=value, kw_only=True, metadata=metadata)
    if value_factory is not dataclasses.MISSING:
        return dataclasses.field(
            default_factory=value_factory, kw_only=True, metadata=metadata
        )
    return dataclasses.field(kw_only=True, metadata=metadata)


def flag(
    *,
    name: str = "",
    short: str = "",
    desc: str = "",
    env: str = "",
    default: str | None = None,
    enum: str | Sequence[str] | type[Enum] | None = None,
    placeholder: str = "",
    required: bool = False,
    value: Any = dataclasses.MISSING,
    value_factory: Any = dataclasses.MISSING,
) -> Any:
    """
    Declare a flag field.

    Args:
        name (str): Long name. Defaults to the kebab-cased field name.
        short (str): Single-letter alias.
        desc (str): Help text.
        env (str): Environment variable consulted when the flag is not passed.
        default (str | None): Default in command-line string form.
        enum (str | Sequence[str] | type[Enum] | None): Allowed values,
            either `"a|b|c"`, a sequence, or an Enum class (member names).
        placeholder (str): Value placeholder shown in help.
        required (bool): Whether the flag must be given, set from env, or defaulted.
        value / value_factory: Python-level initial value of the dataclass field.
            Fields without one start from the zero value of their type.
    """
    if short and len(short) != 1:
        raise InvalidCommandError(f"short flag must be a single character: {short!r}")
    options = TagOptions(
        kind=FieldKind.FLAG,
        name=name,
        short=short,
        desc=desc,
        env=env,
        default=default,
        enum=normalize_enum(enum),
        placeholder=placeholder,
        required=required,
    )
    return _field(options, value, value_factory)


def positional(
    *,
    name: str = "",
    desc: str = "",
    default: str | None = None,
    enum: str | Sequence[str] | type[Enum] | None = None,
    placeholder: str = "",
    required: bool = False,
    value: Any = dataclasses.MISSING,
    value_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a positional field. Declaration order is the positional order."""
    options = TagOptions(
        kind=FieldKind.POSITIONAL,
        name=name,
        desc=desc,
        default=default,
        enum=normalize_enum(enum),
        placeholder=placeholder,
        required=required,
    )
    return _field(options, value, value_factory)


def embed() -> Any:
    """Declare a field holding a record whose fields are flattened into the command."""
    return _field(EMBEDDED, dataclasses.MISSING, dataclasses.MISSING)


@functools.lru_cache(maxsize=None)
def describe_fields(cls: type) -> tuple[FieldDescriptor, ...]:
    """
    Return the ordered field descriptors of a command record type.

    Flag names default to the kebab-cased field name. Positional names stay
    empty unless given explicitly; the field name is used for display.
    """
    if not dataclasses.is_dataclass(cls):
        raise InvalidCommandError(f"{cls!r} is not a dataclass")
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError) as error:
        raise InvalidCommandError(
            f"cannot resolve annotations of {cls.__name__}: {error}"
        ) from error

    descriptors: list[FieldDescriptor] = []
    for field in dataclasses.fields(cls):
        if field.name.startswith("_"):
            continue
        annotation = hints.get(field.name, field.type)
        options = field.metadata.get(SKEIN_METADATA)
        if options is EMBEDDED:
            if not dataclasses.is_dataclass(annotation):
                raise InvalidCommandError(
                    f"embedded field '{field.name}' of {cls.__name__} must be a dataclass"
                )
            descriptors.append(FieldDescriptor(field.name, annotation, None))
            continue
        if options is None:
            options = TagOptions()
        if options.kind is FieldKind.FLAG and not options.name:
            options = options.replace(name=to_kebab_case(field.name))
        descriptors.append(FieldDescriptor(field.name, annotation, options))
    return tuple(descriptors)


def resolve_options(instance: Any, descriptor: FieldDescriptor) -> TagOptions:
    """Apply the instance's `tag_options` override, if it has one."""
    options = descriptor.options
    if options is None:
        raise InvalidCommandError(f"field '{descriptor.attr}' is an embedded record")
    if not isinstance(instance, TagOptionsProvider):
        return options
    try:
        overridden = instance.tag_options(descriptor.attr, options)
    except TagOptionsError:
        raise
    except Exception as error:
        raise TagOptionsError(descriptor.attr, str(error)) from error
    if not isinstance(overridden, TagOptions):
        raise TagOptionsError(
            descriptor.attr,
            f"expected TagOptions, got {type(overridden).__name__}",
        )
    return overridden
