# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
String to typed value binding for Skein command fields.

Every value the parser binds arrives as a string. This module converts it to the
annotated type of the target field and stores it on the owning instance:

- scalars (`str`, `int`, `float`, `bool`, `Path`, `datetime`) are replaced
- `list[T]` fields append one element per bound value
- `list[Interleaved[T]]` fields also record the global argument position
- `dict[K, V]` fields take `key=value` pairs

Conversion failures raise `ValueError`; the parser turns them into
`InvalidValueError` naming the flag or positional. Types with no binder raise
`UnsupportedValueTypeError`.
"""
from __future__ import annotations

import dataclasses
import types
from datetime import datetime
from enum import Enum, EnumMeta
from pathlib import Path
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from dateutil import parser as date_parser

from skein.exceptions import InvalidMapValueError, UnsupportedValueTypeError
from skein.schema import Interleaved

TRUE_WORDS = {"true", "t", "1", "yes", "y", "on"}
FALSE_WORDS = {"false", "f", "0", "no", "n", "off"}


def is_union(annotation: Any) -> bool:
    return isinstance(annotation, types.UnionType) or get_origin(annotation) is Union


def unwrap_optional(annotation: Any) -> Any:
    """Return `T` for `T | None`, otherwise the annotation unchanged."""
    if is_union(annotation):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def is_bool(annotation: Any) -> bool:
    return unwrap_optional(annotation) is bool


def is_list(annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    return annotation is list or get_origin(annotation) is list


def is_map(annotation: Any) -> bool:
    annotation = unwrap_optional(annotation)
    return annotation is dict or get_origin(annotation) is dict


def is_interleaved(annotation: Any) -> bool:
    return annotation is Interleaved or get_origin(annotation) is Interleaved


def element_type(annotation: Any) -> Any:
    args = get_args(unwrap_optional(annotation))
    return args[0] if args else str


def coerce_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False
    raise ValueError(f"'{value}' is not a valid boolean")


def coerce_enum(value: str, enum_type: EnumMeta) -> Any:
    """Resolve an Enum member by name, then by value."""
    try:
        return enum_type[value]
    except KeyError:
        pass

    for member in enum_type:
        if str(member.value) == value:
            return member
    names = [member.name for member in enum_type]
    raise ValueError(f"'{value}' should be one of {{{', '.join(names)}}}")


def convert(value: str, target_type: Any) -> Any:
    """
    Convert a string to the given scalar target type.

    Raises:
        ValueError: If the string is not a valid value of the type.
        UnsupportedValueTypeError: If the type has no known binder.
    """
    if target_type is Any or target_type is str:
        return value

    origin = get_origin(target_type)
    args = get_args(target_type)

    if origin is Literal:
        for arg in args:
            if str(arg) == value:
                return arg
        raise ValueError(f"'{value}' is not one of {list(map(str, args))}")

    if is_union(target_type):
        supported = False
        for arg in args:
            if arg is type(None):
                continue
            try:
                result = convert(value, arg)
            except ValueError:
                supported = True
                continue
            except UnsupportedValueTypeError:
                continue
            return result
        if not supported:
            raise UnsupportedValueTypeError(target_type)
        raise ValueError(f"'{value}' could not be converted to any of {args}")

    if isinstance(target_type, EnumMeta):
        return coerce_enum(value, target_type)

    if target_type is bool:
        return coerce_bool(value)

    if target_type is int:
        return int(value, 10)

    if target_type is float:
        return float(value)

    if target_type is Path:
        return Path(value)

    if target_type is datetime:
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as error:
            raise ValueError(f"'{value}' could not be parsed as a datetime") from error

    from_text = getattr(target_type, "from_text", None)
    if isinstance(target_type, type) and callable(from_text):
        return from_text(value)

    raise UnsupportedValueTypeError(target_type)


def bind_value(
    owner: Any,
    attr: str,
    annotation: Any,
    value: str,
    position: int | None = None,
) -> None:
    """Convert `value` and store it on `owner.attr` according to `annotation`."""
    if is_list(annotation):
        item_type = element_type(annotation)
        if is_interleaved(item_type):
            inner = get_args(item_type)[0] if get_args(item_type) else str
            item: Any = Interleaved(convert(value, inner), position or 0)
        else:
            item = convert(value, item_type)
        current = getattr(owner, attr, None)
        if current is None:
            current = []
            setattr(owner, attr, current)
        current.append(item)
        return

    if is_map(annotation):
        key, sep, raw = value.partition("=")
        if not sep:
            raise InvalidMapValueError(value)
        args = get_args(unwrap_optional(annotation))
        key_type, value_type = args if len(args) == 2 else (str, str)
        current = getattr(owner, attr, None)
        if current is None:
            current = {}
            setattr(owner, attr, current)
        current[convert(key, key_type)] = convert(raw, value_type)
        return

    setattr(owner, attr, convert(value, annotation))


def zero_value(annotation: Any) -> Any:
    """Initial value for a field that has no dataclass default."""
    if is_union(annotation) and type(None) in get_args(annotation):
        return None
    annotation = unwrap_optional(annotation)
    if is_list(annotation):
        return []
    if is_map(annotation):
        return {}
    if annotation is bool:
        return False
    if annotation is int:
        return 0
    if annotation is float:
        return 0.0
    if annotation is str:
        return ""
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return zero_instance(annotation)
    return None


def zero_instance(cls: type, **overrides: Any) -> Any:
    """Build `cls`, filling every field without a default with its zero value."""
    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        if not field.init or field.name in overrides:
            continue
        if (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        ):
            kwargs[field.name] = zero_value(hints.get(field.name, field.type))
    kwargs.update(overrides)
    return cls(**kwargs)


def enum_text(value: Any) -> str:
    """String form of a bound value, as compared against declared enums."""
    if isinstance(value, Enum):
        return value.name
    return str(value)
