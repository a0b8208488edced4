from dataclasses import dataclass, field
from enum import Enum

import pytest

from skein.exceptions import InvalidCommandError
from skein.schema import (
    FieldKind,
    TagOptions,
    describe_fields,
    embed,
    flag,
    normalize_enum,
    positional,
)


class Level(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Network:
    http_port: int = flag(short="p", placeholder="PORT")


@dataclass
class Server:
    dry_run: bool = flag(short="n")
    log_level: str = flag(enum=Level)
    network: Network = embed()
    host: str = positional(desc="Host to bind", required=True)
    max_retries: int = 3
    _cache: dict = field(default_factory=dict)


@dataclass
class BadEmbed:
    value: int = embed()


def test_flag_rejects_long_short_alias():
    with pytest.raises(InvalidCommandError):
        flag(short="ab")


def test_flag_metadata_is_keyword_only():
    server = Server(host="localhost", dry_run=True, log_level="LOW", network=Network(http_port=80))
    assert server.host == "localhost"
    assert server.max_retries == 3


@pytest.mark.parametrize(
    "enum, expected",
    [
        ("a|b|c", ("a", "b", "c")),
        ("a||b", ("a", "b")),
        (["x", "y"], ("x", "y")),
        (Level, ("LOW", "HIGH")),
        (None, ()),
        ("", ()),
    ],
)
def test_normalize_enum(enum, expected):
    assert normalize_enum(enum) == expected


def test_describe_fields_order_and_names():
    descriptors = describe_fields(Server)
    assert [descriptor.attr for descriptor in descriptors] == [
        "dry_run",
        "log_level",
        "network",
        "host",
        "max_retries",
    ]
    by_attr = {descriptor.attr: descriptor for descriptor in descriptors}
    assert by_attr["dry_run"].options.name == "dry-run"
    assert by_attr["log_level"].options.enum == ("LOW", "HIGH")
    assert by_attr["network"].embedded is True
    assert by_attr["host"].options.kind is FieldKind.POSITIONAL
    assert by_attr["host"].options.name == ""
    assert by_attr["host"].options.desc == "Host to bind"
    assert by_attr["max_retries"].options == TagOptions(name="max-retries")


def test_describe_fields_is_cached():
    assert describe_fields(Server) is describe_fields(Server)


def test_describe_fields_rejects_non_dataclass():
    with pytest.raises(InvalidCommandError):
        describe_fields(int)


def test_embedded_field_must_be_dataclass():
    with pytest.raises(InvalidCommandError, match="must be a dataclass"):
        describe_fields(BadEmbed)


def test_tag_options_replace_normalizes_enum():
    options = TagOptions(name="mode")
    updated = options.replace(enum="dev|prod", required=True)
    assert updated.enum == ("dev", "prod")
    assert updated.required is True
    assert options.enum == ()
