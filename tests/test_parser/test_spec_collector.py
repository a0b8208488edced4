from dataclasses import dataclass

import pytest

from skein.exceptions import FlagAlreadyDefinedError, TagOptionsError
from skein.node import CommandInstance, build_node, command, new_chain
from skein.parser import (
    collect_flag_specs,
    collect_positional_specs,
    completion_flag_specs,
    enum_values_by_flag,
)
from skein.schema import TagOptions, embed, flag, positional


@dataclass
class Shared:
    region: str = flag(short="r", enum="us|eu")
    zone: str = flag()


@dataclass
class Deploy:
    dry_run: bool = flag(short="n", desc="Only print the plan")
    tags: list[str] = flag(short="t")
    shared: Shared = embed()
    target: str = positional(required=True, enum="dev|prod")
    extra: list[str] = positional(name="EXTRA")
    replicas: int = 1

    def run(self) -> None:
        pass


@dataclass
class Child:
    force: bool = flag(short="f")
    item: str = positional()

    def run(self) -> None:
        pass


@command(subcommands=[Child])
@dataclass
class Parent:
    verbose_output: bool = flag(name="loud", short="l")
    base: str = positional()


@dataclass
class Clash:
    fast: bool = flag(short="l")

    def run(self) -> None:
        pass


@command(subcommands=[Clash])
@dataclass
class ClashParent:
    loud: bool = flag(short="l")


@dataclass
class Dynamic:
    kind: str = flag(enum="fruit|veg")
    item: str = flag()
    pick: str = positional()

    def tag_options(self, field_name: str, options: TagOptions) -> TagOptions:
        if field_name == "kind":
            return options
        choices = ["apple", "pear"] if self.kind == "fruit" else ["kale"]
        return options.replace(enum=choices)

    def run(self) -> None:
        pass


@dataclass
class Broken:
    value: str = flag()

    def tag_options(self, field_name: str, options: TagOptions) -> TagOptions:
        raise RuntimeError("lookup failed")

    def run(self) -> None:
        pass


@dataclass
class WrongReturn:
    value: str = flag()

    def tag_options(self, field_name: str, options: TagOptions):
        return {"name": "value"}

    def run(self) -> None:
        pass


@dataclass
class Echo:
    quiet: bool = flag(name="loud")

    def run(self) -> None:
        pass


@command(subcommands=[Echo])
@dataclass
class EchoParent:
    loud: bool = flag()


@dataclass
class Regional:
    shared: Shared = embed()
    region: str = flag()

    def run(self) -> None:
        pass


def chain_for(target):
    return new_chain(build_node(target))


def test_flag_specs_follow_declaration_order_and_flatten_embeds():
    specs, long_names = collect_flag_specs(chain_for(Deploy))
    assert [spec.name for spec in specs] == ["dry-run", "tags", "region", "zone", "replicas"]
    assert long_names == {"dry-run", "tags", "region", "zone", "replicas"}


def test_flag_spec_shapes():
    specs, _ = collect_flag_specs(chain_for(Deploy))
    by_name = {spec.name: spec for spec in specs}
    assert by_name["dry-run"].takes_value is False
    assert by_name["dry-run"].short == "n"
    assert by_name["dry-run"].desc == "Only print the plan"
    assert by_name["tags"].takes_value is True
    assert by_name["tags"].variadic is True
    assert by_name["region"].enum == ("us", "eu")
    assert by_name["replicas"].takes_value is True
    assert by_name["replicas"].variadic is False


def test_embedded_flags_bind_into_embedded_record():
    chain = chain_for(Deploy)
    specs, _ = collect_flag_specs(chain)
    region = next(spec for spec in specs if spec.name == "region")
    region.bind("eu")
    assert chain[-1].value.shared.region == "eu"


def test_positional_specs():
    chain = chain_for(Deploy)
    specs = collect_positional_specs(chain[-1])
    assert [spec.display_name for spec in specs] == ["target", "EXTRA"]
    assert specs[0].required is True
    assert specs[0].enum == ("dev", "prod")
    assert specs[1].variadic is True


def test_positionals_only_come_from_the_terminal_instance():
    parent = build_node(Parent)
    chain = new_chain(parent.subcommands["child"])
    assert [spec.display_name for spec in collect_positional_specs(chain[-1])] == ["item"]


def test_flags_are_collected_across_the_chain():
    parent = build_node(Parent)
    chain = new_chain(parent.subcommands["child"])
    specs, _ = collect_flag_specs(chain)
    assert [spec.name for spec in specs] == ["loud", "force"]


def test_duplicate_short_name_across_chain():
    parent = build_node(ClashParent)
    chain = new_chain(parent.subcommands["clash"])
    with pytest.raises(FlagAlreadyDefinedError) as exc_info:
        collect_flag_specs(chain)
    assert exc_info.value.name == "l"


def test_duplicate_long_name_across_chain():
    parent = build_node(EchoParent)
    chain = new_chain(parent.subcommands["echo"])
    with pytest.raises(FlagAlreadyDefinedError) as exc_info:
        collect_flag_specs(chain)
    assert exc_info.value.name == "loud"


def test_duplicate_long_name_between_embed_and_owner():
    with pytest.raises(FlagAlreadyDefinedError) as exc_info:
        collect_flag_specs(chain_for(Regional))
    assert exc_info.value.name == "region"


def test_completion_flag_specs_keys():
    by_flag = completion_flag_specs(chain_for(Deploy))
    assert {"--dry-run", "-n", "--tags", "-t", "--region", "-r", "--zone"} <= set(by_flag)
    assert by_flag["-r"] is by_flag["--region"]


def test_completion_flag_specs_tolerates_duplicates():
    parent = build_node(ClashParent)
    chain = new_chain(parent.subcommands["clash"])
    by_flag = completion_flag_specs(chain)
    assert by_flag["-l"].name == "loud"


def test_enum_values_by_flag():
    values = enum_values_by_flag(chain_for(Deploy))
    assert values == {"--region": ("us", "eu"), "-r": ("us", "eu")}


def test_tag_options_override_reflects_instance_state():
    chain = chain_for(Dynamic)
    specs, _ = collect_flag_specs(chain)
    assert next(spec for spec in specs if spec.name == "item").enum == ("kale",)

    chain[-1].value.kind = "fruit"
    specs, _ = collect_flag_specs(chain)
    assert next(spec for spec in specs if spec.name == "item").enum == ("apple", "pear")
    positionals = collect_positional_specs(chain[-1])
    assert positionals[0].enum == ("apple", "pear")


def test_tag_options_failure_propagates():
    with pytest.raises(TagOptionsError) as exc_info:
        collect_flag_specs(chain_for(Broken))
    assert exc_info.value.field_name == "value"
    assert "lookup failed" in str(exc_info.value)


def test_tag_options_must_return_tag_options():
    with pytest.raises(TagOptionsError, match="expected TagOptions"):
        collect_flag_specs(chain_for(WrongReturn))


def test_collection_is_repeatable():
    chain = chain_for(Deploy)
    first, _ = collect_flag_specs(chain)
    second, _ = collect_flag_specs(chain)
    assert [spec.name for spec in first] == [spec.name for spec in second]


def test_instance_without_value_has_no_positionals():
    assert collect_positional_specs(None) == []
    node = build_node(Parent)
    assert collect_positional_specs(CommandInstance(node, None)) == []
