from dataclasses import dataclass

import pytest

from skein.exceptions import CommandAlreadyExistsError, DeregistrationError
from skein.registry import CommandRegistry


@dataclass
class Alpha:
    def run(self) -> None:
        pass


@dataclass
class Beta:
    def run(self) -> None:
        pass


def alpha():
    pass


def test_register_and_resolve_in_order():
    registry = CommandRegistry()
    nodes = registry.register(Beta, Alpha)
    assert [node.name for node in nodes] == ["beta", "alpha"]
    assert [node.name for node in registry.resolve()] == ["beta", "alpha"]
    assert isinstance(registry.resolve(), tuple)
    assert len(registry) == 2


def test_lookup_is_case_insensitive():
    registry = CommandRegistry()
    registry.register(Alpha)
    assert "ALPHA" in registry
    assert registry.get("Alpha").name == "alpha"
    assert registry.get("gamma") is None


def test_duplicate_root_is_rejected():
    registry = CommandRegistry()
    registry.register(Alpha)
    with pytest.raises(CommandAlreadyExistsError) as exc_info:
        registry.register(alpha)
    assert exc_info.value.name == "alpha"
    assert len(registry) == 1


def test_duplicate_within_one_call_registers_nothing():
    registry = CommandRegistry()
    with pytest.raises(CommandAlreadyExistsError):
        registry.register(Alpha, alpha)
    assert len(registry) == 0


def test_deregister_by_source():
    registry = CommandRegistry()
    registry.register(Alpha, source="plugins.alpha")
    registry.register(Beta)
    removed = registry.deregister("plugins.alpha")
    assert [node.name for node in removed] == ["alpha"]
    assert [node.name for node in registry.resolve()] == ["beta"]


def test_deregister_default_source_is_module():
    registry = CommandRegistry()
    registry.register(Beta)
    registry.deregister(__name__)
    assert len(registry) == 0


def test_deregister_unknown_source():
    registry = CommandRegistry()
    with pytest.raises(DeregistrationError) as exc_info:
        registry.deregister("nowhere")
    assert exc_info.value.source == "nowhere"
