from dataclasses import dataclass

import pytest
from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document

from skein.app import Skein
from skein.completer import SkeinCompleter
from skein.config import SkeinConfig
from skein.node import build_node, command
from skein.schema import flag, positional


@command("deploy")
@dataclass
class Deploy:
    region: str = flag(short="r", enum="us-east|us-west|eu-central")
    city: str = positional(enum=["London", "New York", "San Francisco"])

    def run(self) -> None:
        pass


@dataclass
class Alpha:
    def run(self) -> None:
        pass


@dataclass
class Beta:
    def run(self) -> None:
        pass


@pytest.fixture
def completer():
    return SkeinCompleter([build_node(Deploy)], program="deploy")


def texts(completions):
    return [completion.text for completion in completions]


def test_roots_from_application():
    app = Skein(Alpha, Beta, program="tasks", config=SkeinConfig(configure_logging=False))
    completer = app.get_completer()
    assert [root.name for root in completer.roots] == ["alpha", "beta"]
    assert texts(completer.get_completions(Document("al"), None)) == ["alpha"]


def test_roots_from_sequence(completer):
    assert [root.name for root in completer.roots] == ["deploy"]


def test_flag_completions(completer):
    results = list(completer.get_completions(Document("--r"), None))
    assert texts(results) == ["--region"]
    assert results[0].start_position == -3


def test_enum_values_after_flag(completer):
    results = texts(completer.get_completions(Document("--region "), None))
    assert "us-east" in results
    assert "eu-central" in results


def test_common_prefix_is_offered_first(completer):
    results = list(completer.get_completions(Document("--region us"), None))
    assert results[0].text == "us-"
    assert set(texts(results[1:])) == {"us-east", "us-west"}


def test_suggestions_with_spaces_are_quoted(completer):
    results = list(completer.get_completions(Document("N"), None))
    assert results == [Completion('"New York"', start_position=-1, display="New York")]


def test_no_matches(completer):
    assert list(completer.get_completions(Document("--zzz"), None)) == []
