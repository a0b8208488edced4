import io
from dataclasses import dataclass

import pytest
from rich.console import Console

from skein.console import SKEIN_THEME
from skein.help import get_usage, render_help, render_root_listing
from skein.node import build_node, command
from skein.schema import flag, positional


@dataclass
class Push:
    """Push commits to a remote."""

    force: bool = flag(short="f", desc="Overwrite remote history")
    tags: list[str] = flag(desc="Tags to push")
    remote: str = positional(enum="origin|upstream", desc="Remote to push to")
    refs: list[str] = positional(placeholder="REF")

    def run(self) -> None:
        pass


@command("git", subcommands=[Push])
@dataclass
class Git:
    """Version control."""

    token: str = flag(required=True, env="GIT_TOKEN", desc="Access token")
    depth: int = flag(default="1", placeholder="N")


@pytest.fixture
def output():
    return Console(file=io.StringIO(), theme=SKEIN_THEME, width=120, color_system=None)


def test_usage_for_root():
    assert get_usage(build_node(Git)) == "git --token TOKEN [--depth N] <command>"


def test_usage_for_subcommand_with_program():
    push = build_node(Git).subcommands["push"]
    assert (
        get_usage(push, "vcs")
        == "vcs push --token TOKEN [--depth N] [--force] [--tags TAGS ...] "
        "[{origin,upstream}] [REF...]"
    )


def test_usage_in_multi_root_mode():
    assert get_usage(build_node(Git), "tools", multi_root=True).startswith("tools git ")


def test_render_help_sections(output):
    push = build_node(Git).subcommands["push"]
    render_help(push, "vcs", output)
    text = output.file.getvalue()
    assert "Push commits to a remote." in text
    assert "positional:" in text
    assert "Remote to push to" in text
    assert "options:" in text
    assert "-f, --force" in text
    assert "Overwrite remote history" in text
    assert "inherited options:" in text
    assert "Access token (required, env: GIT_TOKEN)" in text
    assert "(default: 1)" in text
    assert "global options:" in text
    assert "-h, --help" in text
    assert "--completion" not in text


def test_render_help_root_lists_commands(output):
    render_help(build_node(Git), "vcs", output)
    text = output.file.getvalue()
    assert "commands:" in text
    assert "Push commits to a remote." in text
    assert "--completion SHELL" in text
    assert "inherited options:" not in text


def test_render_root_listing(output):
    render_root_listing([build_node(Git), build_node(Push)], "tools", "All tools", output)
    text = output.file.getvalue()
    assert "usage: tools <command> [args...] [^ <command> ...]" in text
    assert "All tools" in text
    assert "Version control." in text
    assert "Push commits to a remote." in text
    assert "--completion SHELL" in text
