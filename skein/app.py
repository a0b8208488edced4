# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Main application class for Skein.

`Skein` owns the command registry and ties the grammar engine to the process:

- `__complete "<line>"` prints shell completion suggestions, one per line
- `--completion SHELL` prints the completion script for bash, zsh or fish
- `--help` / `-h` renders help for the command the rest of the line points at
- `--verbose` enables debug logging for the "skein" logger
- anything else is parsed strictly and executed, command after command

Example:
    ```
    @dataclass
    class Greet:
        name: str = positional(required=True)
        shout: bool = flag(short="s")

        def run(self) -> None:
            print(self.name.upper() if self.shout else self.name)

    asyncio.run(Skein(Greet, program="greet").run())
    ```
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape

from skein.completer import SkeinCompleter
from skein.completion import complete, completion_script, resolve_context, suggest
from skein.config import SkeinConfig, find_config, import_target, load_config
from skein.console import console as default_console
from skein.exceptions import CommandArgumentError, SkeinError, UnsupportedShellError
from skein.execute import Executor, Invocation
from skein.flags import COMPLETE_TOKEN, extract_global_flags
from skein.help import render_help, render_root_listing
from skein.logger import logger
from skein.node import CommandNode
from skein.registry import CommandRegistry
from skein.utils import get_program_invocation, setup_logging


def detect_shell() -> str:
    return Path(os.environ.get("SHELL", "bash")).name


class Skein:
    """
    A declarative command-line application.

    Args:
        *targets: Dataclass types, dataclass instances, functions or `Group`s to
            register as root commands.
        program (str | None): Program name used in help and completion scripts.
        description (str): Description shown in the root listing.
        config (SkeinConfig | None): Application configuration.
        console (Console | None): Rich console for help and error output.
    """

    def __init__(
        self,
        *targets: Any,
        program: str | None = None,
        description: str = "",
        config: SkeinConfig | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config or SkeinConfig()
        self.program = program or self.config.program or get_program_invocation()
        self.description = description or self.config.description
        self.console = console or default_console
        self.registry = CommandRegistry()
        if targets:
            self.add(*targets)
        for dotted_path in self.config.commands:
            self.add(import_target(dotted_path), source=dotted_path)

    @classmethod
    def from_config(cls, path: Path | str | None = None, *targets: Any) -> Skein:
        """Build an application from a config file, searching for one if no path is given."""
        config_path = path or find_config()
        config = load_config(config_path) if config_path else SkeinConfig()
        return cls(*targets, config=config)

    @property
    def roots(self) -> tuple[CommandNode, ...]:
        return self.registry.resolve()

    @property
    def multi_root(self) -> bool:
        return len(self.roots) > 1

    def add(self, *targets: Any, source: str | None = None) -> list[CommandNode]:
        return self.registry.register(*targets, source=source)

    def remove(self, source: str) -> list[CommandNode]:
        return self.registry.deregister(source)

    def suggest(self, line: str) -> list[str]:
        return suggest(self.roots, line)

    def completion_script(self, shell: str) -> str:
        return completion_script(shell, self.program)

    def get_completer(self) -> SkeinCompleter:
        return SkeinCompleter(self, program=self.program)

    def render_help(self, args: Sequence[str] = ()) -> None:
        """Render help for the command `args` point at, or the root listing."""
        state = resolve_context(self.roots, args)
        if state.current_node is None:
            render_root_listing(self.roots, self.program, self.description, self.console)
            return
        render_help(state.current_node, self.program, self.console, self.multi_root)

    def configure_logging(self) -> None:
        setup_logging(
            mode=self.config.log_mode,
            log_filename=self.config.log_file,
            json_log_to_file=self.config.json_log_to_file,
            console_log_level=self.config.console_log_level,
        )

    async def execute(self, args: Sequence[str]) -> list[Invocation]:
        """
        Parse and run `args` against the registered roots.

        Raises:
            CommandArgumentError: If the arguments violate the command grammar.
            SkeinError: If no commands are registered.
        """
        if not self.roots:
            raise SkeinError("No commands registered")
        return await Executor(self.roots).run(list(args))

    async def run(self, argv: Sequence[str] | None = None) -> None:
        """
        Entrypoint for executing a Skein application.

        Args:
            argv (Sequence[str] | None): Arguments without the program name.
                Defaults to `sys.argv[1:]`.

        Raises:
            SystemExit: Always. 0 on success, 1 on a user or command error and
                130 on Ctrl+C.
        """
        args = list(sys.argv[1:] if argv is None else argv)

        if self.config.configure_logging:
            self.configure_logging()

        if args and args[0] == COMPLETE_TOKEN and not self.config.disable_completion:
            complete(self.roots, args[1] if len(args) > 1 else "")
            sys.exit(0)

        args, reserved = extract_global_flags(args)

        if reserved.get("verbose"):
            logging.getLogger("skein").setLevel(logging.DEBUG)
            logger.debug("Verbose logging enabled")

        if "completion" in reserved and not self.config.disable_completion:
            shell = reserved["completion"] or detect_shell()
            try:
                sys.stdout.write(self.completion_script(shell))
            except UnsupportedShellError as error:
                self.console.print(f"[skein.error]❌ Error: {escape(str(error))}[/]")
                sys.exit(1)
            sys.exit(0)

        if reserved.get("help") and not self.config.disable_help:
            self.render_help(args)
            sys.exit(0)

        try:
            invocations = await self.execute(args)
        except CommandArgumentError as error:
            self.console.print(f"[skein.error]❌ {escape(str(error))}[/]")
            if not self.config.disable_help:
                self.render_help(args)
            sys.exit(1)
        except SkeinError as error:
            self.console.print(f"[skein.error]❌ Error: {escape(str(error))}[/]")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.info("[KeyboardInterrupt]. <- Exiting run.")
            sys.exit(130)
        except Exception as error:
            logger.debug("Command failed", exc_info=True)
            self.console.print(f"[skein.error]❌ Error: {escape(str(error))}[/]")
            sys.exit(1)

        if invocations and not any(invocation.runnable for invocation in invocations):
            if not self.config.disable_help:
                render_help(
                    invocations[-1].terminal.node,
                    self.program,
                    self.console,
                    self.multi_root,
                )
        sys.exit(0)
