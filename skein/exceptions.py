# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used in the Skein CLI framework.

Grammar errors are raised by the parser while turning an argument vector into
populated command instances. Each one carries the offending name or value as
attributes so callers never have to match on message text.

Exception Hierarchy:
- SkeinError
    ├── CommandAlreadyExistsError
    ├── DeregistrationError
    ├── InvalidCommandError
    ├── TagOptionsError
    ├── UnsupportedShellError
    └── CommandArgumentError
          ├── FlagNotDefinedError
          ├── FlagNeedsArgumentError
          ├── FlagAlreadyDefinedError
          ├── LongFlagFormatError
          ├── ShortFlagGroupNotBoolError
          ├── MissingRequiredPositionalError
          ├── MissingRequiredFlagError
          ├── UnknownCommandError
          ├── UnsupportedValueTypeError
          ├── InvalidMapValueError
          ├── InvalidValueError
          └── InvalidChoiceError

All of these are raised internally and propagate to the caller, which decides
how to report them.
"""
from typing import Any, Sequence


class SkeinError(Exception):
    """Base exception for the Skein framework."""


class CommandAlreadyExistsError(SkeinError):
    """Exception raised when a root command with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Command '{name}' is already registered")


class DeregistrationError(SkeinError):
    """Exception raised when deregistering a source that registered no commands."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"No commands registered from source '{source}'")


class InvalidCommandError(SkeinError):
    """Exception raised when a target cannot be turned into a command node."""


class TagOptionsError(SkeinError):
    """Exception raised when a per-instance tag_options override fails."""

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"tag_options failed for field '{field_name}': {reason}")


class UnsupportedShellError(SkeinError):
    """Exception raised when a completion script is requested for an unknown shell."""

    def __init__(self, shell: str):
        self.shell = shell
        super().__init__(f"Unsupported shell: {shell}")


class CommandArgumentError(SkeinError):
    """Exception raised when there is an error in the command argument grammar."""


class FlagNotDefinedError(CommandArgumentError):
    """A flag was provided that no command in the active chain defines."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"flag provided but not defined: {flag}")


class FlagNeedsArgumentError(CommandArgumentError):
    """A value-taking flag was given without a value."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"flag needs an argument: {flag}")


class FlagAlreadyDefinedError(CommandArgumentError):
    """Two fields in the same chain claim the same long or short flag name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"flag already defined: {name}")


class LongFlagFormatError(CommandArgumentError):
    """A long flag name was written with a single dash."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"long flags must use --{name} (got -{name})")


class ShortFlagGroupNotBoolError(CommandArgumentError):
    """A grouped short flag has a value-taking flag before its last letter."""

    def __init__(self, group: str):
        self.group = group
        super().__init__(
            f"short flag group {group!r} may only have a value-taking flag in last position"
        )


class MissingRequiredPositionalError(CommandArgumentError):
    """A required positional argument was never filled."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"missing required positional: {name}")


class MissingRequiredFlagError(CommandArgumentError):
    """A required flag was neither passed, set from the environment nor defaulted."""

    def __init__(self, display: str):
        self.display = display
        super().__init__(f"missing required flag: {display}")


class UnknownCommandError(CommandArgumentError):
    """A token did not match any command at the point it was read."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown command: {name}")


class UnsupportedValueTypeError(CommandArgumentError):
    """A field has a type with no known string binder."""

    def __init__(self, value_type: Any):
        self.value_type = value_type
        type_name = getattr(value_type, "__name__", repr(value_type))
        super().__init__(f"unsupported value type: {type_name}")


class InvalidMapValueError(CommandArgumentError):
    """A map-typed field was given a value without '='."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid map value, expected key=value: {value!r}")


class InvalidValueError(CommandArgumentError):
    """A value could not be converted to the field's type."""

    def __init__(self, name: str, value: str, reason: str = ""):
        self.name = name
        self.value = value
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"invalid value {value!r} for '{name}'{detail}")


class InvalidChoiceError(CommandArgumentError):
    """A value is outside the declared enum of its flag or positional."""

    def __init__(self, name: str, value: Any, choices: Sequence[str]):
        self.name = name
        self.value = value
        self.choices = tuple(choices)
        super().__init__(
            f"invalid value {value!r} for '{name}': must be one of {{{', '.join(choices)}}}"
        )
