# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global console instance for Skein CLI applications."""
from rich.console import Console
from rich.theme import Theme

SKEIN_THEME = Theme(
    {
        "skein.command": "bold cyan",
        "skein.flag": "green",
        "skein.positional": "yellow",
        "skein.error": "bold red",
        "skein.muted": "dim",
    }
)

console = Console(theme=SKEIN_THEME)
