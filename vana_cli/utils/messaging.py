"""User-facing messages: reports on stdout, diagnostics on stderr."""

from typing import Optional

from rich.console import Console, RenderableType
from rich.markup import escape

from vana_cli.utils.formatting import format_bullets, format_examples


class MessageHandler:
    def __init__(self, out: Optional[Console] = None, err: Optional[Console] = None):
        self.out = out or Console(highlight=False)
        self.err = err or Console(stderr=True, highlight=False)

    def success(self, message: str) -> None:
        self.out.print(f"[green]✓ {escape(message)}[/green]")

    def info(self, message: str) -> None:
        self.out.print(f"[blue]ℹ {escape(message)}[/blue]")

    def error(self, message: str) -> None:
        self.err.print(f"[red]✗ {escape(message)}[/red]")

    def warning(self, message: str) -> None:
        self.err.print(f"[yellow]⚠ {escape(message)}[/yellow]")

    def write(self, *renderables: RenderableType) -> None:
        self.out.print(*renderables)

    def examples(self, title: str, commands: list[str], to_stderr: bool = False) -> None:
        (self.err if to_stderr else self.out).print(format_examples(title, commands))

    def next_steps(self, steps: list[str]) -> None:
        self.out.print(format_bullets("Next steps", steps))

    def troubleshooting(self, steps: list[str]) -> None:
        self.err.print(format_bullets("Troubleshooting", steps))


def config_not_found(key: str) -> str:
    return f"Configuration key '{key}' not found"


def missing_required(field: str) -> str:
    return f"Missing required field: {field}"
