"""Formatting helpers shared by the commands.

Strings returned here use rich console markup; user-provided text is escaped.
"""

from typing import Optional

from rich.markup import escape

SENSITIVE_KEY_PARTS: tuple[str, ...] = ("wallet_private_key", "private_key", "secret", "password", "token")


def mask_sensitive_value(key: str, value: str) -> str:
    """Show only the ends of a private key: 6 + 4 characters, or 4 + 2 for short values."""
    if key == "wallet_private_key" and value:
        if len(value) > 10:
            return f"{value[:6]}...{value[-4:]}"
        return f"{value[:4]}...{value[-2:]}"
    return value


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def format_number(value: object) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,}"
    return f"{int(value):,}"


def format_pair(key: str, value: Optional[str], mask_sensitive: bool = False, indent: int = 2) -> str:
    pad = " " * indent
    if value is None:
        return f"{pad}[cyan]{escape(key)}[/cyan]: [bright_black](not set)[/bright_black]"
    shown = mask_sensitive_value(key, value) if mask_sensitive and is_sensitive_key(key) else value
    return f"{pad}[cyan]{escape(key)}[/cyan]: {escape(shown)}"


def format_title(title: str) -> str:
    return f"[bold]{escape(title)}[/bold]\n" + "─" * min(len(title), 50)


def format_section_header(title: str, description: Optional[str] = None) -> str:
    header = f"\n[bold blue]{escape(title)}:[/bold blue]"
    if description:
        header += f" [bright_black]({escape(description)})[/bright_black]"
    return header


def format_example(command: str) -> str:
    return f"[bright_black]  $ {escape(command)}[/bright_black]"


def format_bullets(title: str, items: list[str]) -> str:
    lines = [format_section_header(title)]
    lines.extend(f"[bright_black]  • {escape(item)}[/bright_black]" for item in items)
    return "\n".join(lines)


def format_examples(title: str, commands: list[str]) -> str:
    return "\n".join([format_section_header(title), *(format_example(c) for c in commands)])


def format_config_section(
    title: str,
    description: str,
    items: dict[str, Optional[str]],
    mask_sensitive: bool = False,
    show_empty: bool = True,
) -> str:
    lines = [format_section_header(title, description)]
    for key, value in items.items():
        if value is not None or show_empty:
            lines.append(format_pair(key, value, mask_sensitive=mask_sensitive))
    return "\n".join(lines)
