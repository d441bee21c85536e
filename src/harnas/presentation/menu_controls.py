from typing import Optional, TextIO

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt


def _decorate_title(title: str) -> str:
    core = str(title or "").strip()
    if not core:
        core = "Menu"
    return f"[bold yellow]{core}[/bold yellow]"


def numbered_menu(
    console: Console,
    title: str,
    options: list[str],
    footer_hint: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """Render a numbered menu and read the player's pick.

    Returns the zero-based index of the selected option.
    """

    if not options:
        raise ValueError("numbered_menu requires at least one option")

    body_lines: list[str] = ["[#d6c59d]━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━[/#d6c59d]"]
    for number, option in enumerate(options, start=1):
        body_lines.append(f"[bold yellow]{number:>2}[/bold yellow]  [white]{option}[/white]")
    body_lines.append("[#d6c59d]━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━[/#d6c59d]")
    if footer_hint:
        body_lines.append(f"[yellow]{footer_hint}[/yellow]")
    console.print(
        Panel.fit(
            "\n".join(body_lines),
            title=_decorate_title(title),
            border_style="yellow",
            padding=(0, 1),
        )
    )
    picked = IntPrompt.ask(
        "Choose",
        console=console,
        choices=[str(number) for number in range(1, len(options) + 1)],
        show_choices=False,
        stream=stream,
    )
    return picked - 1
