from typing import Optional, TextIO

from rich.console import Console
from rich.panel import Panel

from harnas.application.services.game_service import GameService
from harnas.presentation.game_loop import report_result, run_game_loop
from harnas.presentation.menu_controls import numbered_menu


_SPLASH_BORDER = "yellow"
_HELP_BORDER = "yellow"
_EXIT_BORDER = "magenta"

HELP_LINES = [
    "[bold]Help & Controls[/bold]",
    "- Type the number of an option and press ENTER.",
    "- Travel rolls 2d6 for your next place in the mountains.",
    "- Earn 15 points and visit 12 places to Advance, or buy a Ducat for 40 dutki.",
    "- Hold all six Advancements to become the Harnaś. Reach 0 HP and the run is over.",
]


def _ornate_title(title: str) -> str:
    return f"[bold yellow]{title}[/bold yellow]"


def _start_run(game_service: GameService, console: Console, stream: Optional[TextIO]) -> bool:
    if game_service.run is not None and not game_service.run.is_over:
        return True
    heroes = game_service.character_creation.list_heroes()
    picked = numbered_menu(console, "Choose your Highlander", heroes, stream=stream)
    result = game_service.start_run_intent(heroes[picked])
    report_result(console, result)
    return result.accepted


def main_menu(game_service: GameService, console: Optional[Console] = None, stream: Optional[TextIO] = None) -> None:
    console = console or Console()
    options = ["Play", "Help", "Quit"]

    while True:
        console.print(
            Panel.fit(
                "[bold yellow]HARNAŚ[/bold yellow]\n[dim]King of the Outlaws[/dim]",
                border_style=_SPLASH_BORDER,
                title=_ornate_title("Main Menu"),
            )
        )
        choice_idx = numbered_menu(console, "Harnaś", options, stream=stream)

        if choice_idx == 0:  # Play, resuming an unfinished run
            again = _start_run(game_service, console, stream)
            while again:
                again = run_game_loop(game_service, console, stream=stream) and _start_run(
                    game_service, console, stream
                )

        elif choice_idx == 1:  # Help
            console.print(
                Panel.fit(
                    "\n".join(HELP_LINES),
                    title=_ornate_title("Guidance"),
                    border_style=_HELP_BORDER,
                )
            )

        else:  # Quit
            console.print(
                Panel.fit(
                    "[bold magenta]Z Bogiem, góralu![/bold magenta]",
                    title=_ornate_title("Farewell"),
                    border_style=_EXIT_BORDER,
                )
            )
            break
