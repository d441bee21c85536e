import io
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from rich.console import Console

from harnas.application.services.dice import scripted_dice
from harnas.application.services.game_service import GameService
from harnas.presentation.game_loop import build_menu, render_view, run_game_loop
from harnas.presentation.main_menu import main_menu


def _console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


def _service(*rolls) -> GameService:
    return GameService(scripted_dice(*rolls), roll_delay_s=0)


class CliFlowTests(unittest.TestCase):
    def test_help_play_and_quit_flow(self) -> None:
        service = _service(1, 2, 3, 4)
        console = _console()
        # Help, Play, Jasiek, Continue, Quit to Menu, Quit
        stream = io.StringIO("2\n1\n1\n1\n3\n3\n")

        main_menu(service, console=console, stream=stream)

        transcript = console.file.getvalue()
        self.assertIn("Guidance", transcript)
        self.assertIn("Mountain Pass: Misty Valley", transcript)
        self.assertIn("The valley is eerily silent.", transcript)
        self.assertIn("Z Bogiem, góralu!", transcript)
        self.assertEqual("idle", service.get_game_view().phase)

    def test_death_shows_the_end_screen(self) -> None:
        # Knife, kaftan, 9 dutki, Vermin Ridge, Hajduk, miss, Hajduk hits for 4, kaftan absorbs 1
        service = _service(1, 1, 3, 2, 1, 1, 4, 1)
        service.start_run_intent("Jagna")
        service.run.state.hp = 2
        console = _console()
        # Play resumes, Continue, Attack, Main Menu, Quit
        stream = io.StringIO("1\n1\n1\n2\n3\n")

        main_menu(service, console=console, stream=stream)

        transcript = console.file.getvalue()
        self.assertIn("Hajduk", transcript)
        self.assertIn("DIED", transcript)
        self.assertIn("Try Again", transcript)
        self.assertEqual("dead", service.get_game_view().phase)

    def test_restart_from_the_end_screen(self) -> None:
        service = _service(1, 2, 3, 4)
        service.start_run_intent("Jasiek")
        service.run.state.hp = 0
        service.supervisor.check(service.run)
        service.dice.source.push(2, 1, 6, 4)

        again = run_game_loop(service, _console(), stream=io.StringIO("1\n"))

        self.assertTrue(again)
        self.assertTrue(service.start_run_intent("Jagna").accepted)
        self.assertEqual(12, service.run.state.coins)

    def test_idle_menu_hides_unavailable_actions(self) -> None:
        service = _service(1, 2, 3, 4)
        service.start_run_intent("Jasiek")
        service.submit_scene_choice_intent(0)
        service.run.state.inventory.potions = 0

        options = build_menu(service, service.get_game_view())
        self.assertEqual(["Travel", "Quit to Menu"], [label for label, _ in options])

    def test_render_view_shows_status_map_and_log(self) -> None:
        service = _service(1, 2, 3, 4)
        service.start_run_intent("Jasiek")
        console = _console()

        render_view(console, service.get_game_view())

        transcript = console.file.getvalue()
        self.assertIn("Highlander", transcript)
        self.assertIn("Jasiek", transcript)
        self.assertIn("15/15", transcript)
        self.assertIn("Peak Black", transcript)
        self.assertIn("Dice: d4:4 = 4", transcript)


if __name__ == "__main__":
    unittest.main()
