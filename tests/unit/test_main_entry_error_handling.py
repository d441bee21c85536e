import io
import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import harnas.__main__ as runtime_main


class MainEntryErrorHandlingTests(unittest.TestCase):
    def test_main_handles_runtime_exceptions_without_traceback(self) -> None:
        output = io.StringIO()
        with mock.patch.object(runtime_main, "create_game_service", side_effect=RuntimeError("dice jammed")), mock.patch(
            "sys.stdout", output
        ):
            runtime_main.main()

        text = output.getvalue()
        self.assertIn("An unexpected error occurred", text)
        self.assertIn("dice jammed", text)
        self.assertIn("Help:", text)
        self.assertNotIn("Traceback", text)

    def test_main_handles_keyboard_interrupt(self) -> None:
        output = io.StringIO()
        with mock.patch.object(runtime_main, "create_game_service", side_effect=KeyboardInterrupt), mock.patch(
            "sys.stdout", output
        ):
            runtime_main.main()

        self.assertIn("Session ended", output.getvalue())

    def test_main_hands_the_service_to_the_menu(self) -> None:
        service = object()
        with mock.patch.object(runtime_main, "create_game_service", return_value=service), mock.patch.object(
            runtime_main, "main_menu"
        ) as menu_mock, mock.patch.object(runtime_main, "load_dotenv"):
            runtime_main.main()

        menu_mock.assert_called_once_with(service)


if __name__ == "__main__":
    unittest.main()
