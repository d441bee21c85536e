import logging
import os
import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.bootstrap import create_game_service, log_level_from_env
from harnas.infrastructure.inmemory.inmemory_lore_repo import InMemoryLoreRepository


class BootstrapConfigTests(unittest.TestCase):
    def test_defaults_without_environment(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            service = create_game_service()

        self.assertEqual(0.65, service.roll_delay_s)
        self.assertEqual(50, service.message_limit)
        self.assertIsInstance(service.lore_repo, InMemoryLoreRepository)

    def test_environment_overrides_pacing_and_log_sizes(self) -> None:
        env = {
            "HARNAS_ROLL_DELAY_S": "0",
            "HARNAS_MESSAGE_LOG_LIMIT": "5",
            "HARNAS_DICE_LOG_LIMIT": "3",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            service = create_game_service()
        service.dice.d6()
        service.dice.d6()
        service.dice.d4()
        service.dice.d4()

        self.assertEqual(0.0, service.roll_delay_s)
        self.assertEqual(5, service.message_limit)
        self.assertEqual(3, len(service.recent_rolls()))

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        env = {"HARNAS_ROLL_DELAY_S": "soon", "HARNAS_MESSAGE_LOG_LIMIT": "0", "HARNAS_SEED": "x"}
        with mock.patch.dict(os.environ, env, clear=True):
            service = create_game_service()

        self.assertEqual(0.65, service.roll_delay_s)
        self.assertEqual(50, service.message_limit)

    def test_same_seed_replays_the_same_run(self) -> None:
        with mock.patch.dict(os.environ, {"HARNAS_SEED": "1234", "HARNAS_ROLL_DELAY_S": "0"}, clear=True):
            first = create_game_service()
            second = create_game_service()

        first.start_run_intent("Jasiek")
        second.start_run_intent("Jasiek")

        self.assertEqual(first.get_game_view(), second.get_game_view())

    def test_log_level_comes_from_the_environment(self) -> None:
        with mock.patch.dict(os.environ, {"HARNAS_LOG_LEVEL": "debug"}, clear=True):
            self.assertEqual(logging.DEBUG, log_level_from_env())
        with mock.patch.dict(os.environ, {"HARNAS_LOG_LEVEL": "chatty"}, clear=True):
            self.assertEqual(logging.WARNING, log_level_from_env())


if __name__ == "__main__":
    unittest.main()
