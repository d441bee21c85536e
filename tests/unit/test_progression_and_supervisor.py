import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.application.services.dice import scripted_dice
from harnas.application.services.progression_service import ProgressionService
from harnas.application.services.run_supervisor import DEATH_MESSAGE, VICTORY_MESSAGE, RunSupervisor
from harnas.domain.events import AdvancementGranted, AdvancementRevoked, RunEnded
from harnas.domain.models.character import CharacterState
from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.progression import AdvancementId
from harnas.domain.models.scene import DeadPhase, WonPhase
from harnas.domain.models.session import RunSession


def _hold_all(state: CharacterState) -> None:
    for advancement in AdvancementId:
        state.grant_advancement(advancement, halve_scanty=EnemyId.WOLF, halve_hardy=EnemyId.BEAR)


class ProgressionServiceTests(unittest.TestCase):
    def test_held_advancements_are_rerolled(self) -> None:
        state = CharacterState(name="Jasiek")
        state.grant_advancement(AdvancementId.HIT_BONUS)

        rolled = ProgressionService(scripted_dice(2, 2, 5)).roll_new_advancement(state)

        self.assertEqual(AdvancementId.SCATTERGUN, rolled)

    def test_nothing_is_rolled_once_every_advancement_is_held(self) -> None:
        state = CharacterState(name="Jasiek")
        _hold_all(state)

        self.assertIsNone(ProgressionService(scripted_dice()).roll_new_advancement(state))

    def test_grant_and_revoke_publish_events(self) -> None:
        events = []
        service = ProgressionService(scripted_dice(), event_publisher=events.append)
        state = CharacterState(name="Jagna")

        self.assertTrue(service.grant(state, AdvancementId.MAX_HP))
        self.assertFalse(service.grant(state, AdvancementId.MAX_HP))
        self.assertTrue(service.revoke(state, AdvancementId.MAX_HP))
        self.assertFalse(service.revoke(state, AdvancementId.MAX_HP))

        self.assertEqual(
            [AdvancementGranted(advancement_id=3, held=1), AdvancementRevoked(advancement_id=3, held=0)],
            events,
        )

    def test_manual_advance_needs_points_and_places(self) -> None:
        state = CharacterState(name="Jasiek", points=15, visited_places_count=11)
        self.assertFalse(ProgressionService.can_manual_advance(state))

        state.visited_places_count = 12
        state.temporary_hit_penalty = -1
        self.assertTrue(ProgressionService.can_manual_advance(state))
        ProgressionService.pay_for_manual_advance(state)

        self.assertEqual((0, 0, 0), (state.points, state.visited_places_count, state.temporary_hit_penalty))

    def test_ducat_costs_forty_dutki(self) -> None:
        state = CharacterState(name="Jasiek", coins=39)
        self.assertFalse(ProgressionService.can_buy_ducat(state))

        state.coins = 45
        ProgressionService.pay_for_ducat(state)

        self.assertEqual(5, state.coins)


class RunSupervisorTests(unittest.TestCase):
    def test_living_run_is_left_alone(self) -> None:
        run = RunSession(state=CharacterState(name="Jasiek"))

        self.assertFalse(RunSupervisor().check(run))
        self.assertFalse(run.is_over)

    def test_death_takes_precedence_over_victory(self) -> None:
        events = []
        run = RunSession(state=CharacterState(name="Jasiek"))
        _hold_all(run.state)
        run.state.hp = 0

        self.assertTrue(RunSupervisor(event_publisher=events.append).check(run))

        self.assertIsInstance(run.phase, DeadPhase)
        self.assertTrue(run.state.is_dead)
        self.assertEqual(DEATH_MESSAGE, run.recent_messages()[0])
        self.assertEqual("dead", events[0].outcome)

    def test_holding_every_advancement_wins(self) -> None:
        events = []
        run = RunSession(state=CharacterState(name="Jagna"))
        _hold_all(run.state)

        RunSupervisor(event_publisher=events.append).check(run)

        self.assertIsInstance(run.phase, WonPhase)
        self.assertTrue(run.state.has_won)
        self.assertEqual(VICTORY_MESSAGE, run.recent_messages()[0])
        self.assertIsInstance(events[0], RunEnded)
        self.assertEqual(("won", "Jagna", 6), (events[0].outcome, events[0].character_name, events[0].advancements))

    def test_terminal_phase_is_never_left(self) -> None:
        events = []
        supervisor = RunSupervisor(event_publisher=events.append)
        run = RunSession(state=CharacterState(name="Jasiek", hp=0))
        supervisor.check(run)

        run.state.hp = 10
        _hold_all(run.state)

        self.assertTrue(supervisor.check(run))
        self.assertIsInstance(run.phase, DeadPhase)
        self.assertEqual(1, len(events))


if __name__ == "__main__":
    unittest.main()
