import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.application.services.combat_service import CombatService
from harnas.application.services.dice import scripted_dice
from harnas.application.services.encounter_service import EncounterService
from harnas.application.services.progression_service import ProgressionService
from harnas.application.services.reward_service import RewardService
from harnas.application.services.run_supervisor import RunSupervisor
from harnas.application.services.scene_service import SceneController
from harnas.application.services.scene_support import fight_step
from harnas.domain.models.character import CharacterState, Inventory
from harnas.domain.models.combat import CombatAction, CombatOutcome
from harnas.domain.models.enemy import EnemyCategory, EnemyId
from harnas.domain.models.items import Scroll, ScrollType, WeaponType
from harnas.domain.models.location import PEAK_REQUIREMENTS, Site
from harnas.domain.models.progression import AdvancementId
from harnas.domain.models.scene import (
    CombatPhase,
    DeadPhase,
    IdlePhase,
    ShopPhase,
    StepKind,
    WonPhase,
    step,
)
from harnas.domain.models.session import RunSession


def _controller(*rolls) -> SceneController:
    dice = scripted_dice(*rolls)
    return SceneController(
        dice,
        CombatService(dice),
        RewardService(dice),
        EncounterService(dice),
        ProgressionService(dice),
        RunSupervisor(),
    )


def _run(**overrides) -> RunSession:
    return RunSession(state=CharacterState(name="Jasiek", **overrides))


def _choose(controller: SceneController, run: RunSession, index: int) -> None:
    controller.execute(run, run.scene.choices[index].step)


class FallRiskTests(unittest.TestCase):
    def test_fall_without_rope_deals_d6_plus_two(self) -> None:
        controller = _controller(3, 3, 4)
        run = _run()

        controller.execute(run, step(StepKind.FALL_RISK, then=step(StepKind.RETURN_TO_MAP), site=Site.CLIFF))

        self.assertEqual(9, run.state.hp)
        self.assertIsInstance(run.phase, IdlePhase)

    def test_passed_check_avoids_the_fall(self) -> None:
        controller = _controller(2, 4)
        run = _run()

        controller.execute(run, step(StepKind.FALL_RISK, site=Site.CRAGS))

        self.assertEqual(15, run.state.hp)

    def test_safe_footing_skips_the_check(self) -> None:
        controller = _controller(5)
        run = _run()

        controller.execute(run, step(StepKind.FALL_RISK, site=Site.CLIFF))

        self.assertEqual(15, run.state.hp)

    def test_rope_is_offered_and_consumed_for_the_bonus(self) -> None:
        controller = _controller(1, 3)
        run = _run(inventory=Inventory(has_rope=True))

        controller.execute(run, step(StepKind.FALL_RISK, site=Site.CLIFF))
        self.assertEqual(["Use Rope", "Do Not Use Rope"], run.scene.labels())
        _choose(controller, run, 0)

        self.assertFalse(run.state.inventory.has_rope)
        self.assertEqual(15, run.state.hp)
        self.assertIsInstance(run.phase, IdlePhase)


class EncounterTableTests(unittest.TestCase):
    def test_victory_marks_the_site_and_returns_to_the_map(self) -> None:
        controller = _controller(4, 3, 4, 4, 4)
        run = _run()
        run.state.equip(WeaponType.SAMOPAL)

        controller.execute(run, step(StepKind.EXPLORE, site=Site.DEEP_WOODS))
        self.assertEqual(EnemyId.POACHER, run.combat.enemy.id)
        result = controller.submit_combat_action(run, CombatAction.ATTACK)

        self.assertEqual(CombatOutcome.VICTORY, result.outcome)
        self.assertEqual("Victory", run.scene.title)
        self.assertEqual(3, run.state.points)
        _choose(controller, run, 0)
        self.assertIn(Site.DEEP_WOODS, run.state.visited_sites)
        self.assertIsInstance(run.phase, IdlePhase)

    def test_fleeing_at_a_cliff_still_risks_a_fall(self) -> None:
        controller = _controller(1, 2, 5)
        run = _run()

        controller.execute(run, fight_step(Site.CLIFF))
        controller.submit_combat_action(run, CombatAction.FLEE)

        self.assertEqual(13, run.state.hp)
        self.assertIn(Site.CLIFF, run.state.escaped_sites)
        self.assertIsInstance(run.phase, IdlePhase)

    def test_snares_without_rope_hurt_then_finish_the_encounter(self) -> None:
        controller = _controller(2, 2, 4, 3)
        run = _run()

        controller.execute(run, step(StepKind.EXPLORE, site=Site.DEEP_WOODS))

        self.assertEqual(11, run.state.hp)
        self.assertIn(Site.DEEP_WOODS, run.state.visited_sites)
        self.assertIsInstance(run.phase, IdlePhase)

    def test_deadly_snares_end_the_run(self) -> None:
        controller = _controller(2, 1, 6)
        run = _run(hp=3)

        controller.execute(run, step(StepKind.EXPLORE, site=Site.MEADOW))

        self.assertIsInstance(run.phase, DeadPhase)

    def test_answered_riddle_offers_a_reward(self) -> None:
        controller = _controller(3, 5)
        run = _run()

        controller.execute(run, step(StepKind.EXPLORE, site=Site.DEEP_WOODS))
        _choose(controller, run, 0)
        self.assertEqual(["6 Dutki", "3 Points"], run.scene.labels())
        _choose(controller, run, 1)

        self.assertEqual(3, run.state.points)
        self.assertIn(Site.DEEP_WOODS, run.state.visited_sites)

    def test_merchant_opens_a_shop_and_leaving_returns_to_the_map(self) -> None:
        controller = _controller(6)
        run = _run()

        controller.execute(run, step(StepKind.EXPLORE, site=Site.DEEP_WOODS))
        self.assertIsInstance(run.phase, ShopPhase)
        self.assertEqual("merchant", run.phase.mode)
        self.assertIn(Site.DEEP_WOODS, run.state.visited_sites)

        controller.leave_shop(run)

        self.assertIsInstance(run.phase, IdlePhase)


class TravelTests(unittest.TestCase):
    def test_revisiting_the_meadow_can_bring_an_ambush_without_a_flee_die(self) -> None:
        controller = _controller(4, 4, 1, 1)
        run = _run()
        run.state.mark_visited(Site.MEADOW)

        controller.travel(run)
        self.assertEqual(["Prepare"], run.scene.labels())
        _choose(controller, run, 0)

        self.assertIsInstance(run.phase, CombatPhase)
        self.assertEqual(EnemyId.HAJDUK, run.combat.enemy.id)
        self.assertEqual(0, run.combat.config.flee_die)

    def test_first_arrival_offers_exploration(self) -> None:
        controller = _controller(3, 2)
        run = _run()

        controller.travel(run)

        self.assertEqual(Site.BURROW.value, run.scene.title)
        self.assertEqual(["Explore"], run.scene.labels())
        self.assertEqual(Site.BURROW, run.state.current_location)

    def test_village_sets_the_roll_modifier_and_offers_rest(self) -> None:
        controller = _controller(3)
        run = _run(hp=5)

        controller.execute(run, step(StepKind.EXPLORE, site=Site.VILLAGE))
        self.assertEqual(-1, run.state.location_roll_modifier)
        self.assertEqual(["Trade", "Rest", "Leave"], run.scene.labels())
        _choose(controller, run, 1)

        self.assertEqual(14, run.state.hp)
        self.assertEqual(0, run.state.village_cooldown)

    def test_divination_picks_the_destination_and_spends_the_sigil(self) -> None:
        controller = _controller()
        run = _run()
        run.state.add_scroll(Scroll(ScrollType.DIVINATION_SIGIL, 1))

        controller.offer_divination(run)
        self.assertEqual(12, len(run.scene.choices))
        _choose(controller, run, 11)

        self.assertEqual([], run.state.inventory.scrolls)
        self.assertEqual(Site.VILLAGE, run.state.current_location)
        self.assertEqual(Site.VILLAGE.value, run.scene.title)


class PeakBlackTests(unittest.TestCase):
    def test_unprepared_climber_must_fight_the_spirit(self) -> None:
        controller = _controller()
        run = _run()

        controller.execute(run, step(StepKind.EXPLORE, site=Site.PEAK_BLACK))

        self.assertEqual(EnemyId.SPIRIT, run.combat.enemy.id)
        self.assertFalse(run.combat.allow_cap)

    def test_prepared_climber_receives_the_title_and_treasure(self) -> None:
        controller = _controller(2, 3, 4, 4, 4, 2)
        run = _run(coins=1)
        for site in PEAK_REQUIREMENTS:
            run.state.mark_visited(site)

        controller.execute(run, step(StepKind.EXPLORE, site=Site.PEAK_BLACK))
        self.assertEqual(["Accept Greatness"], run.scene.labels())
        _choose(controller, run, 0)

        self.assertTrue(run.state.has_advancement(AdvancementId.HARNAS_TITLE))
        self.assertTrue(run.state.has_advancement(AdvancementId.HIT_BONUS))
        self.assertEqual(7, run.state.coins)
        self.assertEqual(3, len(run.state.inventory.scrolls))
        self.assertIn(Site.PEAK_BLACK, run.state.visited_sites)
        self.assertEqual("Advancement!", run.scene.title)


class AdvancementSequenceTests(unittest.TestCase):
    def test_each_grant_waits_for_the_player(self) -> None:
        controller = _controller(2, 3)
        run = _run()

        controller.execute(run, step(StepKind.ADVANCE, remaining=2))
        self.assertEqual(1, run.state.permanent_hit_bonus)
        _choose(controller, run, 0)
        self.assertEqual(20, run.state.hp_max)
        _choose(controller, run, 0)

        self.assertIsInstance(run.phase, IdlePhase)

    def test_run_is_won_in_the_middle_of_a_sequence(self) -> None:
        controller = _controller(2, 5)
        run = _run()
        for advancement in (1, 2, 3, 4):
            run.state.grant_advancement(advancement)
        run.state.grant_advancement(AdvancementId.RESILIENCE, halve_scanty=EnemyId.BIES, halve_hardy=EnemyId.SPOOK)

        controller.execute(run, step(StepKind.ADVANCE, remaining=2))

        self.assertIsInstance(run.phase, WonPhase)
        self.assertEqual(WeaponType.SCATTERGUN, run.state.weapon.name)

    def test_resilience_asks_for_one_enemy_of_each_tier(self) -> None:
        controller = _controller(6)
        run = _run()

        controller.execute(run, step(StepKind.ADVANCE, remaining=1))
        self.assertEqual(["Hajduk", "Bies", "Poacher", "Wolf"], run.scene.labels())
        _choose(controller, run, 3)
        self.assertEqual(["Undine", "Bear", "Highwayman", "Spook"], run.scene.labels())
        _choose(controller, run, 1)

        self.assertEqual({EnemyCategory.SCANTY: EnemyId.WOLF, EnemyCategory.HARDY: EnemyId.BEAR}, run.state.half_damage)
        self.assertIsInstance(run.phase, IdlePhase)

    def test_exhausted_count_falls_through_to_the_continuation(self) -> None:
        controller = _controller()
        run = _run()

        controller.execute(run, step(StepKind.ADVANCE, then=step(StepKind.VILLAGE), remaining=0))

        self.assertEqual(Site.VILLAGE.value, run.scene.title)


class DriverTests(unittest.TestCase):
    def test_missing_handler_is_reported(self) -> None:
        controller = _controller()
        controller._handlers.pop(StepKind.QUIET)

        with self.assertRaises(ValueError):
            controller.execute(_run(), step(StepKind.QUIET))

    def test_every_step_kind_has_a_handler(self) -> None:
        controller = _controller()

        self.assertEqual(set(StepKind), set(controller._handlers))

    def test_finished_run_executes_nothing(self) -> None:
        controller = _controller()
        run = _run(hp=0)

        controller.execute(run, step(StepKind.MOUNTAIN_PASS))

        self.assertIsInstance(run.phase, DeadPhase)


if __name__ == "__main__":
    unittest.main()
