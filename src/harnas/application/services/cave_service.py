import logging
from typing import Dict, Optional

from harnas.application.services.balance_tables import CAVE_EXIT_AMBUSH_ROLL
from harnas.application.services.scene_support import (
    SceneSupport,
    StepHandler,
    choice,
    continue_choices,
    fight_step,
)
from harnas.domain.models.character import REST_COOLDOWN_READY
from harnas.domain.models.combat import RewardTag
from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.items import FORBIDDEN_UNDINE_WEAPONS
from harnas.domain.models.location import Site
from harnas.domain.models.scene import Step, StepKind, step
from harnas.domain.models.session import RunSession


logger = logging.getLogger(__name__)

SWIM_FAIL_MAX = 2
SWIM_UNDINE_MAX = 4


class CaveService(SceneSupport):
    """The cave under the Burrow: one d6 outcome per step deeper."""

    def handlers(self) -> Dict[StepKind, StepHandler]:
        return {
            StepKind.ENTER_CAVE: self.enter,
            StepKind.CAVE_ROLL: self.roll,
            StepKind.CAVE_PROMPT: self.prompt,
            StepKind.CAVE_EXIT: self.exit,
            StepKind.CAVE_SURFACE: self.surface,
            StepKind.CAVE_TO_PEAK: self.to_peak,
        }

    def _explored_then_prompt(self) -> Step:
        return self.visit_then(Site.CAVE, step(StepKind.CAVE_PROMPT))

    def enter(self, run: RunSession, current: Step) -> Optional[Step]:
        run.state.in_cave = True
        run.state.current_location = Site.CAVE
        run.log("You climb down into the cave.")
        return step(StepKind.CAVE_ROLL)

    def roll(self, run: RunSession, current: Step) -> Optional[Step]:
        outcome = self.dice.d6()
        logger.debug("Cave roll %s", outcome)
        if outcome == 1:
            self.present(
                run,
                "Cave",
                self.with_lore("The cavern is dark and damp, but empty.", Site.CAVE),
                continue_choices(self._explored_then_prompt()),
            )
            return None
        if outcome == 2:
            return self._flooded_pool(run)
        if outcome == 3:
            return fight_step(Site.CAVE, hardy=True, reward_tags=(RewardTag.CAVE_CONTINUE,))
        if outcome == 4:
            return self._spring(run)
        if outcome == 5:
            self._offer_exit(run, "You find an exit to the surface.")
            return None
        return self._hidden_passage(run)

    def _flooded_pool(self, run: RunSession) -> Optional[Step]:
        state = run.state
        swim = self.dice.d6() + (0 if state.inventory.has_kaftan else 1)
        if swim <= SWIM_FAIL_MAX:
            damage = state.take_damage(self.dice.d6())
            if not state.alive:
                return None
            self.present(
                run,
                "Flooded Cavern",
                self.with_lore(f"The water is too deep. You lose {damage} HP and must turn back.", Site.CAVE),
                continue_choices(step(StepKind.CAVE_EXIT), label="Retreat"),
            )
            return None
        if swim <= SWIM_UNDINE_MAX:
            return fight_step(
                Site.CAVE,
                hardy=True,
                enemy=EnemyId.UNDINE,
                forbidden_weapons=FORBIDDEN_UNDINE_WEAPONS,
                reward_tags=(RewardTag.CAVE_CONTINUE,),
            )
        state.inventory.has_spirit_heart = True
        self.present(
            run,
            "Flooded Cavern",
            self.with_lore("You find the Mountain Spirit's heart at the bottom of the pool.", Site.CAVE),
            continue_choices(self._explored_then_prompt()),
        )
        return None

    def _spring(self, run: RunSession) -> Optional[Step]:
        can_drink = run.state.spring_cooldown >= REST_COOLDOWN_READY
        description = (
            "Drink from the spring to restore to full HP." if can_drink else "The spring has lost its power for now."
        )
        choices = []
        if can_drink:
            choices.append(choice("Drink", step(StepKind.REST, then=self._explored_then_prompt(), place="spring")))
        choices.append(choice("Leave It", self._explored_then_prompt()))
        self.present(run, "Spring of Life", self.with_lore(description, Site.CAVE), choices)
        return None

    def _offer_exit(self, run: RunSession, description: str) -> None:
        self.present(
            run,
            "Cave Exit",
            self.with_lore(description, Site.CAVE),
            continue_choices(step(StepKind.CAVE_SURFACE), label="Exit"),
        )

    def _hidden_passage(self, run: RunSession) -> Optional[Step]:
        state = run.state
        if not state.cave_hidden_passage_seen:
            state.cave_hidden_passage_seen = True
            return fight_step(Site.CAVE, hardy=True, reward_tags=(RewardTag.ENTER_MANOR,))
        passage = self.dice.d6()
        if passage <= 3:
            return fight_step(Site.CAVE, hardy=True, reward_tags=(RewardTag.CAVE_CONTINUE,))
        if passage <= 5:
            self._offer_exit(run, "You find the exit to the surface.")
            return None
        self.present(
            run,
            "Hidden Passage",
            self.with_lore("A path leads to Peak Black.", Site.CAVE),
            continue_choices(step(StepKind.CAVE_TO_PEAK), label="Follow It"),
        )
        return None

    def prompt(self, run: RunSession, current: Step) -> Optional[Step]:
        self.present(
            run,
            "Cave",
            self.with_lore("Do you go deeper or try to leave the cave?", Site.CAVE),
            [
                choice("Go Deeper", step(StepKind.CAVE_ROLL)),
                choice("Exit Cave", step(StepKind.CAVE_EXIT)),
            ],
        )
        return None

    def exit(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        state.in_cave = False
        if self.dice.d4() == CAVE_EXIT_AMBUSH_ROLL:
            run.log("Something follows you to the cave mouth.")
            return fight_step(Site.CAVE, hardy=True)
        run.log("You leave the cave.")
        return step(StepKind.RETURN_TO_MAP)

    def surface(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        self.mark_visited(state, Site.CAVE)
        state.in_cave = False
        state.current_location = Site.MOUNTAIN_PASS
        return step(StepKind.MOUNTAIN_PASS)

    def to_peak(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        self.mark_visited(state, Site.CAVE)
        state.in_cave = False
        state.current_location = Site.PEAK_BLACK
        return step(StepKind.PEAK_BLACK)
