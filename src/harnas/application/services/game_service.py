import logging
import threading
import time
from collections.abc import Callable
from typing import List, Optional

from harnas.application.dtos import (
    ActionResult,
    CharacterSnapshotView,
    CombatView,
    DiceRollView,
    GameView,
    SceneView,
    ShopView,
    TerminalView,
)
from harnas.application.mappers.game_service_mapper import (
    to_character_snapshot_view,
    to_combat_view,
    to_dice_roll_view,
    to_scene_view,
    to_scroll_action_view,
    to_shop_view,
    to_terminal_view,
)
from harnas.application.services.character_creation_service import CharacterCreationService
from harnas.application.services.chronicle_service import RunChronicle, register_chronicle_handlers
from harnas.application.services.combat_service import CombatService
from harnas.application.services.dice import Dice
from harnas.application.services.encounter_service import EncounterService
from harnas.application.services.event_bus import EventBus
from harnas.application.services.progression_service import ProgressionService
from harnas.application.services.reward_service import RewardService
from harnas.application.services.run_supervisor import RunSupervisor
from harnas.application.services.scene_service import SceneController
from harnas.application.services.shop_service import ShopService
from harnas.domain.models.combat import CombatAction
from harnas.domain.models.items import ScrollType
from harnas.domain.models.scene import (
    CombatPhase,
    DeadPhase,
    IdlePhase,
    ScenePhase,
    ShopPhase,
    StepKind,
    WonPhase,
    step,
)
from harnas.domain.models.session import DEFAULT_MESSAGE_LOG_LIMIT, RunSession
from harnas.domain.repositories import LoreRepository


logger = logging.getLogger(__name__)

DEFAULT_ROLL_DELAY_S = 0.65
OPENING_MESSAGE = "You begin your journey at the Mountain Pass."


class GameService:
    """Inbound surface of a run.

    Every command goes through one busy guard: while an action (and its
    pacing delay) is resolving, any other command is rejected with reason
    ``"busy"``. Commands never raise for bad input; they return a rejected
    ActionResult instead.
    """

    def __init__(
        self,
        dice: Dice,
        lore_repo: Optional[LoreRepository] = None,
        event_bus: Optional[EventBus] = None,
        roll_delay_s: float = DEFAULT_ROLL_DELAY_S,
        message_limit: int = DEFAULT_MESSAGE_LOG_LIMIT,
    ) -> None:
        self.dice = dice
        self.lore_repo = lore_repo
        self.event_bus = event_bus or EventBus()
        self.roll_delay_s = max(0.0, float(roll_delay_s))
        self.message_limit = message_limit
        self.chronicle = RunChronicle()
        register_chronicle_handlers(self.event_bus, self.chronicle)

        publish = self.event_bus.publish
        self.character_creation = CharacterCreationService(dice)
        self.rewards = RewardService(dice)
        self.combat = CombatService(dice, lore_repo=lore_repo, event_publisher=publish)
        self.encounters = EncounterService(dice)
        self.progression = ProgressionService(dice, event_publisher=publish)
        self.supervisor = RunSupervisor(event_publisher=publish)
        self.shop = ShopService(self.rewards)
        self.scenes = SceneController(
            dice,
            self.combat,
            self.rewards,
            self.encounters,
            self.progression,
            self.supervisor,
            lore_repo=lore_repo,
            event_publisher=publish,
        )
        self.run: Optional[RunSession] = None
        self._busy = threading.Lock()

    # -- guard --------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def _guarded(self, name: str, action: Callable[[], ActionResult]) -> ActionResult:
        if not self._busy.acquire(blocking=False):
            logger.debug("%s rejected: busy", name)
            return ActionResult.rejected("busy", "Still resolving the previous action.")
        try:
            if self.roll_delay_s > 0:
                time.sleep(self.roll_delay_s)
            before = self.run
            mark = before.logged_total if before is not None else 0
            result = action()
            if result.accepted and self.run is not None:
                if self.run is not before:
                    mark = 0
                if not result.messages:
                    result.messages = self.run.messages_since(mark)
                result.game_over = self.run.is_over
            if not result.accepted:
                logger.debug("%s rejected: %s", name, result.reason)
            return result
        finally:
            self._busy.release()

    def _active_run(self, *phases) -> Optional[ActionResult]:
        if self.run is None:
            return ActionResult.rejected("wrong_phase", "No run in progress.")
        if self.run.is_over:
            return ActionResult.rejected("run_over", "This run is over.")
        if phases and not isinstance(self.run.phase, phases):
            return ActionResult.rejected("wrong_phase", "That cannot be done right now.")
        return None

    # -- commands -----------------------------------------------------------

    def start_run_intent(self, name: str) -> ActionResult:
        def action() -> ActionResult:
            if self.run is not None and not self.run.is_over:
                return ActionResult.rejected("wrong_phase", "A run is already in progress.")
            character = self.character_creation.create_character(name)
            self.chronicle.reset()
            self.run = RunSession(state=character, message_limit=self.message_limit)
            self.run.log(OPENING_MESSAGE)
            self.scenes.execute(self.run, step(StepKind.MOUNTAIN_PASS))
            return ActionResult()

        return self._guarded("start_run", action)

    def travel_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(IdlePhase)
            if refusal:
                return refusal
            self.scenes.travel(self.run)
            return ActionResult()

        return self._guarded("travel", action)

    def submit_scene_choice_intent(self, index: int) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(ScenePhase)
            if refusal:
                return refusal
            choices = self.run.scene.choices
            if not isinstance(index, int) or index < 0 or index >= len(choices):
                return ActionResult.rejected("invalid_choice", "There is no such choice.")
            picked = choices[index]
            if not picked.enabled:
                return ActionResult.rejected("invalid_choice", f"{picked.label} is not available.")
            logger.debug("Scene choice %s: %s", index, picked.label)
            self.scenes.execute(self.run, picked.step)
            return ActionResult()

        return self._guarded("scene_choice", action)

    def submit_combat_action_intent(self, action_name: str, scroll_index: Optional[int] = None) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(CombatPhase)
            if refusal:
                return refusal
            try:
                combat_action = CombatAction(action_name)
            except ValueError:
                return ActionResult.rejected("invalid_choice", f"Unknown combat action: {action_name}")
            result = self.scenes.submit_combat_action(self.run, combat_action, scroll_index)
            if result.rejected:
                return ActionResult.rejected(result.reason)
            return ActionResult()

        return self._guarded("combat_action", action)

    def avoid_combat_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(CombatPhase)
            if refusal:
                return refusal
            result = self.scenes.avoid_with_cap(self.run)
            if result.rejected:
                return ActionResult.rejected(result.reason, "The cap cannot help you here.")
            return ActionResult()

        return self._guarded("avoid_combat", action)

    def drink_potion_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(IdlePhase, ScenePhase, ShopPhase)
            if refusal:
                return refusal
            state = self.run.state
            if state.inventory.potions <= 0:
                return ActionResult.rejected("no_potions", "You have no potions.")
            healed = state.heal(self.dice.d6())
            state.consume_potion()
            self.run.log(f"You drank a potion and healed {healed} HP.")
            return ActionResult()

        return self._guarded("drink_potion", action)

    def advance_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(IdlePhase)
            if refusal:
                return refusal
            state = self.run.state
            if not self.progression.can_manual_advance(state):
                return ActionResult.rejected("thresholds_unmet", "You need 15 points and 12 places to advance.")
            self.progression.pay_for_manual_advance(state)
            self.scenes.execute(self.run, step(StepKind.ADVANCE, remaining=1))
            return ActionResult()

        return self._guarded("advance", action)

    def buy_ducat_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(IdlePhase)
            if refusal:
                return refusal
            state = self.run.state
            if not self.progression.can_buy_ducat(state):
                return ActionResult.rejected("insufficient_coins", "A ducat costs 40 dutki.")
            self.progression.pay_for_ducat(state)
            self.run.log("You bought a ducat.")
            self.scenes.execute(self.run, step(StepKind.ADVANCE, remaining=1))
            return ActionResult()

        return self._guarded("buy_ducat", action)

    def buy_item_intent(self, item_id: str) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._shop_refusal()
            if refusal:
                return refusal
            result = self.shop.buy(self.run.state, self.run.phase.mode, item_id)
            self._log_trade(result)
            return result

        return self._guarded("buy_item", action)

    def sell_item_intent(self, item_id: str) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._shop_refusal()
            if refusal:
                return refusal
            result = self.shop.sell(self.run.state, item_id)
            self._log_trade(result)
            return result

        return self._guarded("sell_item", action)

    def _log_trade(self, result: ActionResult) -> None:
        if result.accepted:
            for message in result.messages:
                self.run.log(message)

    def leave_shop_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._shop_refusal()
            if refusal:
                return refusal
            self.scenes.leave_shop(self.run)
            return ActionResult()

        return self._guarded("leave_shop", action)

    def _shop_refusal(self) -> Optional[ActionResult]:
        refusal = self._active_run()
        if refusal:
            return refusal
        if not isinstance(self.run.phase, ShopPhase):
            return ActionResult.rejected("not_in_shop", "There is no one to trade with here.")
        return None

    def use_divination_intent(self) -> ActionResult:
        def action() -> ActionResult:
            refusal = self._active_run(IdlePhase)
            if refusal:
                return refusal
            state = self.run.state
            if state.in_cave:
                return ActionResult.rejected("in_cave", "The sigil's light does not reach the cave.")
            if state.inventory.find_scroll(ScrollType.DIVINATION_SIGIL) is None:
                return ActionResult.rejected("no_scroll", "You carry no divination sigil.")
            self.scenes.offer_divination(self.run)
            return ActionResult()

        return self._guarded("use_divination", action)

    # -- queries ------------------------------------------------------------

    def get_character_snapshot(self) -> Optional[CharacterSnapshotView]:
        if self.run is None:
            return None
        state = self.run.state
        idle = isinstance(self.run.phase, IdlePhase)
        return to_character_snapshot_view(
            state,
            can_advance=idle and self.progression.can_manual_advance(state),
            can_buy_ducat=idle and self.progression.can_buy_ducat(state),
            can_use_divination=idle
            and not state.in_cave
            and state.inventory.find_scroll(ScrollType.DIVINATION_SIGIL) is not None,
            can_drink_potion=not self.run.is_over
            and not isinstance(self.run.phase, CombatPhase)
            and state.inventory.potions > 0,
        )

    def get_scene_view(self) -> Optional[SceneView]:
        if self.run is None or self.run.scene is None:
            return None
        return to_scene_view(self.run.scene)

    def get_combat_view(self) -> Optional[CombatView]:
        if self.run is None or self.run.combat is None:
            return None
        state = self.run.state
        session = self.run.combat
        scrolls = [
            to_scroll_action_view(index=option.index, label=option.label, enabled=option.enabled)
            for option in self.combat.scroll_options(state, session)
        ]
        return to_combat_view(
            enemy_name=session.enemy.name,
            enemy_hp=session.enemy.hp_current,
            enemy_hp_max=session.enemy.hp_max,
            message=session.message,
            lore=session.lore,
            turn=session.turn,
            weapon_label=self.combat.effective_weapon(state, session).label,
            can_drink_potion=state.inventory.potions > 0,
            can_avoid=self.combat.can_avoid(state, session),
            flee_die=session.config.flee_die,
            scrolls=scrolls,
        )

    def get_shop_view(self) -> Optional[ShopView]:
        if self.run is None or not isinstance(self.run.phase, ShopPhase):
            return None
        state = self.run.state
        mode = self.run.phase.mode
        return to_shop_view(
            title=self.shop.title(mode),
            coins=state.coins,
            buy=self.shop.buy_offers(state, mode),
            sell=self.shop.sell_offers(state),
        )

    def get_terminal_view(self) -> Optional[TerminalView]:
        if self.run is None:
            return None
        if isinstance(self.run.phase, WonPhase):
            return to_terminal_view(outcome="won", summary=self.chronicle.summary())
        if isinstance(self.run.phase, DeadPhase):
            return to_terminal_view(outcome="dead", summary=self.chronicle.summary())
        return None

    def recent_messages(self) -> List[str]:
        return self.run.recent_messages() if self.run is not None else []

    def recent_rolls(self) -> List[DiceRollView]:
        return [to_dice_roll_view(record) for record in self.dice.last_rolls()]

    def get_game_view(self) -> GameView:
        phase = self.run.phase.kind if self.run is not None else "start"
        return GameView(
            phase=phase,
            character=self.get_character_snapshot(),
            scene=self.get_scene_view(),
            combat=self.get_combat_view(),
            shop=self.get_shop_view(),
            terminal=self.get_terminal_view(),
            messages=self.recent_messages(),
            dice=self.recent_rolls(),
        )
