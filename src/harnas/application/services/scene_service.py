import logging
from typing import Callable, Dict, Optional

from harnas.application.services.balance_tables import (
    FALL_CHECK_FAIL_MAX,
    FALL_TRIGGER_MAX,
    RIDDLE_REWARD_COINS,
    RIDDLE_REWARD_POINTS,
    ROPE_ROLL_BONUS,
    SNARE_FAIL_MAX,
    VILLAGE_LOCATION_ROLL_MODIFIER,
    fall_damage,
    hut_rest_heal,
    village_rest_heal,
)
from harnas.application.services.cave_service import CaveService
from harnas.application.services.combat_service import CombatService
from harnas.application.services.dice import Dice
from harnas.application.services.encounter_service import EncounterService
from harnas.application.services.manor_service import ManorService
from harnas.application.services.progression_service import ProgressionService
from harnas.application.services.reward_service import RewardService
from harnas.application.services.run_supervisor import RunSupervisor
from harnas.application.services.scene_support import (
    SceneSupport,
    StepHandler,
    choice,
    continue_choices,
    fight_step,
)
from harnas.domain.models.character import REST_COOLDOWN_READY
from harnas.domain.models.combat import (
    DEFAULT_FLEE_DIE,
    CombatAction,
    CombatOutcome,
    CombatSession,
    CombatTurnResult,
    RewardTag,
)
from harnas.domain.models.enemy import HARDY_ENEMIES, SCANTY_ENEMIES, EnemyId
from harnas.domain.models.items import ScrollType
from harnas.domain.models.location import (
    FALL_RISK_SITES,
    LOCATION_SUMMARIES,
    LOCATION_TABLE,
    PEAK_REQUIREMENTS,
    Site,
)
from harnas.domain.models.progression import AdvancementId, advancement_label
from harnas.domain.models.scene import CombatPhase, IdlePhase, ShopPhase, Step, StepKind, step
from harnas.domain.models.session import RunSession
from harnas.domain.repositories import LoreRepository


logger = logging.getLogger(__name__)

MEADOW_FLEE_DIE = 0
PEAK_TREASURE_SCROLLS = 3


class SceneController(SceneSupport):
    """Runs continuation chains until the player has something to answer.

    Every step is dispatched to a handler by its kind. Handlers either return
    the next step to run at once or leave a scene, fight or shop on screen and
    return None. Terminal conditions are checked before each step runs.
    """

    def __init__(
        self,
        dice: Dice,
        combat: CombatService,
        rewards: RewardService,
        encounters: EncounterService,
        progression: ProgressionService,
        supervisor: RunSupervisor,
        manor: Optional[ManorService] = None,
        cave: Optional[CaveService] = None,
        lore_repo: Optional[LoreRepository] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        super().__init__(dice, lore_repo=lore_repo, event_publisher=event_publisher)
        self.combat = combat
        self.rewards = rewards
        self.encounters = encounters
        self.progression = progression
        self.supervisor = supervisor
        self.manor = manor or ManorService(
            dice, rewards, progression, lore_repo=lore_repo, event_publisher=event_publisher
        )
        self.cave = cave or CaveService(dice, lore_repo=lore_repo, event_publisher=event_publisher)
        self._handlers: Dict[StepKind, StepHandler] = self.handlers()
        self._handlers.update(self.manor.handlers())
        self._handlers.update(self.cave.handlers())

    def handlers(self) -> Dict[StepKind, StepHandler]:
        return {
            StepKind.RETURN_TO_MAP: self._return_to_map,
            StepKind.DISPATCH: self._dispatch,
            StepKind.EXPLORE: self._explore,
            StepKind.DIVINE: self._divine,
            StepKind.START_FIGHT: self._start_fight,
            StepKind.MARK_VISITED: self._mark_visited,
            StepKind.FIND_OBJECT: self._find_object,
            StepKind.FIND_SCROLL: self._find_scroll,
            StepKind.QUIET: self._quiet,
            StepKind.MOUNTAIN_PASS: self._mountain_pass,
            StepKind.ENCOUNTER: self._encounter,
            StepKind.SNARES: self._snares,
            StepKind.RIDDLE: self._riddle,
            StepKind.RIDDLE_REWARD: self._riddle_reward,
            StepKind.FALL_RISK: self._fall_risk,
            StepKind.FALL: self._fall,
            StepKind.OPEN_SHOP: self._open_shop,
            StepKind.BURROW_TUNNEL: self._burrow_tunnel,
            StepKind.HUT_REST_OFFER: self._hut_rest_offer,
            StepKind.VILLAGE: self._village,
            StepKind.REST: self._rest,
            StepKind.PEAK_BLACK: self._peak_black,
            StepKind.PEAK_ACCEPT: self._peak_accept,
            StepKind.ADVANCE: self._advance,
            StepKind.ADVANCE_PICK_HARDY: self._advance_pick_hardy,
            StepKind.ADVANCE_HALVE: self._advance_halve,
        }

    # -- driving ------------------------------------------------------------

    def execute(self, run: RunSession, first: Optional[Step]) -> None:
        current = first
        while current is not None:
            if self.supervisor.check(run):
                return
            handler = self._handlers.get(current.kind)
            if handler is None:
                raise ValueError(f"No handler for continuation kind {current.kind!r}")
            logger.debug("Executing %s", current.kind.value)
            current = handler(run, current)
        self.supervisor.check(run)

    def travel(self, run: RunSession) -> None:
        if run.state.in_cave:
            self.execute(run, step(StepKind.CAVE_ROLL))
            return
        location_id = self.encounters.roll_location(run.state)
        self.execute(run, step(StepKind.DISPATCH, location_id=location_id))

    def offer_divination(self, run: RunSession) -> None:
        choices = [
            choice(site.value, step(StepKind.DIVINE, location_id=location_id))
            for location_id, site in sorted(LOCATION_TABLE.items())
        ]
        self.present(run, "Divination Sigil", "Choose the next place in the mountains.", choices)

    def leave_shop(self, run: RunSession) -> None:
        phase = run.phase
        then = phase.then if isinstance(phase, ShopPhase) else None
        self.execute(run, then or step(StepKind.RETURN_TO_MAP))

    # -- combat -------------------------------------------------------------

    def submit_combat_action(
        self,
        run: RunSession,
        action: CombatAction,
        scroll_index: Optional[int] = None,
    ) -> CombatTurnResult:
        session = run.combat
        result = self.combat.resolve_turn(run.state, session, action, scroll_index)
        if not result.rejected:
            self._after_combat_turn(run, session, result)
        return result

    def avoid_with_cap(self, run: RunSession) -> CombatTurnResult:
        session = run.combat
        result = self.combat.avoid_with_cap(run.state, session)
        if not result.rejected:
            self._after_combat_turn(run, session, result)
        return result

    def _after_combat_turn(self, run: RunSession, session: CombatSession, result: CombatTurnResult) -> None:
        for message in result.messages:
            run.log(message)
        if self.supervisor.check(run):
            return
        if session.outcome == CombatOutcome.VICTORY:
            reward = self.rewards.resolve_victory(run.state, session)
            run.log(reward.text)
            self.present(
                run,
                "Victory",
                reward.text,
                continue_choices(self.visit_then(session.site, reward.follow_up), label="Move On"),
            )
            self.supervisor.check(run)
        elif session.outcome in (CombatOutcome.FLED, CombatOutcome.AVOIDED):
            self.execute(run, self._after_escape(session.site))

    @staticmethod
    def _after_escape(site: Site) -> Step:
        if site in FALL_RISK_SITES:
            return step(StepKind.FALL_RISK, then=step(StepKind.RETURN_TO_MAP), site=site)
        return step(StepKind.RETURN_TO_MAP)

    # -- basic steps --------------------------------------------------------

    def _return_to_map(self, run: RunSession, current: Step) -> Optional[Step]:
        run.phase = IdlePhase()
        return None

    def _start_fight(self, run: RunSession, current: Step) -> Optional[Step]:
        session = self.combat.start(run.state, current.param("config"))
        run.log(session.message)
        run.phase = CombatPhase(session)
        return None

    def _mark_visited(self, run: RunSession, current: Step) -> Optional[Step]:
        self.mark_visited(run.state, Site(current.param("site")))
        return self.then_or_map(current)

    def _find_object(self, run: RunSession, current: Step) -> Optional[Step]:
        run.log(f"Found: {self.rewards.grant_random_object(run.state)}")
        return self.then_or_map(current)

    def _find_scroll(self, run: RunSession, current: Step) -> Optional[Step]:
        run.state.add_scroll(self.rewards.create_random_scroll())
        run.log("Found a scroll.")
        return self.then_or_map(current)

    def _quiet(self, run: RunSession, current: Step) -> Optional[Step]:
        run.log(current.param("message", ""))
        return self.then_or_map(current)

    def _open_shop(self, run: RunSession, current: Step) -> Optional[Step]:
        run.phase = ShopPhase(mode=current.param("mode", "merchant"), then=current.then)
        return None

    def _rest(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        place = current.param("place")
        if place == "hut":
            healed = state.heal(hut_rest_heal(self.dice.d6()))
            state.hut_cooldown = 0
        elif place == "village":
            healed = state.heal(village_rest_heal(self.dice.d6()))
            state.village_cooldown = 0
        elif place == "spring":
            before = state.hp
            state.heal_full()
            healed = state.hp - before
            state.spring_cooldown = 0
        else:
            raise ValueError(f"Unknown resting place: {place!r}")
        state.temporary_hit_penalty = 0
        run.log(f"You rested and regained {healed} HP.")
        return self.then_or_map(current)

    # -- arriving -----------------------------------------------------------

    def _dispatch(self, run: RunSession, current: Step) -> Optional[Step]:
        decision = self.encounters.dispatch(run.state, int(current.param("location_id")))
        site = decision.site
        if decision.revisit and decision.ambush:
            flee_die = MEADOW_FLEE_DIE if site == Site.MEADOW else DEFAULT_FLEE_DIE
            self.present(
                run,
                site.value,
                "You return to a familiar place. An enemy approaches.",
                continue_choices(fight_step(site, flee_die=flee_die), label="Prepare"),
            )
        elif decision.revisit:
            self.present(
                run,
                site.value,
                "You return to a familiar place. It is empty.",
                continue_choices(step(StepKind.RETURN_TO_MAP)),
            )
        else:
            self.present(
                run,
                site.value,
                self.with_lore(LOCATION_SUMMARIES[site], site),
                continue_choices(step(StepKind.EXPLORE, site=site), label="Explore"),
            )
        return None

    def _divine(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        index = state.inventory.find_scroll(ScrollType.DIVINATION_SIGIL)
        if index is not None:
            state.spend_scroll_charge(index)
        return step(StepKind.DISPATCH, location_id=current.param("location_id"))

    def _explore(self, run: RunSession, current: Step) -> Optional[Step]:
        site = Site(current.param("site"))
        to_map = step(StepKind.RETURN_TO_MAP)
        if site == Site.PEAK_BLACK:
            return step(StepKind.PEAK_BLACK)
        if site == Site.MANOR:
            return step(StepKind.ENTER_MANOR, from_cave=False)
        if site in FALL_RISK_SITES:
            after = step(StepKind.FALL_RISK, then=self.visit_then(site, to_map), site=site)
            return self._encounter_step(site, after, auto_visit=False, reward_tags=(RewardTag.FALL_RISK,))
        if site == Site.BURROW:
            return self._encounter_step(site, step(StepKind.BURROW_TUNNEL))
        if site == Site.MEADOW:
            return self._encounter_step(site, None, flee_die=MEADOW_FLEE_DIE)
        if site == Site.HUT:
            return self._encounter_step(site, step(StepKind.HUT_REST_OFFER))
        if site == Site.MOUNTAIN_PASS:
            return step(StepKind.MOUNTAIN_PASS)
        if site == Site.VILLAGE:
            return step(StepKind.VILLAGE)
        return self._encounter_step(site, None)

    # -- location scripts ---------------------------------------------------

    def _mountain_pass(self, run: RunSession, current: Step) -> Optional[Step]:
        site = Site.MOUNTAIN_PASS
        explored = self.visit_then(site, step(StepKind.RETURN_TO_MAP))
        roll = self.dice.d4()
        if roll == 1:
            title = "Highwaymen's Hideout"
            description = (
                "You find an object buried by a highwayman. "
                "A rusted dagger marks the spot, as if it was meant to be returned."
            )
            outcome = step(StepKind.FIND_OBJECT, then=explored)
        elif roll == 2:
            title = "Vermin Ridge"
            description = "A Scanty Enemy lurks here, drawn by the scent of travelers and the promise of easy spoils."
            outcome = fight_step(site)
        elif roll == 3:
            title = "Bottom of a Cliff"
            description = "You find a scroll on the body of a dead juhas, the ink smeared by rain and prayer."
            outcome = step(StepKind.FIND_SCROLL, then=explored)
        else:
            title = "Misty Valley"
            description = "Creepily empty and quiet, as if the valley is holding its breath."
            outcome = step(StepKind.QUIET, then=explored, message="The valley is eerily silent.")
        self.present(run, f"Mountain Pass: {title}", self.with_lore(description, site), continue_choices(outcome))
        return None

    def _burrow_tunnel(self, run: RunSession, current: Step) -> Optional[Step]:
        self.present(
            run,
            Site.BURROW.value,
            self.with_lore("A tunnel leads into the Cave.", Site.BURROW),
            [
                choice("Enter the Cave", step(StepKind.ENTER_CAVE)),
                choice("Leave It", step(StepKind.RETURN_TO_MAP)),
            ],
        )
        return None

    def _hut_rest_offer(self, run: RunSession, current: Step) -> Optional[Step]:
        can_rest = run.state.hut_cooldown >= REST_COOLDOWN_READY
        description = "You can rest here and regain d6+2 HP." if can_rest else "You cannot rest here again yet."
        choices = []
        if can_rest:
            choices.append(choice("Rest", step(StepKind.REST, place="hut")))
        choices.append(choice("Leave", step(StepKind.RETURN_TO_MAP)))
        self.present(run, "Bacówka", self.with_lore(description, Site.HUT), choices)
        return None

    def _village(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        self.mark_visited(state, Site.VILLAGE)
        state.location_roll_modifier = VILLAGE_LOCATION_ROLL_MODIFIER
        choices = [choice("Trade", step(StepKind.OPEN_SHOP, mode="village"))]
        if state.village_cooldown >= REST_COOLDOWN_READY:
            choices.append(choice("Rest", step(StepKind.REST, place="village")))
        choices.append(choice("Leave", step(StepKind.RETURN_TO_MAP)))
        self.present(
            run,
            Site.VILLAGE.value,
            self.with_lore("You can trade here, and rest if enough time has passed.", Site.VILLAGE),
            choices,
        )
        return None

    def _peak_black(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        if all(site in state.visited_sites for site in PEAK_REQUIREMENTS):
            self.present(
                run,
                "Spirit of the Mountains",
                self.with_lore(
                    "The Spirit bestows the title of Harnaś upon you, along with its treasure and two other Advancements.",
                    Site.PEAK_BLACK,
                ),
                continue_choices(step(StepKind.PEAK_ACCEPT), label="Accept Greatness"),
            )
            return None
        return fight_step(Site.PEAK_BLACK, hardy=True, enemy=EnemyId.SPIRIT, allow_cap=False)

    def _peak_accept(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        self.progression.grant(state, AdvancementId.HARNAS_TITLE)
        treasure = self.dice.d6() * self.dice.d6()
        state.coins += treasure
        for _ in range(PEAK_TREASURE_SCROLLS):
            state.add_scroll(self.rewards.create_random_scroll())
        run.log(f"The Spirit's treasure grants {treasure} dutki and three scrolls.")
        self.mark_visited(state, Site.PEAK_BLACK)
        return step(StepKind.ADVANCE, then=step(StepKind.RETURN_TO_MAP), remaining=2)

    # -- generic encounter table --------------------------------------------

    @staticmethod
    def _encounter_step(
        site: Site,
        then: Optional[Step],
        *,
        auto_visit: bool = True,
        flee_die: int = DEFAULT_FLEE_DIE,
        reward_tags=(),
    ) -> Step:
        return step(
            StepKind.ENCOUNTER,
            then=then,
            site=site,
            auto_visit=auto_visit,
            flee_die=flee_die,
            reward_tags=tuple(reward_tags),
        )

    def _finish_encounter(self, run: RunSession, current: Step) -> Step:
        if current.param("auto_visit", True):
            self.mark_visited(run.state, Site(current.param("site")))
        return self.then_or_map(current)

    @staticmethod
    def _follow_on(kind: StepKind, current: Step, **extra) -> Step:
        params = dict(current.params)
        params.update(extra)
        return step(kind, then=current.then, **params)

    def _encounter(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        site = Site(current.param("site"))
        tags = tuple(current.param("reward_tags", ()))
        flee_die = int(current.param("flee_die", DEFAULT_FLEE_DIE))
        roll = self.dice.d6()
        logger.debug("Encounter roll %s at %s", roll, site.value)
        if roll == 1:
            run.log("Nothing happens.")
            return self._finish_encounter(run, current)
        if roll == 2:
            if state.inventory.has_rope:
                self.present(
                    run,
                    "Snares",
                    "Use your rope to add +1 to the roll?",
                    [
                        choice("Use Rope", self._follow_on(StepKind.SNARES, current, use_rope=True)),
                        choice("Do Not Use Rope", self._follow_on(StepKind.SNARES, current, use_rope=False)),
                    ],
                )
                return None
            return self._follow_on(StepKind.SNARES, current, use_rope=False)
        if roll == 3:
            self.present(
                run,
                "A Traveller",
                "A hooded figure asks you a riddle. Solve it?",
                continue_choices(self._follow_on(StepKind.RIDDLE, current), label="Answer (Roll d6)"),
            )
            return None
        if roll in (4, 5):
            return fight_step(site, hardy=roll == 5, flee_die=flee_die, reward_tags=tags)
        if current.param("auto_visit", True):
            self.mark_visited(state, site)
        return step(StepKind.OPEN_SHOP, then=current.then, mode="merchant")

    def _snares(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        use_rope = bool(current.param("use_rope", False))
        if use_rope:
            state.inventory.has_rope = False
        snare = self.dice.d6() + (ROPE_ROLL_BONUS if use_rope else 0)
        if snare <= SNARE_FAIL_MAX:
            damage = state.take_damage(self.dice.d6())
            run.log(f"Caught in snares! Took {damage} damage.")
            if not state.alive:
                return None
        if self.dice.d6() == 1:
            site = Site(current.param("site"))
            return fight_step(site, reward_tags=tuple(current.param("reward_tags", ())))
        return self._finish_encounter(run, current)

    def _riddle(self, run: RunSession, current: Step) -> Optional[Step]:
        if self.dice.d6() % 2 != 0:
            self.present(
                run,
                "Riddle Answered",
                "Correct! Choose your reward.",
                [
                    choice(f"{RIDDLE_REWARD_COINS} Dutki", self._follow_on(StepKind.RIDDLE_REWARD, current, reward="coins")),
                    choice(
                        f"{RIDDLE_REWARD_POINTS} Points",
                        self._follow_on(StepKind.RIDDLE_REWARD, current, reward="points"),
                    ),
                ],
            )
            return None
        damage = run.state.take_damage(self.dice.d4())
        run.log(f"Wrong! Punishment: {damage} damage.")
        return self._finish_encounter(run, current)

    def _riddle_reward(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        if current.param("reward") == "coins":
            state.coins += RIDDLE_REWARD_COINS
            run.log(f"Correct! Gained {RIDDLE_REWARD_COINS} dutki.")
        else:
            state.points += RIDDLE_REWARD_POINTS
            run.log(f"Correct! Gained {RIDDLE_REWARD_POINTS} points.")
        return self._finish_encounter(run, current)

    # -- falling ------------------------------------------------------------

    def _fall_risk(self, run: RunSession, current: Step) -> Optional[Step]:
        site = Site(current.param("site"))
        if run.state.inventory.has_rope:
            self.present(
                run,
                site.value,
                "There is a risk of falling. Use your rope to add +1 to the roll?",
                [
                    choice("Use Rope", self._follow_on(StepKind.FALL, current, use_rope=True)),
                    choice("Do Not Use Rope", self._follow_on(StepKind.FALL, current, use_rope=False)),
                ],
            )
            return None
        return self._follow_on(StepKind.FALL, current, use_rope=False)

    def _fall(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        use_rope = bool(current.param("use_rope", False))
        if use_rope:
            state.inventory.has_rope = False
        if self.dice.d6() <= FALL_TRIGGER_MAX:
            check = self.dice.d6() + (ROPE_ROLL_BONUS if use_rope else 0)
            if check <= FALL_CHECK_FAIL_MAX:
                damage = state.take_damage(fall_damage(self.dice.d6()))
                run.log(f"You fell at {Site(current.param('site')).value}! Took {damage} damage.")
        return self.then_or_map(current)

    # -- advancement --------------------------------------------------------

    def _advance(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        remaining = int(current.param("remaining", 1))
        if remaining <= 0:
            return self.then_or_map(current)
        advancement = self.progression.roll_new_advancement(state)
        if advancement is None:
            return self.then_or_map(current)
        if advancement == AdvancementId.RESILIENCE:
            self.present(
                run,
                "Advancement!",
                f"{advancement_label(AdvancementId.RESILIENCE)} Choose a Scanty Enemy to halve its damage.",
                [
                    choice(
                        enemy.name,
                        step(StepKind.ADVANCE_PICK_HARDY, then=current.then, scanty=enemy.id, remaining=remaining),
                    )
                    for enemy in SCANTY_ENEMIES
                ],
            )
            return None
        self.progression.grant(state, advancement)
        label = advancement_label(advancement)
        run.log(f"Advancement: {label}")
        if self.supervisor.check(run):
            return None
        self.present(
            run,
            "Advancement!",
            f"You have grown stronger: {label}",
            continue_choices(step(StepKind.ADVANCE, then=current.then, remaining=remaining - 1)),
        )
        return None

    def _advance_pick_hardy(self, run: RunSession, current: Step) -> Optional[Step]:
        self.present(
            run,
            "Advancement!",
            f"{advancement_label(AdvancementId.RESILIENCE)} Choose a Hardy Enemy to halve its damage.",
            [
                choice(enemy.name, self._follow_on(StepKind.ADVANCE_HALVE, current, hardy=enemy.id))
                for enemy in HARDY_ENEMIES
            ],
        )
        return None

    def _advance_halve(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        if not state.has_advancement(AdvancementId.RESILIENCE):
            self.progression.grant(
                state,
                AdvancementId.RESILIENCE,
                halve_scanty=current.param("scanty"),
                halve_hardy=current.param("hardy"),
            )
            run.log(f"Advancement: {advancement_label(AdvancementId.RESILIENCE)}")
            if self.supervisor.check(run):
                return None
        remaining = int(current.param("remaining", 1)) - 1
        return step(StepKind.ADVANCE, then=current.then, remaining=remaining)
