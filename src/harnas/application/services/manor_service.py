import logging
from typing import Callable, Dict, List, Optional

from harnas.application.services.balance_tables import manor_entry_room
from harnas.application.services.dice import Dice
from harnas.application.services.progression_service import ProgressionService
from harnas.application.services.reward_service import RewardService
from harnas.application.services.scene_support import (
    SceneSupport,
    StepHandler,
    choice,
    continue_choices,
    fight_step,
)
from harnas.domain.models.combat import RewardTag
from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.location import Site
from harnas.domain.models.progression import advancement_label
from harnas.domain.models.scene import Choice, Step, StepKind, step
from harnas.domain.models.session import RunSession
from harnas.domain.repositories import LoreRepository


logger = logging.getLogger(__name__)

MANOR_ROOM_COUNT = 6
STUDY, HALLWAY, DINING_ROOM, PANTRY, LIBRARY, CELLAR = range(1, MANOR_ROOM_COUNT + 1)

MANOR_ROOM_NAMES: Dict[int, str] = {
    STUDY: "Milord's Study",
    HALLWAY: "Hallway",
    DINING_ROOM: "Dining Room",
    PANTRY: "Pantry",
    LIBRARY: "Library",
    CELLAR: "Cellar",
}

MILORD_FLEE_DIE = 6


class ManorService(SceneSupport):
    """Room-by-room traversal of the Milord's manor."""

    def __init__(
        self,
        dice: Dice,
        rewards: RewardService,
        progression: ProgressionService,
        lore_repo: Optional[LoreRepository] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        super().__init__(dice, lore_repo=lore_repo, event_publisher=event_publisher)
        self.rewards = rewards
        self.progression = progression

    def handlers(self) -> Dict[StepKind, StepHandler]:
        return {
            StepKind.ENTER_MANOR: self.enter,
            StepKind.MANOR_ROOM: self.room,
            StepKind.MANOR_NEXT_ROOM: self.next_room,
            StepKind.MANOR_CONTINUATION: self.continuation,
            StepKind.MANOR_GIVE: self.give,
            StepKind.MANOR_SUBMIT: self.submit,
            StepKind.MANOR_EAT: self.eat,
            StepKind.MANOR_CURSED_WINE: self.cursed_wine,
            StepKind.CELLAR_DRINK: self.cellar_drink,
        }

    # -- navigation ---------------------------------------------------------

    def enter(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        from_cave = bool(current.param("from_cave", False))
        state.manor_entered_from_cave = from_cave
        state.current_location = Site.MANOR
        state.in_cave = False
        run.log("You enter the Milord's Manor.")
        room_id = CELLAR if from_cave else manor_entry_room(self.dice.d6())
        return step(StepKind.MANOR_ROOM, room=room_id)

    def pick_next_room(self, visited: set) -> int:
        """Roll a room, stepping down past visited ones; fall back to the roll."""
        rolled = self.dice.d6()
        room_id = rolled
        while room_id >= 1 and room_id in visited:
            room_id -= 1
        if room_id < 1:
            room_id = rolled
        return room_id

    def next_room(self, run: RunSession, current: Step) -> Optional[Step]:
        room_id = self.pick_next_room(run.state.manor_rooms_visited)
        return step(StepKind.MANOR_ROOM, room=room_id)

    def _after_room(self, allow_exit: bool = True) -> Step:
        return self.visit_then(Site.MANOR, step(StepKind.MANOR_CONTINUATION, allow_exit=allow_exit))

    def _exit_if_from_cave(self, run: RunSession) -> Step:
        return self._after_room(allow_exit=run.state.manor_entered_from_cave)

    def continuation(self, run: RunSession, current: Step) -> Optional[Step]:
        leave = choice("Leave Manor", step(StepKind.RETURN_TO_MAP))
        if len(run.state.manor_rooms_visited) >= MANOR_ROOM_COUNT:
            self.present(
                run,
                "Milord's Manor",
                self.with_lore("Every room of the manor has been explored.", Site.MANOR),
                [leave],
            )
            return None
        choices: List[Choice] = [choice("Explore Another Room", step(StepKind.MANOR_NEXT_ROOM))]
        if current.param("allow_exit", True):
            choices.append(leave)
        self.present(
            run,
            "Milord's Manor",
            self.with_lore("Do you want to explore another room or leave the manor?", Site.MANOR),
            choices,
        )
        return None

    # -- rooms --------------------------------------------------------------

    def room(self, run: RunSession, current: Step) -> Optional[Step]:
        room_id = int(current.param("room"))
        if room_id not in MANOR_ROOM_NAMES:
            raise ValueError(f"Unknown manor room: {room_id}")
        run.state.manor_rooms_visited.add(room_id)
        logger.debug("Manor room %s (%s)", room_id, MANOR_ROOM_NAMES[room_id])
        resolver = {
            STUDY: self._study,
            HALLWAY: self._hallway,
            DINING_ROOM: self._dining_room,
            PANTRY: self._pantry,
            LIBRARY: self._library,
            CELLAR: self._cellar,
        }[room_id]
        return resolver(run)

    @staticmethod
    def _milord_fight() -> Step:
        return fight_step(
            Site.MANOR,
            hardy=True,
            enemy=EnemyId.MILORD,
            flee_die=MILORD_FLEE_DIE,
            allow_cap=False,
            reward_tags=(RewardTag.MANOR_CONTINUE,),
        )

    def _study(self, run: RunSession) -> Optional[Step]:
        demand = self.dice.d6()
        fight = choice("Fight", self._milord_fight())
        if demand <= 2:
            description = "The Milord demands all your scrolls and potions."
            choices = [choice("Give Them", step(StepKind.MANOR_GIVE, demand="items")), fight]
        elif demand <= 4:
            description = "The Milord demands all your dutki and points."
            choices = [choice("Give Them", step(StepKind.MANOR_GIVE, demand="wealth")), fight]
        else:
            description = "The Milord demands your soul."
            choices = [fight, choice("Submit", step(StepKind.MANOR_SUBMIT))]
        self.present(run, MANOR_ROOM_NAMES[STUDY], description, choices)
        return None

    def give(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        if current.param("demand") == "items":
            state.inventory.scrolls = []
            state.inventory.potions = 0
            run.log("You hand over your scrolls and potions.")
        else:
            state.coins = 0
            state.points = 0
            run.log("You hand over your dutki and points.")
        return self._after_room()

    def submit(self, run: RunSession, current: Step) -> Optional[Step]:
        run.state.hp = 0
        run.log("You submit your soul to the Milord.")
        return None

    def _hallway(self, run: RunSession) -> Optional[Step]:
        fight = fight_step(
            Site.MANOR,
            enemy=EnemyId.MANOR_HAJDUK,
            reward_tags=(RewardTag.MANOR_CONTINUE,),
        )
        self.present(run, MANOR_ROOM_NAMES[HALLWAY], "The Milord's hajduk stands guard.", [choice("Fight", fight)])
        return None

    def _dining_room(self, run: RunSession) -> Optional[Step]:
        self.present(
            run,
            MANOR_ROOM_NAMES[DINING_ROOM],
            "Milord's dinner is waiting on the lavishly set table. Will you eat?",
            [
                choice("Eat", step(StepKind.MANOR_EAT)),
                choice("Leave It", self._after_room()),
            ],
        )
        return None

    def eat(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        meal = self.dice.d6()
        if meal == 1:
            if state.advancements:
                choices = [
                    choice(f"Lose {advancement_label(held)}", step(StepKind.MANOR_CURSED_WINE, advancement=held))
                    for held in state.advancements
                ]
            else:
                choices = [choice("No Advancements to Lose", step(StepKind.MANOR_CURSED_WINE, advancement=0))]
            self.present(run, "Cursed Wine", "You lose all your points and one Advancement of your choice.", choices)
            return None
        if meal <= 3:
            damage = state.take_damage(self.dice.d6())
            state.next_fight_hit_mod = -1
            run.log(f"Devilish feast: took {damage} damage and -1 to next fight hit rolls.")
            if not state.alive:
                return None
        elif meal <= 5:
            healed = state.heal(self.dice.d6())
            run.log(f"Delicious roast healed {healed} HP.")
        else:
            state.heal_full()
            state.next_fight_hit_mod = 1
            run.log("Feast of the gods! Full HP and +1 to next fight hit rolls.")
        return self._exit_if_from_cave(run)

    def cursed_wine(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        state.points = 0
        advancement = int(current.param("advancement", 0))
        if advancement:
            self.progression.revoke(state, advancement)
            run.log(f"The cursed wine took your points and {advancement_label(advancement)}.")
        else:
            run.log("The cursed wine took all your points.")
        return self._after_room()

    def _pantry(self, run: RunSession) -> Optional[Step]:
        state = run.state
        title = MANOR_ROOM_NAMES[PANTRY]
        roll = self.dice.d6()
        if roll <= 2:
            self.present(
                run,
                title,
                "There is nothing in the pantry apart from gnawed human bones.",
                continue_choices(self._exit_if_from_cave(run)),
            )
            return None
        if roll <= 4:
            fight = fight_step(
                Site.MANOR,
                enemy=EnemyId.MANOR_HAJDUK,
                reward_tags=(RewardTag.PANTRY_ONE, RewardTag.MANOR_CONTINUE),
            )
            self.present(run, title, "The Milord's hajduk guards the provisions.", [choice("Fight", fight)])
            return None
        heal_roll = self.dice.d6()
        first = self.rewards.grant_random_object(state)
        second = self.rewards.grant_random_object(state)
        healed = state.heal(heal_roll)
        self.present(
            run,
            title,
            f"You found {first} and {second}, and healed {healed} HP.",
            continue_choices(self._after_room()),
        )
        return None

    def _library(self, run: RunSession) -> Optional[Step]:
        state = run.state
        title = MANOR_ROOM_NAMES[LIBRARY]
        roll = self.dice.d6()
        if roll <= 2:
            fight = fight_step(
                Site.MANOR,
                hardy=True,
                enemy=EnemyId.SPOOK,
                reward_tags=(RewardTag.LIBRARY_SPOOK, RewardTag.MANOR_CONTINUE),
            )
            self.present(run, title, "A spook guards the library.", [choice("Fight", fight)])
            return None
        if roll <= 4:
            state.add_scroll(self.rewards.create_random_scroll())
            state.add_scroll(self.rewards.create_random_scroll())
            description = "You found two random scrolls."
        else:
            state.milord_true_name_known = True
            description = "You found the Milord's True Name. +1 to hit rolls against him."
        self.present(run, title, description, continue_choices(self._after_room()))
        return None

    def _cellar(self, run: RunSession) -> Optional[Step]:
        state = run.state
        title = MANOR_ROOM_NAMES[CELLAR]
        roll = self.dice.d6()
        if roll <= 2:
            state.add_potion()
            self.present(
                run,
                title,
                "A drunk hajduk sleeps here. You steal an herbal potion.",
                continue_choices(self._after_room()),
            )
            return None
        if roll <= 4:
            self.present(
                run,
                title,
                "You find a mysterious potion. Drink it?",
                [
                    choice("Drink", step(StepKind.CELLAR_DRINK)),
                    choice("Leave It", self._exit_if_from_cave(run)),
                ],
            )
            return None
        treasure = self.dice.d4() * self.dice.d6()
        state.coins += treasure
        self.present(
            run,
            title,
            f"You find the Milord's treasure: {treasure} dutki.",
            continue_choices(self._exit_if_from_cave(run)),
        )
        return None

    def cellar_drink(self, run: RunSession, current: Step) -> Optional[Step]:
        state = run.state
        if self.dice.d6() % 2 == 0:
            state.heal_full()
            run.log("You regain full HP.")
        else:
            damage = state.take_damage(self.dice.d6())
            state.points = 0
            run.log(f"It was human blood! You lost {damage} HP and all points.")
            if not state.alive:
                return None
        return self._exit_if_from_cave(run)
