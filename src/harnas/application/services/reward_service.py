import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from harnas.application.services.dice import Dice
from harnas.domain.models.character import CharacterState
from harnas.domain.models.combat import CombatSession, RewardTag
from harnas.domain.models.enemy import EnemyId, get_enemy
from harnas.domain.models.items import (
    SCROLL_TABLE,
    STARTING_WEAPONS,
    WEAPONS,
    Scroll,
    ScrollType,
    WeaponType,
)
from harnas.domain.models.scene import Step, StepKind, step


logger = logging.getLogger(__name__)


class LootEffect(str, Enum):
    KNIFE = "knife"
    SABRE = "sabre"
    BIES_SCROLL = "bies_scroll"
    ROPE = "rope"
    THEFT = "theft"
    POINT_CURSE = "point_curse"
    HIT_PENALTY = "hit_penalty"
    BONUS_ADVANCEMENT = "bonus_advancement"


@dataclass(frozen=True)
class LootRule:
    """A d6 at or under ``chance`` triggers ``effect``; coins are rolled first."""

    chance: int
    effect: LootEffect
    coin_dice: Tuple[int, ...] = ()
    verb: str = ""


LOOT_TABLE: Dict[EnemyId, LootRule] = {
    EnemyId.HAJDUK: LootRule(2, LootEffect.KNIFE),
    EnemyId.BIES: LootRule(2, LootEffect.BIES_SCROLL),
    EnemyId.POACHER: LootRule(2, LootEffect.ROPE),
    EnemyId.WOLF: LootRule(1, LootEffect.THEFT, verb="stole"),
    EnemyId.UNDINE: LootRule(1, LootEffect.POINT_CURSE, coin_dice=(6, 6, 6)),
    EnemyId.BEAR: LootRule(2, LootEffect.THEFT, verb="broke"),
    EnemyId.HIGHWAYMAN: LootRule(1, LootEffect.HIT_PENALTY, coin_dice=(4, 6)),
    EnemyId.SPOOK: LootRule(2, LootEffect.BONUS_ADVANCEMENT),
    EnemyId.MANOR_HAJDUK: LootRule(2, LootEffect.SABRE),
}

HIGHWAYMAN_HIT_PENALTY = -1
SPIRIT_TREASURE_SCROLLS = 3


@dataclass
class RewardOutcome:
    messages: List[str] = field(default_factory=list)
    advancement_rolls: int = 0
    follow_up: Optional[Step] = None

    @property
    def text(self) -> str:
        return " ".join(message for message in self.messages if message)


class RewardService:
    def __init__(self, dice: Dice) -> None:
        self.dice = dice

    # -- random finds -------------------------------------------------------

    def create_random_scroll(self) -> Scroll:
        scroll_type = SCROLL_TABLE[self.dice.d4() - 1]
        uses = 1 if scroll_type == ScrollType.DIVINATION_SIGIL else self.dice.d4()
        return Scroll(scroll_type, uses)

    def grant_random_object(self, state: CharacterState) -> str:
        """Roll the d6 object table; duplicates are named but not granted."""
        inventory = state.inventory
        roll = self.dice.d6()
        if roll == 1:
            weapon = WEAPONS[STARTING_WEAPONS[self.dice.d4() - 1]]
            if state.weapon.name == weapon.name:
                return f"{weapon.label} (already have one)"
            state.equip(weapon.name)
            return weapon.label
        if roll == 2:
            if state.add_potion():
                return "Herbal Potion"
            return "Herbal Potion (pack is full)"
        if roll == 3:
            if inventory.has_rope:
                return "Rope (already have one)"
            inventory.has_rope = True
            return "Rope"
        if roll == 4:
            state.add_scroll(self.create_random_scroll())
            return "a Scroll"
        if roll == 5:
            if inventory.has_kaftan:
                return "Leather Kaftan (already have one)"
            inventory.has_kaftan = True
            return "Leather Kaftan"
        if inventory.cap_charges > 0:
            return "Invisibility Cap (already have one)"
        inventory.cap_charges = self.dice.d4()
        return "Invisibility Cap"

    # -- victory ------------------------------------------------------------

    def resolve_victory(self, state: CharacterState, session: CombatSession) -> RewardOutcome:
        enemy = session.enemy
        outcome = RewardOutcome(messages=[f"You defeated the {enemy.name}."])
        bonus_advancement = False

        rule = LOOT_TABLE.get(enemy.id)
        if rule is not None:
            bonus_advancement = self._apply_loot(state, enemy.id, rule, outcome)
        elif enemy.id == EnemyId.MILORD:
            self._milord_spoils(state, outcome)
        elif enemy.id == EnemyId.SPIRIT:
            self._spirit_treasure(state, outcome)

        self._apply_tags(state, session, outcome)

        if enemy.id == EnemyId.SPIRIT:
            outcome.advancement_rolls = 2
        elif enemy.id == EnemyId.MILORD or bonus_advancement:
            outcome.advancement_rolls = 1
        outcome.follow_up = self.follow_up(session, outcome.advancement_rolls)
        logger.debug("Victory over %s resolved: %s", enemy.name, outcome.text)
        return outcome

    def _apply_loot(self, state: CharacterState, enemy_id: EnemyId, rule: LootRule, outcome: RewardOutcome) -> bool:
        inventory = state.inventory
        if rule.coin_dice:
            coins = self.dice.roll_many(rule.coin_dice).total
            state.coins += coins
            outcome.messages.append(f"Found {coins} dutki.")

        if self.dice.d6() > rule.chance:
            return False

        effect = rule.effect
        if effect == LootEffect.KNIFE:
            if state.weapon.name == WeaponType.KNIFE:
                outcome.messages.append("You found a Knife, but you already have one.")
            else:
                state.equip(WeaponType.KNIFE)
                outcome.messages.append("You found a Knife!")
        elif effect == LootEffect.SABRE:
            state.equip(WeaponType.SABRE)
            outcome.messages.append("Found a Sabre!")
        elif effect == LootEffect.BIES_SCROLL:
            state.add_scroll(Scroll(ScrollType.BIES_SUMMONING, self.dice.d4()))
            outcome.messages.append("Found a Bies scroll!")
        elif effect == LootEffect.ROPE:
            if inventory.has_rope:
                outcome.messages.append("Found a Rope, but you already have one.")
            else:
                inventory.has_rope = True
                outcome.messages.append("Found a Rope!")
        elif effect == LootEffect.THEFT:
            outcome.messages.append(self._lose_random_item(state, enemy_id, rule.verb))
        elif effect == LootEffect.POINT_CURSE:
            state.points = 0
            outcome.messages.append("A curse took all your points!")
        elif effect == LootEffect.HIT_PENALTY:
            state.temporary_hit_penalty = HIGHWAYMAN_HIT_PENALTY
            outcome.messages.append("A bullet got stuck in your side! (-1 to hit rolls until you rest or advance)")
        elif effect == LootEffect.BONUS_ADVANCEMENT:
            outcome.messages.append("Spiritual awakening! Immediate Advancement!")
            return True
        return False

    def _lose_random_item(self, state: CharacterState, enemy_id: EnemyId, verb: str) -> str:
        items = state.loseable_items()
        if not items:
            return "You had nothing to lose."
        lost = items[self.dice.roll(len(items)) - 1]
        lost.remove(state)
        return f"The {get_enemy(enemy_id).name} {verb} your {lost.label}."

    def _milord_spoils(self, state: CharacterState, outcome: RewardOutcome) -> None:
        coins = self.dice.roll_many((6, 6)).total
        state.coins += coins
        state.equip(WeaponType.KARABELA)
        state.milord_defeated = True
        state.milord_hunts = False
        outcome.messages.append(f"You took {coins} dutki and the Milord's karabela.")

    def _spirit_treasure(self, state: CharacterState, outcome: RewardOutcome) -> None:
        coins = self.dice.d6() * self.dice.d6()
        state.coins += coins
        for _ in range(SPIRIT_TREASURE_SCROLLS):
            state.add_scroll(self.create_random_scroll())
        outcome.messages.append(f"The Spirit's treasure grants {coins} dutki and three scrolls.")

    def _apply_tags(self, state: CharacterState, session: CombatSession, outcome: RewardOutcome) -> None:
        config = session.config
        if config.has_tag(RewardTag.PANTRY_ONE):
            healed = state.heal(self.dice.d4())
            found = self.grant_random_object(state)
            outcome.messages.append(f"You found {found} and healed {healed} HP.")
        if config.has_tag(RewardTag.PANTRY_TWO):
            healed = state.heal(self.dice.d6())
            first = self.grant_random_object(state)
            second = self.grant_random_object(state)
            outcome.messages.append(f"You found {first} and {second}, and healed {healed} HP.")
        if config.has_tag(RewardTag.LIBRARY_SPOOK):
            state.add_scroll(self.create_random_scroll())
            outcome.messages.append("You found a random scroll.")

    @staticmethod
    def follow_up(session: CombatSession, advancement_rolls: int = 0) -> Step:
        """The step that runs once the victory has been acknowledged."""
        config = session.config
        manor_next: Step = step(StepKind.RETURN_TO_MAP)
        if config.has_tag(RewardTag.MANOR_CONTINUE):
            manor_next = step(StepKind.MANOR_CONTINUATION, allow_exit=True)

        if advancement_rolls:
            return step(StepKind.ADVANCE, remaining=advancement_rolls, then=manor_next)
        if config.has_tag(RewardTag.ENTER_MANOR):
            return step(StepKind.ENTER_MANOR, from_cave=True)
        if config.has_tag(RewardTag.CAVE_CONTINUE):
            return step(StepKind.CAVE_PROMPT)
        if config.has_tag(RewardTag.MANOR_CONTINUE):
            return manor_next
        if config.has_tag(RewardTag.FALL_RISK):
            return step(StepKind.FALL_RISK, site=config.site, then=step(StepKind.RETURN_TO_MAP))
        return step(StepKind.RETURN_TO_MAP)
