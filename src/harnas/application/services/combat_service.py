import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from harnas.application.services.balance_tables import fire_glyph_damage
from harnas.application.services.dice import Dice
from harnas.domain.events import CombatFled, EnemyDefeated, LocationVisited
from harnas.domain.models.character import CharacterState
from harnas.domain.models.combat import (
    CombatAction,
    CombatOutcome,
    CombatSession,
    CombatTurnResult,
    FightConfig,
)
from harnas.domain.models.enemy import (
    HARDY_ENEMIES,
    MILORD,
    SCANTY_ENEMIES,
    Enemy,
    EnemyId,
    EnemyInstance,
    get_enemy,
)
from harnas.domain.models.items import BARE_HANDS, ScrollType, Weapon
from harnas.domain.repositories import LoreRepository


logger = logging.getLogger(__name__)

_CAP_FORBIDDEN_BY_DEFAULT = frozenset({EnemyId.MILORD, EnemyId.SPIRIT})
_NEVER_REPLACED_BY_MILORD = frozenset({EnemyId.MILORD, EnemyId.SPIRIT})


@dataclass
class ScrollOption:
    index: int
    label: str
    enabled: bool


class CombatService:
    def __init__(
        self,
        dice: Dice,
        lore_repo: Optional[LoreRepository] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        self.dice = dice
        self.lore_repo = lore_repo
        self.event_publisher = event_publisher

    def _publish(self, event: object) -> None:
        if self.event_publisher is not None:
            self.event_publisher(event)

    # -- setup --------------------------------------------------------------

    def draw_enemy(self, state: CharacterState, config: FightConfig) -> Enemy:
        if config.enemy is not None:
            enemy = get_enemy(config.enemy)
        else:
            table = HARDY_ENEMIES if config.hardy else SCANTY_ENEMIES
            enemy = table[self.dice.d4() - 1]
        # A hunting Milord takes the place of any hardy foe, scripted or drawn,
        # except the Spirit.
        if state.milord_hunts and config.hardy and enemy.id not in _NEVER_REPLACED_BY_MILORD:
            logger.debug("Milord hunts: %s replaced by the Milord", enemy.name)
            return MILORD
        return enemy

    def start(self, state: CharacterState, config: FightConfig) -> CombatSession:
        enemy = self.draw_enemy(state, config)
        hit_mod = state.next_fight_hit_mod
        state.next_fight_hit_mod = 0
        allow_cap = config.allow_cap
        if allow_cap is None:
            allow_cap = enemy.id not in _CAP_FORBIDDEN_BY_DEFAULT
        lore = self.lore_repo.enemy_lore(enemy.id) if self.lore_repo is not None else ""
        session = CombatSession(
            enemy=EnemyInstance.spawn(enemy),
            config=config,
            allow_cap=bool(allow_cap),
            hit_mod=hit_mod,
            lore=lore,
            helper_turns=max(0, state.active_helper_turns),
            message=f"A {enemy.name} blocks your path!",
        )
        logger.debug("Fight started at %s against %s", config.site.value, enemy.name)
        return session

    # -- queries ------------------------------------------------------------

    @staticmethod
    def effective_weapon(state: CharacterState, session: CombatSession) -> Weapon:
        weapon = state.weapon
        if weapon.name in session.config.forbidden_weapons:
            return BARE_HANDS
        return weapon

    def hit_total(self, state: CharacterState, session: CombatSession, roll: int) -> int:
        weapon = self.effective_weapon(state, session)
        total = roll + weapon.hit_bonus + state.permanent_hit_bonus + session.hit_mod + state.temporary_hit_penalty
        if session.enemy.id == EnemyId.MILORD and state.milord_true_name_known:
            total += 1
        if session.enemy.id == EnemyId.SPIRIT and state.inventory.has_spirit_heart:
            total += 1
        return total

    @staticmethod
    def can_avoid(state: CharacterState, session: CombatSession) -> bool:
        return session.allow_cap and state.inventory.cap_charges > 0 and not session.is_over

    @staticmethod
    def scroll_options(state: CharacterState, session: CombatSession) -> List[ScrollOption]:
        options: List[ScrollOption] = []
        for index, scroll in enumerate(state.inventory.scrolls):
            enabled = scroll.type != ScrollType.DIVINATION_SIGIL
            if scroll.type == ScrollType.BIES_SUMMONING and session.helper_turns > 0:
                enabled = False
            options.append(ScrollOption(index=index, label=scroll.label, enabled=enabled))
        return options

    def _precondition_failure(
        self,
        state: CharacterState,
        session: CombatSession,
        action: CombatAction,
        scroll_index: Optional[int],
    ) -> str:
        if session.is_over:
            return "combat_over"
        if action == CombatAction.DRINK_POTION and state.inventory.potions <= 0:
            return "no_potions"
        if action == CombatAction.USE_SCROLL:
            scrolls = state.inventory.scrolls
            if not isinstance(scroll_index, int) or scroll_index < 0 or scroll_index >= len(scrolls):
                return "no_scroll"
            scroll = scrolls[scroll_index]
            if scroll.type == ScrollType.DIVINATION_SIGIL:
                return "scroll_not_usable"
            if scroll.type == ScrollType.BIES_SUMMONING and session.helper_turns > 0:
                return "helper_active"
        return ""

    # -- turn resolution ----------------------------------------------------

    def resolve_turn(
        self,
        state: CharacterState,
        session: CombatSession,
        action: CombatAction,
        scroll_index: Optional[int] = None,
    ) -> CombatTurnResult:
        action = CombatAction(action)
        reason = self._precondition_failure(state, session, action, scroll_index)
        if reason:
            logger.debug("Combat action %s rejected: %s", action.value, reason)
            return CombatTurnResult(outcome=session.outcome, rejected=True, reason=reason)

        if action == CombatAction.FLEE:
            return self._flee(state, session)

        result = CombatTurnResult(outcome=CombatOutcome.ACTIVE)
        enemy = session.enemy

        if action == CombatAction.ATTACK:
            self._attack(state, session, result)
        elif action == CombatAction.DRINK_POTION:
            healed = state.heal(self.dice.d6())
            state.consume_potion()
            result.messages.append(f"You drank a potion and healed {healed} HP.")
        elif action == CombatAction.USE_SCROLL:
            self._read_scroll(state, session, int(scroll_index), result)

        if session.helper_turns > 0:
            helper_damage = self.dice.d4()
            result.enemy_damage += helper_damage
            session.helper_turns -= 1
            result.messages.append(f"Bies deals {helper_damage} damage!")

        enemy.hp_current -= result.enemy_damage

        if enemy.defeated:
            return self._victory(state, session, result)

        if not result.hit:
            self._enemy_strikes(state, session, result)

        if session.ward_turns > 0:
            session.ward_turns -= 1
        session.turn += 1

        if not state.alive:
            result.outcome = CombatOutcome.DEFEAT
            session.outcome = CombatOutcome.DEFEAT
            result.messages.append(f"The {enemy.name} strikes you down.")
            logger.info("Player fell to %s", enemy.name)

        session.message = result.text
        return result

    def _attack(self, state: CharacterState, session: CombatSession, result: CombatTurnResult) -> None:
        weapon = self.effective_weapon(state, session)
        total = self.hit_total(state, session, self.dice.d6())
        if total >= session.enemy.template.points:
            damage = max(0, self.dice.roll(weapon.damage_die) + weapon.bonus_damage)
            result.enemy_damage += damage
            result.hit = True
            result.messages.append(f"You hit for {damage}!")
        else:
            result.messages.append("You missed!")

    def _read_scroll(self, state: CharacterState, session: CombatSession, index: int, result: CombatTurnResult) -> None:
        scroll_type = state.inventory.scrolls[index].type
        if scroll_type == ScrollType.BIES_SUMMONING:
            turns = self.dice.d4()
            session.helper_turns = turns
            result.messages.append(f"You summoned a bies for {turns} turns.")
        elif scroll_type == ScrollType.FIRE_GLYPH:
            damage = fire_glyph_damage(self.dice.d6())
            result.enemy_damage += damage
            result.messages.append(f"Fire glyph scorches for {damage} damage!")
        elif scroll_type == ScrollType.PROTECTION_WARD:
            turns = self.dice.d4()
            session.ward_turns = turns
            result.messages.append(f"Protection ward shields you for {turns} turns.")
        state.spend_scroll_charge(index)

    def _enemy_strikes(self, state: CharacterState, session: CombatSession, result: CombatTurnResult) -> None:
        enemy = session.enemy
        if enemy.id == EnemyId.UNDINE and session.turn % 2 == 0:
            damage = self.dice.d6()
            result.messages.append("Undine ensnares you!")
        else:
            damage = self.dice.roll(enemy.template.damage_die) + enemy.template.damage_bonus

        if state.halves_damage_from(enemy.template):
            damage //= 2
        if state.inventory.has_kaftan:
            damage = max(0, damage - self.dice.d4())
        if session.ward_turns > 0:
            damage = max(0, damage - self.dice.d4())

        result.player_damage = state.take_damage(damage)
        result.messages.append(f"Enemy deals {result.player_damage} damage.")

    def _victory(self, state: CharacterState, session: CombatSession, result: CombatTurnResult) -> CombatTurnResult:
        enemy = session.enemy
        reward = enemy.template.reward
        state.points += reward
        state.active_helper_turns = session.helper_turns
        session.outcome = CombatOutcome.VICTORY
        result.outcome = CombatOutcome.VICTORY
        result.messages.append(f"Defeated {enemy.name}! Gained {reward} points.")
        session.message = result.text
        logger.info("Defeated %s at %s on turn %s", enemy.name, session.site.value, session.turn)
        self._publish(
            EnemyDefeated(
                enemy_id=enemy.id.value,
                site=session.site.value,
                points_awarded=reward,
                turn=session.turn,
            )
        )
        return result

    def _flee(self, state: CharacterState, session: CombatSession) -> CombatTurnResult:
        flee_die = session.config.flee_die
        damage = 0 if flee_die <= 0 else self.dice.roll(flee_die)
        state.take_damage(damage)
        if session.enemy.id == EnemyId.MILORD:
            state.milord_hunts = True
        state.mark_escaped(session.site)
        state.active_helper_turns = session.helper_turns
        session.outcome = CombatOutcome.FLED
        text = f"You fled, taking {damage} damage." if damage > 0 else "You fled."
        session.message = text
        logger.info("Fled from %s at %s", session.enemy.name, session.site.value)
        self._publish(CombatFled(enemy_id=session.enemy.id.value, site=session.site.value, damage_taken=damage))
        return CombatTurnResult(outcome=CombatOutcome.FLED, messages=[text], player_damage=damage)

    def avoid_with_cap(self, state: CharacterState, session: CombatSession) -> CombatTurnResult:
        if not self.can_avoid(state, session):
            return CombatTurnResult(outcome=session.outcome, rejected=True, reason="cap_unavailable")
        reward = session.enemy.template.reward
        state.points += reward
        state.inventory.cap_charges = max(0, state.inventory.cap_charges - 1)
        state.mark_visited(session.site)
        self._publish(LocationVisited(site=session.site.value, visited_places_count=state.visited_places_count))
        session.outcome = CombatOutcome.AVOIDED
        text = f"You vanish from sight and gain {reward} points without a fight."
        session.message = text
        return CombatTurnResult(outcome=CombatOutcome.AVOIDED, messages=[text])
