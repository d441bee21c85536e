from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from harnas.domain.models.enemy import EnemyId, EnemyInstance
from harnas.domain.models.items import WeaponType
from harnas.domain.models.location import Site


class CombatAction(str, Enum):
    ATTACK = "attack"
    DRINK_POTION = "drink_potion"
    USE_SCROLL = "use_scroll"
    FLEE = "flee"


class CombatOutcome(str, Enum):
    ACTIVE = "active"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    AVOIDED = "avoided"


class RewardTag(str, Enum):
    PANTRY_ONE = "pantry-one"
    PANTRY_TWO = "pantry-two"
    LIBRARY_SPOOK = "library-spook"
    MANOR_CONTINUE = "manor-continue"
    CAVE_CONTINUE = "cave-continue"
    ENTER_MANOR = "enter-manor"
    FALL_RISK = "fall-risk"


DEFAULT_FLEE_DIE = 4


@dataclass(frozen=True)
class FightConfig:
    """Fixed parameters of one fight, chosen by whoever starts it."""

    site: Site
    hardy: bool = False
    enemy: Optional[EnemyId] = None
    flee_die: int = DEFAULT_FLEE_DIE
    allow_cap: Optional[bool] = None
    forbidden_weapons: Tuple[WeaponType, ...] = ()
    reward_tags: Tuple[RewardTag, ...] = ()

    def has_tag(self, tag: RewardTag) -> bool:
        return tag in self.reward_tags


@dataclass
class CombatSession:
    enemy: EnemyInstance
    config: FightConfig
    allow_cap: bool
    hit_mod: int = 0
    lore: str = ""
    turn: int = 1
    ward_turns: int = 0
    helper_turns: int = 0
    message: str = ""
    outcome: CombatOutcome = CombatOutcome.ACTIVE

    @property
    def site(self) -> Site:
        return self.config.site

    @property
    def is_over(self) -> bool:
        return self.outcome != CombatOutcome.ACTIVE


@dataclass
class CombatTurnResult:
    outcome: CombatOutcome
    messages: List[str] = field(default_factory=list)
    rejected: bool = False
    reason: str = ""
    hit: bool = False
    enemy_damage: int = 0
    player_damage: int = 0

    @property
    def text(self) -> str:
        return " ".join(message for message in self.messages if message)
