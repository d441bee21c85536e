from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class EnemyCategory(str, Enum):
    SCANTY = "scanty"
    HARDY = "hardy"
    SPECIAL = "special"


class EnemyId(str, Enum):
    HAJDUK = "hajduk"
    BIES = "bies"
    POACHER = "poacher"
    WOLF = "wolf"
    UNDINE = "undine"
    BEAR = "bear"
    HIGHWAYMAN = "highwayman"
    SPOOK = "spook"
    MILORD = "milord"
    MANOR_HAJDUK = "manor_hajduk"
    SPIRIT = "spirit"


@dataclass(frozen=True)
class Enemy:
    id: EnemyId
    name: str
    category: EnemyCategory
    points: int
    damage_die: int
    damage_bonus: int
    hp: int
    reward_points: Optional[int] = None

    @property
    def reward(self) -> int:
        """Points granted on victory; falls back to the hit threshold."""
        return self.reward_points if self.reward_points is not None else self.points


SCANTY_ENEMIES: Tuple[Enemy, ...] = (
    Enemy(EnemyId.HAJDUK, "Hajduk", EnemyCategory.SCANTY, points=3, damage_die=4, damage_bonus=0, hp=6),
    Enemy(EnemyId.BIES, "Bies", EnemyCategory.SCANTY, points=3, damage_die=4, damage_bonus=0, hp=6),
    Enemy(EnemyId.POACHER, "Poacher", EnemyCategory.SCANTY, points=3, damage_die=4, damage_bonus=0, hp=5),
    Enemy(EnemyId.WOLF, "Wolf", EnemyCategory.SCANTY, points=4, damage_die=4, damage_bonus=1, hp=6),
)

HARDY_ENEMIES: Tuple[Enemy, ...] = (
    Enemy(EnemyId.UNDINE, "Undine", EnemyCategory.HARDY, points=4, damage_die=4, damage_bonus=0, hp=8),
    Enemy(EnemyId.BEAR, "Bear", EnemyCategory.HARDY, points=5, damage_die=6, damage_bonus=1, hp=10, reward_points=7),
    Enemy(EnemyId.HIGHWAYMAN, "Highwayman", EnemyCategory.HARDY, points=4, damage_die=6, damage_bonus=1, hp=10),
    Enemy(EnemyId.SPOOK, "Spook", EnemyCategory.HARDY, points=5, damage_die=6, damage_bonus=0, hp=12),
)

MILORD = Enemy(EnemyId.MILORD, "The Milord", EnemyCategory.SPECIAL, points=5, damage_die=6, damage_bonus=2, hp=14)
MANOR_HAJDUK = Enemy(
    EnemyId.MANOR_HAJDUK, "Milord's Hajduk", EnemyCategory.SPECIAL, points=3, damage_die=6, damage_bonus=0, hp=6
)
SPIRIT = Enemy(
    EnemyId.SPIRIT, "Spirit of the Mountains", EnemyCategory.SPECIAL, points=6, damage_die=6, damage_bonus=2, hp=20
)

ENEMIES: Dict[EnemyId, Enemy] = {
    enemy.id: enemy for enemy in SCANTY_ENEMIES + HARDY_ENEMIES + (MILORD, MANOR_HAJDUK, SPIRIT)
}


def get_enemy(enemy_id: EnemyId) -> Enemy:
    return ENEMIES[EnemyId(enemy_id)]


@dataclass
class EnemyInstance:
    """A catalog enemy with its own hit-point counter for one fight."""

    template: Enemy
    hp_current: int

    @classmethod
    def spawn(cls, template: Enemy) -> "EnemyInstance":
        return cls(template=template, hp_current=template.hp)

    @property
    def id(self) -> EnemyId:
        return self.template.id

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def category(self) -> EnemyCategory:
        return self.template.category

    @property
    def hp_max(self) -> int:
        return self.template.hp

    @property
    def defeated(self) -> bool:
        return self.hp_current <= 0
