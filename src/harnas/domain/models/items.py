from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class WeaponType(str, Enum):
    KNIFE = "Knife"
    CIUPAGA = "Ciupaga"
    SABRE = "Sabre"
    SAMOPAL = "Samopał"
    SCATTERGUN = "Scattergun"
    KARABELA = "Karabela"
    BARE_HANDS = "Bare Hands"


@dataclass(frozen=True)
class Weapon:
    name: WeaponType
    damage_die: int
    bonus_damage: int = 0
    hit_bonus: int = 0
    price: int = 0

    @property
    def label(self) -> str:
        return self.name.value


WEAPONS: Dict[WeaponType, Weapon] = {
    WeaponType.KNIFE: Weapon(WeaponType.KNIFE, damage_die=4, price=6),
    WeaponType.CIUPAGA: Weapon(WeaponType.CIUPAGA, damage_die=6, price=9),
    WeaponType.SABRE: Weapon(WeaponType.SABRE, damage_die=6, hit_bonus=1, price=12),
    WeaponType.SAMOPAL: Weapon(WeaponType.SAMOPAL, damage_die=6, bonus_damage=1, price=15),
    WeaponType.SCATTERGUN: Weapon(WeaponType.SCATTERGUN, damage_die=6, bonus_damage=2, price=25),
    WeaponType.KARABELA: Weapon(WeaponType.KARABELA, damage_die=6, bonus_damage=2, hit_bonus=1, price=999),
    WeaponType.BARE_HANDS: Weapon(WeaponType.BARE_HANDS, damage_die=4, bonus_damage=-1, price=0),
}

BARE_HANDS = WEAPONS[WeaponType.BARE_HANDS]

# Indexed by a d4 roll minus one.
STARTING_WEAPONS: Tuple[WeaponType, ...] = (
    WeaponType.KNIFE,
    WeaponType.CIUPAGA,
    WeaponType.SABRE,
    WeaponType.SAMOPAL,
)

FORBIDDEN_UNDINE_WEAPONS: Tuple[WeaponType, ...] = (WeaponType.SAMOPAL, WeaponType.SCATTERGUN)


class ScrollType(str, Enum):
    BIES_SUMMONING = "Bies Summoning"
    FIRE_GLYPH = "Fire Glyph"
    PROTECTION_WARD = "Protection Ward"
    DIVINATION_SIGIL = "Divination Sigil"


SCROLL_DESCRIPTIONS: Dict[ScrollType, str] = {
    ScrollType.BIES_SUMMONING: "Summons a bies for d4 turns, dealing d4 damage each turn.",
    ScrollType.FIRE_GLYPH: "d4 uses, each deals d6+1 damage regardless of hit.",
    ScrollType.PROTECTION_WARD: "d4 uses, lowers damage received by d4 each turn.",
    ScrollType.DIVINATION_SIGIL: "1 use, choose next location or re-roll location die.",
}

# Indexed by a d4 roll minus one.
SCROLL_TABLE: Tuple[ScrollType, ...] = (
    ScrollType.BIES_SUMMONING,
    ScrollType.FIRE_GLYPH,
    ScrollType.PROTECTION_WARD,
    ScrollType.DIVINATION_SIGIL,
)

COMBAT_SCROLLS = frozenset(
    {ScrollType.BIES_SUMMONING, ScrollType.FIRE_GLYPH, ScrollType.PROTECTION_WARD}
)


@dataclass
class Scroll:
    type: ScrollType
    uses: int

    @property
    def description(self) -> str:
        return SCROLL_DESCRIPTIONS[self.type]

    @property
    def label(self) -> str:
        return f"{self.type.value} ({self.uses})"
