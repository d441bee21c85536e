from __future__ import annotations

import logging
from typing import List

from harnas.application.services.balance_tables import STARTING_COINS_BASE, STARTING_HP
from harnas.application.services.dice import Dice
from harnas.domain.models.character import CharacterState, Inventory
from harnas.domain.models.items import STARTING_WEAPONS, WEAPONS, Scroll, ScrollType
from harnas.domain.models.location import Site


logger = logging.getLogger(__name__)

PLAYABLE_HEROES = ("Jasiek", "Jagna")


class CharacterCreationService:
    def __init__(self, dice: Dice) -> None:
        self.dice = dice

    @staticmethod
    def list_heroes() -> List[str]:
        return list(PLAYABLE_HEROES)

    @staticmethod
    def sanitize_name(raw: str, max_length: int = 20) -> str:
        trimmed = (raw or "").strip()
        cleaned = "".join(ch for ch in trimmed if ch.isprintable() and ch not in "\t\r\n")
        if len(cleaned) > max_length:
            cleaned = cleaned[:max_length]
        return cleaned or PLAYABLE_HEROES[0]

    def create_character(self, name: str) -> CharacterState:
        """Roll a fresh hero: d4 weapon, d4 starting extra, d6+6 dutki."""
        inventory = Inventory(weapon=WEAPONS[STARTING_WEAPONS[self.dice.d4() - 1]])
        extra = self.dice.d4()
        if extra == 1:
            inventory.has_kaftan = True
        elif extra == 2:
            inventory.potions = 1
        elif extra == 3:
            inventory.scrolls.append(Scroll(ScrollType.BIES_SUMMONING, self.dice.d4()))
        else:
            inventory.cap_charges = self.dice.d4()

        character = CharacterState(
            name=self.sanitize_name(name),
            hp=STARTING_HP,
            hp_max=STARTING_HP,
            coins=self.dice.d6() + STARTING_COINS_BASE,
            inventory=inventory,
            current_location=Site.MOUNTAIN_PASS,
        )
        logger.info(
            "Created %s with %s, %s dutki",
            character.name,
            inventory.weapon.label,
            character.coins,
        )
        return character
