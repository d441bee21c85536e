from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from harnas.application.dtos import ActionResult, ShopItemView
from harnas.application.services.balance_tables import (
    INVISIBILITY_CAP_SELL_PRICE,
    KAFTAN_PRICE,
    POTION_PRICE,
    ROPE_PRICE,
    SCROLL_PRICE,
)
from harnas.application.services.reward_service import RewardService
from harnas.domain.models.character import MAX_POTIONS, CharacterState
from harnas.domain.models.items import WEAPONS, WeaponType


logger = logging.getLogger(__name__)

MERCHANT = "merchant"
VILLAGE = "village"
SHOP_TITLES: Dict[str, str] = {MERCHANT: "The Merchant", VILLAGE: "Mountain Village"}


@dataclass(frozen=True)
class ShopOffer:
    item_id: str
    name: str
    price: int
    merchant_only: bool = False


def _weapon_offer(weapon_type: WeaponType) -> ShopOffer:
    weapon = WEAPONS[weapon_type]
    return ShopOffer(weapon_type.name.lower(), weapon.label, weapon.price)


BUY_CATALOG: Tuple[ShopOffer, ...] = (
    ShopOffer("potion", "Potion", POTION_PRICE),
    _weapon_offer(WeaponType.KNIFE),
    _weapon_offer(WeaponType.CIUPAGA),
    ShopOffer("rope", "Rope", ROPE_PRICE),
    _weapon_offer(WeaponType.SABRE),
    _weapon_offer(WeaponType.SAMOPAL),
    _weapon_offer(WeaponType.SCATTERGUN),
    ShopOffer("kaftan", "Kaftan", KAFTAN_PRICE),
    ShopOffer("scroll", "Scroll", SCROLL_PRICE, merchant_only=True),
)

WEAPON_IDS: Dict[str, WeaponType] = {weapon_type.name.lower(): weapon_type for weapon_type in WeaponType}


class ShopService:
    def __init__(self, rewards: RewardService) -> None:
        self.rewards = rewards

    @staticmethod
    def title(mode: str) -> str:
        return SHOP_TITLES.get(mode, SHOP_TITLES[MERCHANT])

    @staticmethod
    def _stock(mode: str) -> List[ShopOffer]:
        return [offer for offer in BUY_CATALOG if mode == MERCHANT or not offer.merchant_only]

    @staticmethod
    def _held_note(state: CharacterState, item_id: str) -> str:
        inventory = state.inventory
        if item_id == "potion" and inventory.potions >= MAX_POTIONS:
            return "Pack is full"
        if item_id == "rope" and inventory.has_rope:
            return "Already carried"
        if item_id == "kaftan" and inventory.has_kaftan:
            return "Already worn"
        return ""

    def buy_offers(self, state: CharacterState, mode: str) -> List[ShopItemView]:
        rows: List[ShopItemView] = []
        for offer in self._stock(mode):
            note = self._held_note(state, offer.item_id)
            if not note and state.coins < offer.price:
                note = "Not enough dutki"
            rows.append(
                ShopItemView(
                    item_id=offer.item_id,
                    name=offer.name,
                    price=offer.price,
                    can_trade=not note,
                    availability_note=note,
                )
            )
        return rows

    @staticmethod
    def sell_offers(state: CharacterState) -> List[ShopItemView]:
        inventory = state.inventory
        rows: List[ShopItemView] = []
        if inventory.potions > 0:
            rows.append(ShopItemView("potion", "Potion", POTION_PRICE, True))
        if inventory.weapon.name != WeaponType.BARE_HANDS:
            rows.append(ShopItemView("weapon", f"Weapon ({inventory.weapon.label})", inventory.weapon.price, True))
        if inventory.has_rope:
            rows.append(ShopItemView("rope", "Rope", ROPE_PRICE, True))
        if inventory.has_kaftan:
            rows.append(ShopItemView("kaftan", "Kaftan", KAFTAN_PRICE, True))
        if inventory.cap_charges > 0:
            rows.append(ShopItemView("cap", "Invisibility Cap", INVISIBILITY_CAP_SELL_PRICE, True))
        for index, scroll in enumerate(inventory.scrolls):
            rows.append(ShopItemView(f"scroll:{index}", f"Scroll ({scroll.type.value})", SCROLL_PRICE, True))
        return rows

    def buy(self, state: CharacterState, mode: str, item_id: str) -> ActionResult:
        offer = next((row for row in self._stock(mode) if row.item_id == item_id), None)
        if offer is None:
            return ActionResult.rejected("invalid_choice", "That is not for sale here.")
        if self._held_note(state, item_id):
            return ActionResult.rejected("invalid_choice", f"You cannot carry another {offer.name}.")
        if state.coins < offer.price:
            return ActionResult.rejected("insufficient_coins", f"{offer.name} costs {offer.price} dutki.")

        state.coins -= offer.price
        inventory = state.inventory
        if item_id == "potion":
            state.add_potion()
        elif item_id == "rope":
            inventory.has_rope = True
        elif item_id == "kaftan":
            inventory.has_kaftan = True
        elif item_id == "scroll":
            state.add_scroll(self.rewards.create_random_scroll())
        else:
            state.equip(WEAPON_IDS[item_id])
        logger.debug("Bought %s for %s", offer.name, offer.price)
        return ActionResult(messages=[f"Bought {offer.name} for {offer.price} dutki."])

    def sell(self, state: CharacterState, item_id: str) -> ActionResult:
        row = next((candidate for candidate in self.sell_offers(state) if candidate.item_id == item_id), None)
        if row is None:
            return ActionResult.rejected("invalid_choice", "You have nothing like that to sell.")

        inventory = state.inventory
        if item_id == "potion":
            state.consume_potion()
        elif item_id == "weapon":
            state.equip(WeaponType.BARE_HANDS)
        elif item_id == "rope":
            inventory.has_rope = False
        elif item_id == "kaftan":
            inventory.has_kaftan = False
        elif item_id == "cap":
            inventory.cap_charges = 0
        else:
            state.remove_scroll(int(item_id.split(":", 1)[1]))
        state.coins += row.price
        logger.debug("Sold %s for %s", row.name, row.price)
        return ActionResult(messages=[f"Sold {row.name} for {row.price} dutki."])
