import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.application.services.dice import scripted_dice
from harnas.application.services.reward_service import RewardService
from harnas.application.services.shop_service import MERCHANT, VILLAGE, ShopService
from harnas.domain.models.character import MAX_POTIONS, CharacterState, Inventory
from harnas.domain.models.items import Scroll, ScrollType, WeaponType


def _shop(*rolls) -> ShopService:
    return ShopService(RewardService(scripted_dice(*rolls)))


class BuyTests(unittest.TestCase):
    def test_village_does_not_stock_scrolls(self) -> None:
        state = CharacterState(name="Jasiek", coins=50)

        merchant_ids = [row.item_id for row in _shop().buy_offers(state, MERCHANT)]
        village_ids = [row.item_id for row in _shop().buy_offers(state, VILLAGE)]

        self.assertIn("scroll", merchant_ids)
        self.assertNotIn("scroll", village_ids)
        self.assertEqual("invalid_choice", _shop().buy(state, VILLAGE, "scroll").reason)

    def test_weapon_purchase_replaces_the_equipped_weapon(self) -> None:
        state = CharacterState(name="Jasiek", coins=20)
        state.equip(WeaponType.KNIFE)

        result = _shop().buy(state, MERCHANT, "sabre")

        self.assertTrue(result.accepted)
        self.assertEqual(WeaponType.SABRE, state.weapon.name)
        self.assertEqual(8, state.coins)

    def test_unaffordable_item_is_flagged_and_refused(self) -> None:
        state = CharacterState(name="Jagna", coins=3)

        rows = {row.item_id: row for row in _shop().buy_offers(state, MERCHANT)}
        result = _shop().buy(state, MERCHANT, "potion")

        self.assertFalse(rows["potion"].can_trade)
        self.assertEqual("Not enough dutki", rows["potion"].availability_note)
        self.assertEqual("insufficient_coins", result.reason)
        self.assertEqual(3, state.coins)

    def test_full_pack_and_held_gear_cannot_be_bought_again(self) -> None:
        state = CharacterState(
            name="Jagna",
            coins=50,
            inventory=Inventory(potions=MAX_POTIONS, has_rope=True, has_kaftan=True),
        )

        for item_id in ("potion", "rope", "kaftan"):
            with self.subTest(item_id=item_id):
                self.assertEqual("invalid_choice", _shop().buy(state, MERCHANT, item_id).reason)
        self.assertEqual(50, state.coins)

    def test_bought_scroll_is_rolled(self) -> None:
        state = CharacterState(name="Jasiek", coins=7)

        _shop(3, 2).buy(state, MERCHANT, "scroll")

        self.assertEqual(ScrollType.PROTECTION_WARD, state.inventory.scrolls[0].type)
        self.assertEqual(2, state.inventory.scrolls[0].uses)
        self.assertEqual(0, state.coins)


class SellTests(unittest.TestCase):
    def test_sell_list_covers_the_pack(self) -> None:
        state = CharacterState(
            name="Jasiek",
            inventory=Inventory(potions=2, has_rope=True, cap_charges=1),
        )
        state.equip(WeaponType.CIUPAGA)
        state.add_scroll(Scroll(ScrollType.FIRE_GLYPH, 2))

        ids = [row.item_id for row in ShopService.sell_offers(state)]

        self.assertEqual(["potion", "weapon", "rope", "cap", "scroll:0"], ids)

    def test_selling_the_weapon_leaves_bare_hands(self) -> None:
        state = CharacterState(name="Jasiek")
        state.equip(WeaponType.SAMOPAL)

        result = _shop().sell(state, "weapon")

        self.assertEqual(["Sold Weapon (Samopał) for 15 dutki."], result.messages)
        self.assertEqual(WeaponType.BARE_HANDS, state.weapon.name)
        self.assertEqual(15, state.coins)

    def test_selling_the_karabela_clears_it_from_the_pack(self) -> None:
        state = CharacterState(name="Jasiek")
        state.equip(WeaponType.KARABELA)

        _shop().sell(state, "weapon")

        self.assertEqual(WeaponType.BARE_HANDS, state.weapon.name)
        self.assertFalse(state.inventory.has_karabela)

    def test_selling_the_cap_drops_every_charge(self) -> None:
        state = CharacterState(name="Jagna", inventory=Inventory(cap_charges=3))

        _shop().sell(state, "cap")

        self.assertEqual(0, state.inventory.cap_charges)
        self.assertEqual(15, state.coins)

    def test_selling_a_scroll_by_position(self) -> None:
        state = CharacterState(name="Jagna")
        state.add_scroll(Scroll(ScrollType.FIRE_GLYPH, 2))
        state.add_scroll(Scroll(ScrollType.BIES_SUMMONING, 1))

        _shop().sell(state, "scroll:1")

        self.assertEqual([ScrollType.FIRE_GLYPH], [scroll.type for scroll in state.inventory.scrolls])
        self.assertEqual(7, state.coins)

    def test_selling_something_not_carried_is_refused(self) -> None:
        state = CharacterState(name="Jagna")

        self.assertEqual("invalid_choice", _shop().sell(state, "rope").reason)


if __name__ == "__main__":
    unittest.main()
