import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.domain.models.character import MAX_POTIONS, CharacterState, Inventory
from harnas.domain.models.enemy import ENEMIES, HARDY_ENEMIES, SCANTY_ENEMIES, EnemyCategory, EnemyId, get_enemy
from harnas.domain.models.items import Scroll, ScrollType, WeaponType
from harnas.domain.models.location import LocationStatus, Site, clamp_location_roll, site_for_roll
from harnas.domain.models.progression import AdvancementId


class CharacterStateTests(unittest.TestCase):
    def test_healing_never_exceeds_max_hp(self) -> None:
        state = CharacterState(name="Jasiek", hp=13)

        healed = state.heal(6)

        self.assertEqual(15, state.hp)
        self.assertEqual(2, healed)

    def test_potions_are_capped_and_never_negative(self) -> None:
        state = CharacterState(name="Jagna", inventory=Inventory(potions=MAX_POTIONS))

        self.assertFalse(state.add_potion())
        self.assertEqual(MAX_POTIONS, state.inventory.potions)
        state.inventory.potions = 0
        self.assertFalse(state.consume_potion())
        self.assertEqual(0, state.inventory.potions)

    def test_inventory_clamps_potions_on_creation(self) -> None:
        self.assertEqual(MAX_POTIONS, Inventory(potions=14).potions)

    def test_spent_scroll_is_dropped_at_zero_uses(self) -> None:
        state = CharacterState(name="Jasiek")
        state.add_scroll(Scroll(ScrollType.FIRE_GLYPH, 1))
        state.add_scroll(Scroll(ScrollType.PROTECTION_WARD, 2))

        state.spend_scroll_charge(0)

        self.assertEqual([ScrollType.PROTECTION_WARD], [scroll.type for scroll in state.inventory.scrolls])

    def test_visiting_clears_escaped_and_escaping_a_visited_site_is_ignored(self) -> None:
        state = CharacterState(name="Jasiek", current_location=Site.VILLAGE)
        state.mark_escaped(Site.CLIFF)
        state.mark_visited(Site.CLIFF)
        state.mark_escaped(Site.CLIFF)

        self.assertIn(Site.CLIFF, state.visited_sites)
        self.assertNotIn(Site.CLIFF, state.escaped_sites)
        self.assertEqual(LocationStatus.VISITED, state.location_status(Site.CLIFF))
        self.assertEqual(LocationStatus.CURRENT, state.location_status(Site.VILLAGE))
        self.assertEqual(LocationStatus.UNKNOWN, state.location_status(Site.MANOR))

    def test_visit_raises_every_rest_cooldown(self) -> None:
        state = CharacterState(name="Jagna", hut_cooldown=0, village_cooldown=2, spring_cooldown=5)

        state.mark_visited(Site.MEADOW)

        self.assertEqual((1, 3, 6), (state.hut_cooldown, state.village_cooldown, state.spring_cooldown))
        self.assertEqual(1, state.visited_places_count)

    def test_max_hp_advancement_grants_and_revokes(self) -> None:
        state = CharacterState(name="Jasiek", hp=4)

        state.grant_advancement(AdvancementId.MAX_HP)
        self.assertEqual((20, 20), (state.hp, state.hp_max))

        state.revoke_advancement(AdvancementId.MAX_HP)
        self.assertEqual((15, 15), (state.hp, state.hp_max))

    def test_advancements_are_unique_and_halving_is_not_overwritten(self) -> None:
        state = CharacterState(name="Jagna")

        self.assertTrue(
            state.grant_advancement(AdvancementId.RESILIENCE, halve_scanty=EnemyId.WOLF, halve_hardy=EnemyId.BEAR)
        )
        self.assertFalse(
            state.grant_advancement(AdvancementId.RESILIENCE, halve_scanty=EnemyId.BIES, halve_hardy=EnemyId.SPOOK)
        )

        self.assertEqual([AdvancementId.RESILIENCE], state.advancements)
        self.assertEqual({EnemyCategory.SCANTY: EnemyId.WOLF, EnemyCategory.HARDY: EnemyId.BEAR}, state.half_damage)
        self.assertTrue(state.halves_damage_from(get_enemy(EnemyId.BEAR)))
        self.assertFalse(state.halves_damage_from(get_enemy(EnemyId.HIGHWAYMAN)))

    def test_scattergun_and_herbalist_effects(self) -> None:
        state = CharacterState(name="Jasiek", points=2)

        state.grant_advancement(AdvancementId.SCATTERGUN)
        state.grant_advancement(AdvancementId.HERBALIST)

        self.assertEqual(WeaponType.SCATTERGUN, state.weapon.name)
        self.assertEqual(7, state.points)

    def test_loseable_items_cover_the_whole_pack(self) -> None:
        state = CharacterState(
            name="Jagna",
            inventory=Inventory(potions=1, has_rope=True, has_kaftan=True, cap_charges=2),
        )
        state.equip(WeaponType.SABRE)
        state.add_scroll(Scroll(ScrollType.FIRE_GLYPH, 2))

        labels = [item.label for item in state.loseable_items()]

        self.assertEqual(
            ["Weapon: Sabre", "Herbal Potion", "Rope", "Leather Kaftan", "Invisibility Cap", "Scroll: Fire Glyph"],
            labels,
        )

    def test_damage_never_drops_hp_below_zero(self) -> None:
        state = CharacterState(name="Jasiek", hp=3)

        dealt = state.take_damage(10)

        self.assertEqual(0, state.hp)
        self.assertEqual(10, dealt)
        self.assertFalse(state.alive)

    def test_karabela_flag_follows_the_equipped_weapon(self) -> None:
        state = CharacterState(name="Jagna")

        state.equip(WeaponType.KARABELA)
        self.assertTrue(state.inventory.has_karabela)

        state.loseable_items()[0].remove(state)

        self.assertEqual(WeaponType.BARE_HANDS, state.weapon.name)
        self.assertFalse(state.inventory.has_karabela)


class CatalogTests(unittest.TestCase):
    def test_enemy_tables_hold_four_of_each_tier(self) -> None:
        self.assertEqual(4, len(SCANTY_ENEMIES))
        self.assertEqual(4, len(HARDY_ENEMIES))
        self.assertTrue(all(enemy.category == EnemyCategory.SCANTY for enemy in SCANTY_ENEMIES))
        self.assertTrue(all(enemy.category == EnemyCategory.HARDY for enemy in HARDY_ENEMIES))

    def test_bear_rewards_more_than_its_threshold(self) -> None:
        self.assertEqual(7, get_enemy(EnemyId.BEAR).reward)
        self.assertEqual(3, get_enemy(EnemyId.HAJDUK).reward)

    def test_every_enemy_id_is_catalogued(self) -> None:
        self.assertEqual(set(EnemyId), set(ENEMIES))

    def test_location_rolls_are_clamped(self) -> None:
        self.assertEqual(12, clamp_location_roll(13))
        self.assertEqual(1, clamp_location_roll(-1))
        self.assertEqual(Site.DEEP_WOODS, site_for_roll(7))
        self.assertEqual(Site.PEAK_BLACK, site_for_roll(0))


if __name__ == "__main__":
    unittest.main()
