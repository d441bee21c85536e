from __future__ import annotations


STARTING_HP = 15
STARTING_COINS_BASE = 6

HUT_REST_HEAL_BONUS = 2
VILLAGE_REST_HEAL_BONUS = 6
VILLAGE_LOCATION_ROLL_MODIFIER = -1

FALL_TRIGGER_MAX = 3
FALL_CHECK_FAIL_MAX = 3
FALL_DAMAGE_BONUS = 2
ROPE_ROLL_BONUS = 1

SNARE_FAIL_MAX = 3
RIDDLE_REWARD_COINS = 6
RIDDLE_REWARD_POINTS = 3

FIRE_GLYPH_BONUS = 1
INVISIBILITY_CAP_SELL_PRICE = 15
SCROLL_PRICE = 7
POTION_PRICE = 4
ROPE_PRICE = 5
KAFTAN_PRICE = 10

REVISIT_AMBUSH_ROLL = 1
CAVE_EXIT_AMBUSH_ROLL = 1


def hut_rest_heal(roll: int) -> int:
    return roll + HUT_REST_HEAL_BONUS


def village_rest_heal(roll: int) -> int:
    return roll + VILLAGE_REST_HEAL_BONUS


def fall_damage(roll: int) -> int:
    return roll + FALL_DAMAGE_BONUS


def fire_glyph_damage(roll: int) -> int:
    return roll + FIRE_GLYPH_BONUS


def manor_entry_room(roll: int) -> int:
    """Map the d6 entry roll into the hallway, dining room or pantry."""
    if roll <= 2:
        return 3
    if roll <= 5:
        return 2
    return 4
