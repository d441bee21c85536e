from __future__ import annotations

from typing import Sequence

from harnas.application.dtos import (
    CharacterSnapshotView,
    ChoiceView,
    CombatView,
    DiceRollView,
    InventoryView,
    MapTileView,
    ScrollActionView,
    SceneView,
    ShopItemView,
    ShopView,
    TerminalView,
)
from harnas.application.services.dice import RollRecord
from harnas.domain.models.character import CharacterState
from harnas.domain.models.location import MAP_SITES
from harnas.domain.models.progression import advancement_label
from harnas.domain.models.scene import Scene


def to_choice_views(scene: Scene) -> list[ChoiceView]:
    return [
        ChoiceView(index=index, label=choice.label, enabled=choice.enabled)
        for index, choice in enumerate(scene.choices)
    ]


def to_scene_view(scene: Scene) -> SceneView:
    return SceneView(title=scene.title, description=scene.description, choices=to_choice_views(scene))


def to_inventory_view(state: CharacterState) -> InventoryView:
    inventory = state.inventory
    return InventoryView(
        weapon=inventory.weapon.label,
        potions=inventory.potions,
        scrolls=[scroll.label for scroll in inventory.scrolls],
        has_kaftan=inventory.has_kaftan,
        has_rope=inventory.has_rope,
        cap_charges=inventory.cap_charges,
        has_spirit_heart=inventory.has_spirit_heart,
        has_karabela=inventory.has_karabela,
    )


def to_map_tile_views(state: CharacterState) -> list[MapTileView]:
    return [MapTileView(name=site.value, status=state.location_status(site).value) for site in MAP_SITES]


def to_character_snapshot_view(
    state: CharacterState,
    *,
    can_advance: bool,
    can_buy_ducat: bool,
    can_use_divination: bool,
    can_drink_potion: bool,
) -> CharacterSnapshotView:
    return CharacterSnapshotView(
        name=state.name,
        hp=state.hp,
        hp_max=state.hp_max,
        coins=state.coins,
        points=state.points,
        visited_places_count=state.visited_places_count,
        current_location=state.current_location.value,
        in_cave=state.in_cave,
        advancements=[advancement_label(held) for held in state.advancements],
        inventory=to_inventory_view(state),
        map_tiles=to_map_tile_views(state),
        can_advance=can_advance,
        can_buy_ducat=can_buy_ducat,
        can_use_divination=can_use_divination,
        can_drink_potion=can_drink_potion,
    )


def to_scroll_action_view(*, index: int, label: str, enabled: bool) -> ScrollActionView:
    return ScrollActionView(index=index, label=label, enabled=enabled)


def to_combat_view(
    *,
    enemy_name: str,
    enemy_hp: int,
    enemy_hp_max: int,
    message: str,
    lore: str,
    turn: int,
    weapon_label: str,
    can_drink_potion: bool,
    can_avoid: bool,
    flee_die: int,
    scrolls: Sequence[ScrollActionView],
) -> CombatView:
    flee_label = "Flee (no damage)" if flee_die <= 0 else f"Flee (-d{flee_die} HP)"
    return CombatView(
        enemy_name=enemy_name,
        enemy_hp=max(0, enemy_hp),
        enemy_hp_max=enemy_hp_max,
        message=message,
        lore=lore,
        turn=turn,
        weapon_label=weapon_label,
        can_attack=True,
        can_drink_potion=can_drink_potion,
        can_avoid=can_avoid,
        flee_label=flee_label,
        scrolls=list(scrolls),
    )


def to_dice_roll_view(record: RollRecord) -> DiceRollView:
    return DiceRollView(sides=list(record.sides), results=list(record.results), total=record.total)


def to_shop_view(*, title: str, coins: int, buy: Sequence[ShopItemView], sell: Sequence[ShopItemView]) -> ShopView:
    return ShopView(title=title, coins=coins, buy=list(buy), sell=list(sell))


def to_terminal_view(*, outcome: str, summary: str) -> TerminalView:
    if outcome == "won":
        return TerminalView(
            outcome=outcome,
            headline="VICTORY",
            summary=summary or "You are the Harnaś! The King of the Outlaws.",
            restart_label="Play Again",
        )
    return TerminalView(
        outcome=outcome,
        headline="DIED",
        summary=summary or "The mountains claimed another soul.",
        restart_label="Try Again",
    )
