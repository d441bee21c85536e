from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from harnas.domain.models.enemy import Enemy, EnemyCategory, EnemyId
from harnas.domain.models.items import BARE_HANDS, WEAPONS, Scroll, ScrollType, Weapon, WeaponType
from harnas.domain.models.location import LocationStatus, Site
from harnas.domain.models.progression import (
    ADVANCEMENT_COUNT,
    BASE_MAX_HP,
    HERBALIST_POINTS,
    RAISED_MAX_HP,
    AdvancementId,
)


MAX_POTIONS = 10
REST_COOLDOWN_READY = 6


@dataclass
class Inventory:
    weapon: Weapon = BARE_HANDS
    potions: int = 0
    scrolls: List[Scroll] = field(default_factory=list)
    has_kaftan: bool = False
    cap_charges: int = 0
    has_rope: bool = False
    has_spirit_heart: bool = False
    has_karabela: bool = False

    def __post_init__(self) -> None:
        if self.weapon is None:
            self.weapon = BARE_HANDS
        self.potions = max(0, min(MAX_POTIONS, int(self.potions)))
        self.compact_scrolls()

    def compact_scrolls(self) -> None:
        self.scrolls = [scroll for scroll in self.scrolls if scroll.uses > 0]

    def find_scroll(self, scroll_type: ScrollType) -> Optional[int]:
        for index, scroll in enumerate(self.scrolls):
            if scroll.type == scroll_type:
                return index
        return None


@dataclass
class LoseableItem:
    label: str
    remove: Callable[["CharacterState"], None]


@dataclass
class CharacterState:
    name: str
    hp: int = BASE_MAX_HP
    hp_max: int = BASE_MAX_HP
    coins: int = 0
    points: int = 0
    advancements: List[int] = field(default_factory=list)
    permanent_hit_bonus: int = 0
    half_damage: Dict[EnemyCategory, EnemyId] = field(default_factory=dict)
    inventory: Inventory = field(default_factory=Inventory)
    current_location: Site = Site.MOUNTAIN_PASS
    visited_sites: Set[Site] = field(default_factory=set)
    escaped_sites: Set[Site] = field(default_factory=set)
    visited_places_count: int = 0
    location_roll_modifier: int = 0
    hut_cooldown: int = REST_COOLDOWN_READY
    village_cooldown: int = REST_COOLDOWN_READY
    spring_cooldown: int = REST_COOLDOWN_READY
    manor_rooms_visited: Set[int] = field(default_factory=set)
    manor_entered_from_cave: bool = False
    in_cave: bool = False
    cave_hidden_passage_seen: bool = False
    milord_defeated: bool = False
    milord_hunts: bool = False
    milord_true_name_known: bool = False
    next_fight_hit_mod: int = 0
    temporary_hit_penalty: int = 0
    active_helper_turns: int = 0
    is_dead: bool = False
    has_won: bool = False

    # vitals

    def heal(self, amount: int) -> int:
        before = self.hp
        self.hp = min(self.hp + max(0, int(amount)), self.hp_max)
        return max(0, self.hp - before)

    def heal_full(self) -> None:
        self.hp = self.hp_max

    def take_damage(self, amount: int) -> int:
        dealt = max(0, int(amount))
        self.hp = max(0, self.hp - dealt)
        return dealt

    @property
    def alive(self) -> bool:
        return self.hp > 0

    # inventory

    @property
    def weapon(self) -> Weapon:
        return self.inventory.weapon

    def equip(self, weapon_type: WeaponType) -> None:
        self.inventory.weapon = WEAPONS[WeaponType(weapon_type)]
        self.inventory.has_karabela = self.inventory.weapon.name == WeaponType.KARABELA

    def add_potion(self) -> bool:
        if self.inventory.potions >= MAX_POTIONS:
            return False
        self.inventory.potions += 1
        return True

    def consume_potion(self) -> bool:
        if self.inventory.potions <= 0:
            return False
        self.inventory.potions -= 1
        return True

    def add_scroll(self, scroll: Scroll) -> None:
        if scroll.uses > 0:
            self.inventory.scrolls.append(scroll)

    def spend_scroll_charge(self, index: int) -> Optional[Scroll]:
        if index < 0 or index >= len(self.inventory.scrolls):
            return None
        scroll = self.inventory.scrolls[index]
        scroll.uses -= 1
        self.inventory.compact_scrolls()
        return scroll

    def remove_scroll(self, index: int) -> Optional[Scroll]:
        if index < 0 or index >= len(self.inventory.scrolls):
            return None
        return self.inventory.scrolls.pop(index)

    def loseable_items(self) -> List[LoseableItem]:
        items: List[LoseableItem] = []
        inventory = self.inventory
        if inventory.weapon.name != WeaponType.BARE_HANDS:
            items.append(LoseableItem(f"Weapon: {inventory.weapon.label}", lambda s: s.equip(WeaponType.BARE_HANDS)))
        if inventory.potions > 0:
            items.append(LoseableItem("Herbal Potion", lambda s: s.consume_potion()))
        if inventory.has_rope:
            items.append(LoseableItem("Rope", lambda s: setattr(s.inventory, "has_rope", False)))
        if inventory.has_kaftan:
            items.append(LoseableItem("Leather Kaftan", lambda s: setattr(s.inventory, "has_kaftan", False)))
        if inventory.cap_charges > 0:
            items.append(LoseableItem("Invisibility Cap", lambda s: setattr(s.inventory, "cap_charges", 0)))
        for index, scroll in enumerate(inventory.scrolls):
            items.append(
                LoseableItem(f"Scroll: {scroll.type.value}", lambda s, position=index: s.remove_scroll(position))
            )
        return items

    # locations

    def mark_visited(self, site: Site) -> None:
        self.visited_places_count += 1
        self.visited_sites.add(site)
        self.escaped_sites.discard(site)
        self.hut_cooldown += 1
        self.village_cooldown += 1
        self.spring_cooldown += 1

    def mark_escaped(self, site: Site) -> None:
        # A site already walked stays visited; escaping it again changes nothing.
        if site not in self.visited_sites:
            self.escaped_sites.add(site)

    def has_been_at(self, site: Site) -> bool:
        return site in self.visited_sites or site in self.escaped_sites

    def location_status(self, site: Site) -> LocationStatus:
        if site == self.current_location or (site == Site.CAVE and self.in_cave):
            return LocationStatus.CURRENT
        if site in self.visited_sites:
            return LocationStatus.VISITED
        if site in self.escaped_sites:
            return LocationStatus.ESCAPED
        return LocationStatus.UNKNOWN

    # advancements

    def has_advancement(self, advancement_id: int) -> bool:
        return int(advancement_id) in self.advancements

    @property
    def holds_all_advancements(self) -> bool:
        return len(set(self.advancements)) >= ADVANCEMENT_COUNT

    def grant_advancement(
        self,
        advancement_id: int,
        *,
        halve_scanty: Optional[EnemyId] = None,
        halve_hardy: Optional[EnemyId] = None,
    ) -> bool:
        advancement = AdvancementId(advancement_id)
        if self.has_advancement(advancement):
            return False
        self.advancements.append(int(advancement))
        if advancement == AdvancementId.HIT_BONUS:
            self.permanent_hit_bonus += 1
        elif advancement == AdvancementId.MAX_HP:
            self.hp_max = RAISED_MAX_HP
            self.hp = RAISED_MAX_HP
        elif advancement == AdvancementId.HERBALIST:
            self.points += HERBALIST_POINTS
        elif advancement == AdvancementId.SCATTERGUN:
            self.equip(WeaponType.SCATTERGUN)
        elif advancement == AdvancementId.RESILIENCE:
            if halve_scanty is not None:
                self.half_damage[EnemyCategory.SCANTY] = EnemyId(halve_scanty)
            if halve_hardy is not None:
                self.half_damage[EnemyCategory.HARDY] = EnemyId(halve_hardy)
        return True

    def revoke_advancement(self, advancement_id: int) -> bool:
        advancement = AdvancementId(advancement_id)
        if not self.has_advancement(advancement):
            return False
        self.advancements = [value for value in self.advancements if value != int(advancement)]
        if advancement == AdvancementId.HIT_BONUS:
            self.permanent_hit_bonus = max(0, self.permanent_hit_bonus - 1)
        elif advancement == AdvancementId.MAX_HP:
            self.hp_max = BASE_MAX_HP
            self.hp = min(self.hp, BASE_MAX_HP)
        elif advancement == AdvancementId.HERBALIST:
            self.points = max(0, self.points - HERBALIST_POINTS)
        elif advancement == AdvancementId.SCATTERGUN:
            if self.weapon.name == WeaponType.SCATTERGUN:
                self.equip(WeaponType.BARE_HANDS)
        elif advancement == AdvancementId.RESILIENCE:
            self.half_damage = {}
        return True

    def halves_damage_from(self, enemy: Enemy) -> bool:
        return self.half_damage.get(enemy.category) == enemy.id
