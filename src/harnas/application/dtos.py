from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ActionResult:
    messages: List[str] = field(default_factory=list)
    game_over: bool = False
    status: str = "ok"
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == "ok"

    @classmethod
    def rejected(cls, reason: str, message: str = "") -> "ActionResult":
        return cls(messages=[message] if message else [], status="rejected", reason=reason)


@dataclass
class ChoiceView:
    index: int
    label: str
    enabled: bool = True


@dataclass
class SceneView:
    title: str
    description: str
    choices: List[ChoiceView] = field(default_factory=list)


@dataclass
class ScrollActionView:
    index: int
    label: str
    enabled: bool


@dataclass
class CombatView:
    enemy_name: str
    enemy_hp: int
    enemy_hp_max: int
    message: str
    lore: str
    turn: int
    weapon_label: str
    can_attack: bool = True
    can_drink_potion: bool = False
    can_avoid: bool = False
    flee_label: str = ""
    scrolls: List[ScrollActionView] = field(default_factory=list)


@dataclass
class MapTileView:
    name: str
    status: str


@dataclass
class InventoryView:
    weapon: str
    potions: int
    scrolls: List[str] = field(default_factory=list)
    has_kaftan: bool = False
    has_rope: bool = False
    cap_charges: int = 0
    has_spirit_heart: bool = False
    has_karabela: bool = False


@dataclass
class CharacterSnapshotView:
    name: str
    hp: int
    hp_max: int
    coins: int
    points: int
    visited_places_count: int
    current_location: str
    in_cave: bool
    advancements: List[str] = field(default_factory=list)
    inventory: Optional[InventoryView] = None
    map_tiles: List[MapTileView] = field(default_factory=list)
    can_advance: bool = False
    can_buy_ducat: bool = False
    can_use_divination: bool = False
    can_drink_potion: bool = False


@dataclass
class DiceRollView:
    sides: List[int] = field(default_factory=list)
    results: List[int] = field(default_factory=list)
    total: int = 0


@dataclass
class ShopItemView:
    item_id: str
    name: str
    price: int
    can_trade: bool
    availability_note: str = ""


@dataclass
class ShopView:
    title: str
    coins: int
    buy: List[ShopItemView] = field(default_factory=list)
    sell: List[ShopItemView] = field(default_factory=list)


@dataclass
class TerminalView:
    outcome: str
    headline: str
    summary: str
    restart_label: str


@dataclass
class GameView:
    phase: str
    character: Optional[CharacterSnapshotView] = None
    scene: Optional[SceneView] = None
    combat: Optional[CombatView] = None
    shop: Optional[ShopView] = None
    terminal: Optional[TerminalView] = None
    messages: List[str] = field(default_factory=list)
    dice: List[DiceRollView] = field(default_factory=list)
