from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from harnas.domain.models.combat import CombatSession


class StepKind(str, Enum):
    RETURN_TO_MAP = "return_to_map"
    DISPATCH = "dispatch"
    EXPLORE = "explore"
    DIVINE = "divine"
    START_FIGHT = "start_fight"
    MARK_VISITED = "mark_visited"
    FIND_OBJECT = "find_object"
    FIND_SCROLL = "find_scroll"
    QUIET = "quiet"
    MOUNTAIN_PASS = "mountain_pass"
    ENCOUNTER = "encounter"
    SNARES = "snares"
    RIDDLE = "riddle"
    RIDDLE_REWARD = "riddle_reward"
    FALL_RISK = "fall_risk"
    FALL = "fall"
    OPEN_SHOP = "open_shop"
    BURROW_TUNNEL = "burrow_tunnel"
    HUT_REST_OFFER = "hut_rest_offer"
    VILLAGE = "village"
    REST = "rest"
    PEAK_BLACK = "peak_black"
    PEAK_ACCEPT = "peak_accept"
    ENTER_CAVE = "enter_cave"
    CAVE_ROLL = "cave_roll"
    CAVE_PROMPT = "cave_prompt"
    CAVE_EXIT = "cave_exit"
    CAVE_SURFACE = "cave_surface"
    CAVE_TO_PEAK = "cave_to_peak"
    ENTER_MANOR = "enter_manor"
    MANOR_ROOM = "manor_room"
    MANOR_NEXT_ROOM = "manor_next_room"
    MANOR_CONTINUATION = "manor_continuation"
    MANOR_GIVE = "manor_give"
    MANOR_SUBMIT = "manor_submit"
    MANOR_EAT = "manor_eat"
    MANOR_CURSED_WINE = "manor_cursed_wine"
    CELLAR_DRINK = "cellar_drink"
    ADVANCE = "advance"
    ADVANCE_PICK_HARDY = "advance_pick_hardy"
    ADVANCE_HALVE = "advance_halve"


@dataclass(frozen=True)
class Step:
    """One pending unit of narrative work.

    ``then`` links to the step that runs once this one (and whatever it
    presents) has finished, so a whole pending sequence can be inspected
    by walking the chain.
    """

    kind: StepKind
    params: Mapping[str, Any] = field(default_factory=dict)
    then: Optional["Step"] = None

    def param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def chain(self) -> List[StepKind]:
        kinds: List[StepKind] = []
        cursor: Optional[Step] = self
        while cursor is not None:
            kinds.append(cursor.kind)
            cursor = cursor.then
        return kinds


def step(kind: StepKind, then: Optional[Step] = None, **params: Any) -> Step:
    return Step(kind=kind, params=dict(params), then=then)


@dataclass
class Choice:
    label: str
    step: Step
    enabled: bool = True


@dataclass
class Scene:
    title: str
    description: str
    choices: List[Choice] = field(default_factory=list)

    def labels(self) -> List[str]:
        return [choice.label for choice in self.choices]


@dataclass(frozen=True)
class IdlePhase:
    kind: str = "idle"


@dataclass
class ScenePhase:
    scene: Scene
    kind: str = "scene"


@dataclass
class CombatPhase:
    session: CombatSession
    kind: str = "combat"


@dataclass
class ShopPhase:
    mode: str
    then: Optional[Step] = None
    kind: str = "shop"


@dataclass(frozen=True)
class DeadPhase:
    kind: str = "dead"


@dataclass(frozen=True)
class WonPhase:
    kind: str = "won"


RunPhase = Union[IdlePhase, ScenePhase, CombatPhase, ShopPhase, DeadPhase, WonPhase]

TERMINAL_PHASES = (DeadPhase, WonPhase)
