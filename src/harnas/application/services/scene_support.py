from typing import Callable, Dict, List, Optional, Sequence, Tuple

from harnas.application.services.dice import Dice
from harnas.domain.events import LocationVisited
from harnas.domain.models.character import CharacterState
from harnas.domain.models.combat import DEFAULT_FLEE_DIE, FightConfig, RewardTag
from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.items import WeaponType
from harnas.domain.models.location import Site
from harnas.domain.models.scene import Choice, Scene, ScenePhase, Step, StepKind, step
from harnas.domain.models.session import RunSession
from harnas.domain.repositories import LoreRepository


StepHandler = Callable[[RunSession, Step], Optional[Step]]


class SceneSupport:
    """Helpers shared by every narrative step handler.

    A handler receives the run and the step being executed and returns the
    step to execute straight away, or None once it has put something on
    screen (a scene, a fight, a shop) for the player to answer.
    """

    def __init__(
        self,
        dice: Dice,
        lore_repo: Optional[LoreRepository] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        self.dice = dice
        self.lore_repo = lore_repo
        self.event_publisher = event_publisher

    def handlers(self) -> Dict[StepKind, StepHandler]:
        return {}

    def publish(self, event: object) -> None:
        if self.event_publisher is not None:
            self.event_publisher(event)

    def with_lore(self, description: str, site: Site) -> str:
        if self.lore_repo is None:
            return description
        return self.lore_repo.with_lore(description, site)

    def present(self, run: RunSession, title: str, description: str, choices: Sequence[Choice]) -> None:
        run.phase = ScenePhase(Scene(title=title, description=description, choices=list(choices)))

    def mark_visited(self, state: CharacterState, site: Site) -> None:
        state.mark_visited(site)
        self.publish(LocationVisited(site=site.value, visited_places_count=state.visited_places_count))

    @staticmethod
    def then_or_map(current: Step) -> Step:
        return current.then if current.then is not None else step(StepKind.RETURN_TO_MAP)

    @staticmethod
    def visit_then(site: Site, then: Step) -> Step:
        return step(StepKind.MARK_VISITED, then=then, site=site)


def fight_step(
    site: Site,
    *,
    hardy: bool = False,
    enemy: Optional[EnemyId] = None,
    flee_die: int = DEFAULT_FLEE_DIE,
    allow_cap: Optional[bool] = None,
    forbidden_weapons: Tuple[WeaponType, ...] = (),
    reward_tags: Tuple[RewardTag, ...] = (),
) -> Step:
    return step(
        StepKind.START_FIGHT,
        config=FightConfig(
            site=site,
            hardy=hardy,
            enemy=enemy,
            flee_die=flee_die,
            allow_cap=allow_cap,
            forbidden_weapons=tuple(forbidden_weapons),
            reward_tags=tuple(reward_tags),
        ),
    )


def choice(label: str, next_step: Step, enabled: bool = True) -> Choice:
    return Choice(label=label, step=next_step, enabled=enabled)


def continue_choices(next_step: Step, label: str = "Continue") -> List[Choice]:
    return [choice(label, next_step)]
