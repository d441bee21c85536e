import logging
from dataclasses import dataclass, field
from typing import List

from harnas.application.services.event_bus import EventBus
from harnas.domain.events import (
    AdvancementGranted,
    AdvancementRevoked,
    CombatFled,
    EnemyDefeated,
    LocationVisited,
    RunEnded,
)


logger = logging.getLogger(__name__)


@dataclass
class RunChronicle:
    """Tallies of what happened in a run, fed by the event bus."""

    places_visited: int = 0
    enemies_defeated: List[str] = field(default_factory=list)
    fights_fled: int = 0
    advancements_granted: int = 0
    advancements_lost: int = 0
    outcome: str = ""

    def record(self, event: object) -> None:
        if isinstance(event, LocationVisited):
            self.places_visited += 1
            logger.debug("Visited %s (%s places)", event.site, event.visited_places_count)
        elif isinstance(event, EnemyDefeated):
            self.enemies_defeated.append(event.enemy_id)
            logger.info("Defeated %s at %s for %s points", event.enemy_id, event.site, event.points_awarded)
        elif isinstance(event, CombatFled):
            self.fights_fled += 1
            logger.info("Fled %s at %s", event.enemy_id, event.site)
        elif isinstance(event, AdvancementGranted):
            self.advancements_granted += 1
            logger.info("Advancement %s granted, %s held", event.advancement_id, event.held)
        elif isinstance(event, AdvancementRevoked):
            self.advancements_lost += 1
            logger.info("Advancement %s lost, %s held", event.advancement_id, event.held)
        elif isinstance(event, RunEnded):
            self.outcome = event.outcome
            logger.info("%s's run ended: %s", event.character_name, event.outcome)

    def reset(self) -> None:
        self.places_visited = 0
        self.enemies_defeated = []
        self.fights_fled = 0
        self.advancements_granted = 0
        self.advancements_lost = 0
        self.outcome = ""

    def summary(self) -> str:
        return (
            f"Places explored: {self.places_visited}. "
            f"Enemies defeated: {len(self.enemies_defeated)}. "
            f"Fights fled: {self.fights_fled}. "
            f"Advancements earned: {self.advancements_granted}."
        )


def register_chronicle_handlers(event_bus: EventBus, chronicle: RunChronicle) -> None:
    event_bus.subscribe_many(
        [LocationVisited, EnemyDefeated, CombatFled, AdvancementGranted, AdvancementRevoked, RunEnded],
        chronicle.record,
        priority=50,
    )
