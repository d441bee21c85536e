from dataclasses import dataclass
from typing import Union


@dataclass
class LocationVisited:
    site: str
    visited_places_count: int


@dataclass
class EnemyDefeated:
    enemy_id: str
    site: str
    points_awarded: int
    turn: int


@dataclass
class CombatFled:
    enemy_id: str
    site: str
    damage_taken: int


@dataclass
class AdvancementGranted:
    advancement_id: int
    held: int


@dataclass
class AdvancementRevoked:
    advancement_id: int
    held: int


@dataclass
class RunEnded:
    outcome: str
    character_name: str
    points: int
    advancements: int


RunEvent = Union[LocationVisited, EnemyDefeated, CombatFled, AdvancementGranted, AdvancementRevoked, RunEnded]
