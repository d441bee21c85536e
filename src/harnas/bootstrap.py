import logging
import os
from typing import Optional

from harnas.application.services.dice import seeded_dice
from harnas.application.services.event_bus import EventBus
from harnas.application.services.game_service import DEFAULT_ROLL_DELAY_S, GameService
from harnas.domain.models.session import DEFAULT_MESSAGE_LOG_LIMIT
from harnas.infrastructure.inmemory.inmemory_lore_repo import InMemoryLoreRepository


DEFAULT_DICE_LOG_LIMIT = 1
DEFAULT_LOG_LEVEL = "WARNING"


def _env_int(name: str, default: Optional[int], minimum: int = 0) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def log_level_from_env() -> int:
    name = os.getenv("HARNAS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.getLevelName(DEFAULT_LOG_LEVEL)


def create_game_service() -> GameService:
    seed = _env_int("HARNAS_SEED", None, minimum=-(2**63))
    dice = seeded_dice(seed, history_limit=_env_int("HARNAS_DICE_LOG_LIMIT", DEFAULT_DICE_LOG_LIMIT, minimum=1))
    return GameService(
        dice,
        lore_repo=InMemoryLoreRepository(),
        event_bus=EventBus(),
        roll_delay_s=_env_float("HARNAS_ROLL_DELAY_S", DEFAULT_ROLL_DELAY_S),
        message_limit=_env_int("HARNAS_MESSAGE_LOG_LIMIT", DEFAULT_MESSAGE_LOG_LIMIT, minimum=1),
    )
