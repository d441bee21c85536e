from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from harnas.domain.models.character import CharacterState
from harnas.domain.models.combat import CombatSession
from harnas.domain.models.scene import CombatPhase, IdlePhase, RunPhase, Scene, ScenePhase, TERMINAL_PHASES


DEFAULT_MESSAGE_LOG_LIMIT = 50


@dataclass
class RunSession:
    """Everything one run owns: the character and what is on screen."""

    state: CharacterState
    phase: RunPhase = field(default_factory=IdlePhase)
    message_limit: int = DEFAULT_MESSAGE_LOG_LIMIT
    messages: Deque[str] = field(default_factory=deque)
    logged_total: int = 0

    def __post_init__(self) -> None:
        self.messages = deque(self.messages, maxlen=max(1, int(self.message_limit)))

    def log(self, message: str) -> None:
        text = str(message or "").strip()
        if text:
            self.messages.appendleft(text)
            self.logged_total += 1

    def recent_messages(self) -> List[str]:
        return list(self.messages)

    def messages_since(self, mark: int) -> List[str]:
        """Messages logged after ``mark`` in the order they were written."""
        fresh = max(0, min(self.logged_total - mark, len(self.messages)))
        return list(reversed(list(self.messages)[:fresh]))

    @property
    def is_over(self) -> bool:
        return isinstance(self.phase, TERMINAL_PHASES)

    @property
    def scene(self) -> Optional[Scene]:
        return self.phase.scene if isinstance(self.phase, ScenePhase) else None

    @property
    def combat(self) -> Optional[CombatSession]:
        return self.phase.session if isinstance(self.phase, CombatPhase) else None
