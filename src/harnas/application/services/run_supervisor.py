import logging
from typing import Callable, Optional

from harnas.domain.events import RunEnded
from harnas.domain.models.scene import DeadPhase, WonPhase
from harnas.domain.models.session import RunSession


logger = logging.getLogger(__name__)

DEATH_MESSAGE = "The mountains claimed another soul."
VICTORY_MESSAGE = "You are the Harnaś! The King of the Outlaws."


class RunSupervisor:
    """Forces a run into its terminal phase once death or victory is reached.

    Death is checked before victory, and a terminal phase is never left.
    """

    def __init__(self, event_publisher: Optional[Callable[[object], None]] = None) -> None:
        self.event_publisher = event_publisher

    def check(self, run: RunSession) -> bool:
        if run.is_over:
            return True
        state = run.state
        if state.is_dead or state.hp <= 0:
            state.is_dead = True
            run.phase = DeadPhase()
            run.log(DEATH_MESSAGE)
            self._ended(run, "dead")
            return True
        if state.has_won or state.holds_all_advancements:
            state.has_won = True
            run.phase = WonPhase()
            run.log(VICTORY_MESSAGE)
            self._ended(run, "won")
            return True
        return False

    def _ended(self, run: RunSession, outcome: str) -> None:
        state = run.state
        logger.info("Run ended: %s (%s points, %s advancements)", outcome, state.points, len(state.advancements))
        if self.event_publisher is not None:
            self.event_publisher(
                RunEnded(
                    outcome=outcome,
                    character_name=state.name,
                    points=state.points,
                    advancements=len(state.advancements),
                )
            )
