from __future__ import annotations

import logging
from typing import Optional

from harnas.application.services.dice import Dice
from harnas.domain.events import AdvancementGranted, AdvancementRevoked
from harnas.domain.models.character import CharacterState
from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.progression import (
    ADVANCE_POINTS_THRESHOLD,
    ADVANCE_SITES_THRESHOLD,
    DUCAT_PRICE,
)


logger = logging.getLogger(__name__)


class ProgressionService:
    def __init__(self, dice: Dice, event_publisher=None) -> None:
        self.dice = dice
        self._event_publisher = event_publisher

    def _publish(self, event: object) -> None:
        if self._event_publisher is not None:
            self._event_publisher(event)

    def roll_new_advancement(self, state: CharacterState) -> Optional[int]:
        """Roll a d6 until it lands on an advancement not yet held."""
        if state.holds_all_advancements:
            return None
        result = self.dice.d6()
        while state.has_advancement(result):
            result = self.dice.d6()
        return result

    def grant(
        self,
        state: CharacterState,
        advancement_id: int,
        *,
        halve_scanty: EnemyId | None = None,
        halve_hardy: EnemyId | None = None,
    ) -> bool:
        granted = state.grant_advancement(advancement_id, halve_scanty=halve_scanty, halve_hardy=halve_hardy)
        if not granted:
            logger.debug("Advancement %s already held; not granted again", advancement_id)
            return False
        held = len(state.advancements)
        logger.info("Advancement %s granted (%s held)", advancement_id, held)
        self._publish(AdvancementGranted(advancement_id=int(advancement_id), held=held))
        return True

    def revoke(self, state: CharacterState, advancement_id: int) -> bool:
        revoked = state.revoke_advancement(advancement_id)
        if revoked:
            logger.info("Advancement %s revoked", advancement_id)
            self._publish(AdvancementRevoked(advancement_id=int(advancement_id), held=len(state.advancements)))
        return revoked

    @staticmethod
    def can_manual_advance(state: CharacterState) -> bool:
        return state.points >= ADVANCE_POINTS_THRESHOLD and state.visited_places_count >= ADVANCE_SITES_THRESHOLD

    @staticmethod
    def pay_for_manual_advance(state: CharacterState) -> None:
        state.points = 0
        state.visited_places_count = 0
        state.temporary_hit_penalty = 0

    @staticmethod
    def can_buy_ducat(state: CharacterState) -> bool:
        return state.coins >= DUCAT_PRICE

    @staticmethod
    def pay_for_ducat(state: CharacterState) -> None:
        state.coins -= DUCAT_PRICE
        state.temporary_hit_penalty = 0
