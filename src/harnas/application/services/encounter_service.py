from __future__ import annotations

import logging
from dataclasses import dataclass

from harnas.application.services.balance_tables import REVISIT_AMBUSH_ROLL
from harnas.application.services.dice import Dice
from harnas.domain.models.character import CharacterState
from harnas.domain.models.location import Site, clamp_location_roll, site_for_roll


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchDecision:
    location_id: int
    site: Site
    revisit: bool = False
    ambush: bool = False


class EncounterService:
    """Turns a location roll into the site the character arrives at."""

    def __init__(self, dice: Dice) -> None:
        self.dice = dice

    def roll_location(self, state: CharacterState) -> int:
        raw = self.dice.roll_many((6, 6)).total + state.location_roll_modifier
        location_id = clamp_location_roll(raw)
        logger.debug("Location roll %s (modifier %s) dispatches to %s", raw, state.location_roll_modifier, location_id)
        return location_id

    @staticmethod
    def resolve_target(state: CharacterState, location_id: int) -> Site:
        site = site_for_roll(location_id)
        # The manor cannot be entered twice; its slot leads on to the peak.
        if site == Site.MANOR and Site.MANOR in state.visited_sites:
            return Site.PEAK_BLACK
        return site

    @staticmethod
    def is_revisit(state: CharacterState, site: Site) -> bool:
        return site != Site.PEAK_BLACK and state.has_been_at(site)

    def dispatch(self, state: CharacterState, location_id: int) -> DispatchDecision:
        location_id = clamp_location_roll(location_id)
        site = self.resolve_target(state, location_id)
        revisit = self.is_revisit(state, site)
        ambush = False
        if revisit:
            ambush = self.dice.d4() == REVISIT_AMBUSH_ROLL
        state.current_location = site
        state.in_cave = False
        logger.info("Arrived at %s (revisit=%s, ambush=%s)", site.value, revisit, ambush)
        return DispatchDecision(location_id=location_id, site=site, revisit=revisit, ambush=ambush)
