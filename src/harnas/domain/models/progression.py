from enum import IntEnum
from typing import Dict


class AdvancementId(IntEnum):
    HARNAS_TITLE = 1
    HIT_BONUS = 2
    MAX_HP = 3
    HERBALIST = 4
    SCATTERGUN = 5
    RESILIENCE = 6


ADVANCEMENT_LABELS: Dict[AdvancementId, str] = {
    AdvancementId.HARNAS_TITLE: "Harnaś Title (Leader of Outlaws)",
    AdvancementId.HIT_BONUS: "+1 to Hit Rolls",
    AdvancementId.MAX_HP: "Max HP increases to 20",
    AdvancementId.HERBALIST: "Travelling Herbalist (Gain 5 points)",
    AdvancementId.SCATTERGUN: "Get a Scattergun",
    AdvancementId.RESILIENCE: "Resilience: Half damage from one Enemy type",
}

ADVANCEMENT_COUNT = len(AdvancementId)

BASE_MAX_HP = 15
RAISED_MAX_HP = 20
HERBALIST_POINTS = 5

ADVANCE_POINTS_THRESHOLD = 15
ADVANCE_SITES_THRESHOLD = 12
DUCAT_PRICE = 40


def advancement_label(advancement_id: int) -> str:
    return ADVANCEMENT_LABELS[AdvancementId(advancement_id)]
