from enum import Enum
from typing import Dict, Tuple


class Site(str, Enum):
    PEAK_BLACK = "Peak Black"
    MANOR = "Milord's Manor"
    CLIFF = "A Cliff"
    CRAGS = "Crags"
    BURROW = "A Burrow"
    DEEP_WOODS = "Deep Woods"
    MEADOW = "A Meadow"
    MOUNTAIN_PASS = "Mountain Pass"
    HUT = "Bacówka (Shepherd's Hut)"
    VILLAGE = "Mountain Village"
    CAVE = "Cave"


class LocationStatus(str, Enum):
    UNKNOWN = "unknown"
    VISITED = "visited"
    ESCAPED = "escaped"
    CURRENT = "current"


MIN_LOCATION_ROLL = 1
MAX_LOCATION_ROLL = 12

LOCATION_TABLE: Dict[int, Site] = {
    1: Site.PEAK_BLACK,
    2: Site.MANOR,
    3: Site.CLIFF,
    4: Site.CRAGS,
    5: Site.BURROW,
    6: Site.DEEP_WOODS,
    7: Site.DEEP_WOODS,
    8: Site.MEADOW,
    9: Site.MEADOW,
    10: Site.MOUNTAIN_PASS,
    11: Site.HUT,
    12: Site.VILLAGE,
}

LOCATION_SUMMARIES: Dict[Site, str] = {
    Site.PEAK_BLACK: "The final destination.",
    Site.MANOR: "A decadent, dark house on the ridge.",
    Site.CLIFF: "Steep and dangerous.",
    Site.CRAGS: "Jagged rocks everywhere.",
    Site.BURROW: "A hole leads deep into a cave.",
    Site.DEEP_WOODS: "Shadows move between the trees.",
    Site.MEADOW: "A peaceful-looking clearing.",
    Site.MOUNTAIN_PASS: "A narrow crossing.",
    Site.HUT: "A place to rest.",
    Site.VILLAGE: "Life among the peaks.",
    Site.CAVE: "Cold breath seeps from the stone.",
}

# Display order of the sidebar map.
MAP_SITES: Tuple[Site, ...] = (
    Site.MOUNTAIN_PASS,
    Site.DEEP_WOODS,
    Site.MEADOW,
    Site.CLIFF,
    Site.CRAGS,
    Site.BURROW,
    Site.CAVE,
    Site.MANOR,
    Site.HUT,
    Site.VILLAGE,
    Site.PEAK_BLACK,
)

# Sites the Spirit expects to have been walked before it yields.
PEAK_REQUIREMENTS: Tuple[Site, ...] = (
    Site.CLIFF,
    Site.CRAGS,
    Site.BURROW,
    Site.DEEP_WOODS,
    Site.MEADOW,
    Site.MOUNTAIN_PASS,
    Site.HUT,
    Site.VILLAGE,
    Site.MANOR,
)

FALL_RISK_SITES = frozenset({Site.CLIFF, Site.CRAGS})


def clamp_location_roll(value: int) -> int:
    return max(MIN_LOCATION_ROLL, min(MAX_LOCATION_ROLL, int(value)))


def site_for_roll(value: int) -> Site:
    return LOCATION_TABLE[clamp_location_roll(value)]
