from typing import Dict, Optional

from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.location import Site
from harnas.domain.repositories import LoreRepository


DEFAULT_LOCATION_LORE: Dict[Site, str] = {
    Site.MOUNTAIN_PASS: "Old smugglers once carved these switchbacks, and travelers still leave coins at the cairns for safe passage.",
    Site.DEEP_WOODS: "The firs here are said to whisper in Lemko, and the wind carries the warnings of lost woodcutters.",
    Site.MEADOW: "Shepherds tell of midnight dances where the grass lies flat by morning, and no bell rings twice the same.",
    Site.CLIFF: "A black scar in the ridge, where storms are born and ravens circle like wardens of old oaths.",
    Site.CRAGS: "Jagged teeth of the mountains, named for a stone spirit that tests the sure-footed and punishes the vain.",
    Site.BURROW: "A hungry hollow in the earth, rumored to open only for those who owe a debt to the underworld.",
    Site.CAVE: "Cold breath seeps from this throat of stone; miners claim it is a vein of the underworld itself.",
    Site.MANOR: "A decaying court of a cursed noble; locals say the clocks here count only debts.",
    Site.HUT: "A warm lamp in the high pasture, kept by a bac who swears he once shared vodka with a mountain spirit.",
    Site.VILLAGE: "A stubborn settlement bound by old rites; hearth smoke carries prayers to saints and forest guardians alike.",
    Site.PEAK_BLACK: "Known as Corny Groń, this summit marks the border between the living world and the mountain spirits.",
}

DEFAULT_ENEMY_LORE: Dict[EnemyId, str] = {
    EnemyId.HAJDUK: "A court guard turned outlaw, still bound to old orders and old grudges.",
    EnemyId.BIES: "A malicious spirit of the wilds; bonfires and salt were meant to keep its gaze away.",
    EnemyId.POACHER: "A hunter who ignores village taboos, claiming the forest owes him its meat and silence.",
    EnemyId.WOLF: "Not just a beast but a watcher; some say it is a witch's eyes on four legs.",
    EnemyId.UNDINE: "A water spirit that coils in river mists, luring travelers with songs drowned in reeds.",
    EnemyId.BEAR: "A forest lord; in old tales, bears are kin to men and must be treated with grim respect.",
    EnemyId.HIGHWAYMAN: "A mountain bandit who knows every trail and every traveler who never returned.",
    EnemyId.SPOOK: "A restless soul, bound to these heights by unkept vows and winter burial.",
    EnemyId.MILORD: "A noble corrupted by pride, haunting his halls with contracts written in blood.",
    EnemyId.MANOR_HAJDUK: "The Milord's last loyal blade, kept by oath even after the manor fell to ruin.",
    EnemyId.SPIRIT: "The ancient guardian of Corny Groń, older than the trail and colder than the stone.",
}


class InMemoryLoreRepository(LoreRepository):
    def __init__(
        self,
        location_lore: Optional[Dict[Site, str]] = None,
        enemy_lore: Optional[Dict[EnemyId, str]] = None,
    ) -> None:
        self._location_lore = dict(DEFAULT_LOCATION_LORE if location_lore is None else location_lore)
        self._enemy_lore = dict(DEFAULT_ENEMY_LORE if enemy_lore is None else enemy_lore)

    def location_lore(self, site: Site) -> str:
        return self._location_lore.get(site, "")

    def enemy_lore(self, enemy_id: EnemyId) -> str:
        return self._enemy_lore.get(enemy_id, "")
