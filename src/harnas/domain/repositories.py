from abc import ABC, abstractmethod

from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.location import Site


class LoreRepository(ABC):
    @abstractmethod
    def location_lore(self, site: Site) -> str:
        raise NotImplementedError

    @abstractmethod
    def enemy_lore(self, enemy_id: EnemyId) -> str:
        raise NotImplementedError

    def with_lore(self, description: str, site: Site) -> str:
        """Append the site's lore line to a scene description."""
        lore = self.location_lore(site)
        return f"{description} {lore}".strip() if lore else description
