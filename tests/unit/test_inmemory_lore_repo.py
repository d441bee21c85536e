import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from harnas.domain.models.enemy import EnemyId
from harnas.domain.models.location import Site
from harnas.infrastructure.inmemory.inmemory_lore_repo import InMemoryLoreRepository


class InMemoryLoreRepositoryTests(unittest.TestCase):
    def test_every_map_site_and_enemy_has_lore(self) -> None:
        repo = InMemoryLoreRepository()

        for enemy_id in EnemyId:
            with self.subTest(enemy=enemy_id):
                self.assertTrue(repo.enemy_lore(enemy_id))
        self.assertIn("Corny Groń", repo.location_lore(Site.PEAK_BLACK))

    def test_with_lore_appends_the_site_line(self) -> None:
        repo = InMemoryLoreRepository(location_lore={Site.HUT: "Smoke rises."})

        self.assertEqual("A warm hut. Smoke rises.", repo.with_lore("A warm hut.", Site.HUT))

    def test_missing_lore_leaves_the_description_unchanged(self) -> None:
        repo = InMemoryLoreRepository(location_lore={}, enemy_lore={})

        self.assertEqual("A warm hut.", repo.with_lore("A warm hut.", Site.HUT))
        self.assertEqual("", repo.enemy_lore(EnemyId.BEAR))


if __name__ == "__main__":
    unittest.main()
