"""
Scoreboard repositories: raw per-game player rows and per-game context rows.

Criteria are built by the filter layer (esports_stats.services.filters) and
passed in as plain SQLAlchemy expressions.
"""
from typing import Iterable, List

from esports_stats.models import ScoreboardPlayer, ScoreboardGame
from esports_stats.repositories.base import BaseRepository


class ScoreboardPlayerRepository(BaseRepository[ScoreboardPlayer]):
    """Repository for raw per-game player rows."""

    def __init__(self, db):
        super().__init__(ScoreboardPlayer, db)

    def find_rows(self, *criterion) -> List[ScoreboardPlayer]:
        """Rows matching the criterion, in a stable (insertion) order."""
        return self.where(*criterion, order_by="id")


class ScoreboardGameRepository(BaseRepository[ScoreboardGame]):
    """Repository for per-game context rows (duration and draft)."""

    def __init__(self, db):
        super().__init__(ScoreboardGame, db)

    def find_by_overview_pages(self, overview_pages: Iterable[str]) -> List[ScoreboardGame]:
        pages = sorted(set(overview_pages))
        if not pages:
            return []
        return self.where(ScoreboardGame.overview_page.in_(pages), order_by="id")

    def count_for_tournament(self, tournament_name: str) -> int:
        """
        Number of games recorded for a tournament.

        Counts by tournament name first and falls back to overview pages
        containing the name when nothing is recorded under it.
        """
        total = self.count(ScoreboardGame.tournament == tournament_name)
        if total == 0:
            total = self.count(ScoreboardGame.overview_page.contains(tournament_name, autoescape=True))
        return total
