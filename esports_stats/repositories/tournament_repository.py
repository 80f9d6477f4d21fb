"""
Tournament and League repositories.

Usage:
    repo = TournamentRepository(db)
    tournament = repo.find_by_identifier("LEC 2024 Spring")
    rows = repo.find_with_match_counts("LoL EMEA Championship")
"""
from typing import Optional, List, Tuple

from sqlalchemy import func, or_

from esports_stats.models import League, Tournament, ScoreboardGame
from esports_stats.repositories.base import BaseRepository


class TournamentRepository(BaseRepository[Tournament]):
    """Repository for tournament metadata."""

    def __init__(self, db):
        super().__init__(Tournament, db)

    def find_by_identifier(self, identifier: str) -> Optional[Tournament]:
        """First tournament whose name, overview page or standard name equals the identifier."""
        return self.where_first(
            or_(
                Tournament.name == identifier,
                Tournament.overview_page == identifier,
                Tournament.standard_name == identifier,
            ),
            order_by="id",
        )

    def find_by_league(self, league_name: str) -> List[Tournament]:
        """Tournaments of a league, most recent first."""
        return self.where(Tournament.league == league_name, order_by="-date_start")

    def find_with_match_counts(self, league_name: str) -> List[Tuple[Tournament, int]]:
        """
        Tournaments of a league with the number of recorded games for each.

        Games are counted through the shared overview page, so tournaments
        without any scoreboard game come back with a count of 0.
        """
        match_count = func.count(ScoreboardGame.id)
        return (
            self.db.query(Tournament, match_count)
            .outerjoin(ScoreboardGame, ScoreboardGame.overview_page == Tournament.overview_page)
            .filter(Tournament.league == league_name)
            .group_by(Tournament.id)
            .order_by(Tournament.year, Tournament.split_number, Tournament.date_start, Tournament.name)
            .all()
        )


class LeagueRepository(BaseRepository[League]):
    """Repository for leagues."""

    def __init__(self, db):
        super().__init__(League, db)
