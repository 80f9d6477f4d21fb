"""
Repository layer for read-only data access.

Usage:
    from esports_stats.repositories import PlayerRepository
    from esports_stats.core.database import get_db

    for db in get_db():
        redirect = PlayerRepository(db).find_redirect("Caps")
"""

from esports_stats.repositories.base import BaseRepository
from esports_stats.repositories.player_repository import PlayerRepository
from esports_stats.repositories.team_repository import TeamRepository
from esports_stats.repositories.tournament_repository import TournamentRepository, LeagueRepository
from esports_stats.repositories.scoreboard_repository import (
    ScoreboardPlayerRepository,
    ScoreboardGameRepository,
)

__all__ = [
    "BaseRepository",
    "PlayerRepository",
    "TeamRepository",
    "TournamentRepository",
    "LeagueRepository",
    "ScoreboardPlayerRepository",
    "ScoreboardGameRepository",
]
