"""
Models module.

Usage:
    from esports_stats.models import Player, PlayerRedirect, ScoreboardPlayer
"""

from esports_stats.models.models import (
    Base,
    Player,
    PlayerRedirect,
    Team,
    League,
    Tournament,
    ScoreboardPlayer,
    ScoreboardGame,
)

__all__ = [
    "Base",
    "Player",
    "PlayerRedirect",
    "Team",
    "League",
    "Tournament",
    "ScoreboardPlayer",
    "ScoreboardGame",
]
