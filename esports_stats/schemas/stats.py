"""Aggregate statistics returned by the stats service."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class StatsFilter(BaseModel):
    """Caller-supplied filter record. Every field is optional; fields are ANDed."""
    tournament: Optional[str] = None  # id or name
    player: Optional[str] = None  # any alias
    team: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class ResultMeta(BaseModel):
    cached: bool = False
    timestamp: datetime


class ChampionStat(BaseModel):
    """Derived statistics for one champion."""
    champion: str
    games_played: int
    wins: int
    losses: int
    total_kills: int
    total_deaths: int
    total_assists: int
    total_gold: int
    total_cs: int
    total_damage_to_champions: int
    total_vision_score: int
    win_rate: float
    avg_kills: float
    avg_deaths: float
    avg_assists: float
    kda: float
    avg_gold: int
    avg_cs: float
    avg_damage_to_champions: int
    avg_vision_score: float
    avg_kill_participation: float
    unique_players: int
    avg_damage_per_minute: float
    pick_rate: Optional[float] = None
    presence_rate: Optional[float] = Field(
        default=None,
        description="Estimate: pick share plus a flat 10% ban allowance when the champion was banned at all",
    )


class PlayerStat(BaseModel):
    """Derived statistics for one player (keyed by link)."""
    player: str
    name: str
    role: Optional[str] = None
    games_played: int
    wins: int
    losses: int
    total_kills: int
    total_deaths: int
    total_assists: int
    total_gold: int
    total_cs: int
    total_damage_to_champions: int
    total_vision_score: int
    win_rate: float
    avg_kills: float
    avg_deaths: float
    avg_assists: float
    kda: float
    avg_gold: int
    avg_cs: float
    avg_damage_to_champions: int
    avg_vision_score: float
    avg_kill_participation: float
    avg_cs_per_minute: float
    avg_gold_per_minute: int
    avg_damage_per_minute: float
    unique_champions: int


class ChampionStatsResult(BaseModel):
    tournament: Optional[str] = None
    player: Optional[str] = None
    team: Optional[str] = None
    total_games: int
    unique_champions: int
    champions: List[ChampionStat]
    meta: ResultMeta


class PlayerStatsResult(BaseModel):
    """All players matching a tournament and/or team filter."""
    tournament: Optional[str] = None
    team: Optional[str] = None
    total_games: int
    unique_players: int
    players: List[PlayerStat]
    meta: ResultMeta


class SinglePlayerStatsResult(BaseModel):
    """One player's statistics (player filter without a team filter)."""
    player: str
    tournament: Optional[str] = None
    total_games: int
    stats: PlayerStat
    meta: ResultMeta
