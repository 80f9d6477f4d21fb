from esports_stats.schemas.stats import (
    StatsFilter,
    ResultMeta,
    ChampionStat,
    PlayerStat,
    ChampionStatsResult,
    PlayerStatsResult,
    SinglePlayerStatsResult,
)
from esports_stats.schemas.seasons import TournamentEntry, SplitGroup, SeasonGroup

__all__ = [
    "StatsFilter",
    "ResultMeta",
    "ChampionStat",
    "PlayerStat",
    "ChampionStatsResult",
    "PlayerStatsResult",
    "SinglePlayerStatsResult",
    "TournamentEntry",
    "SplitGroup",
    "SeasonGroup",
]
