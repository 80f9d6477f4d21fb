"""
Aggregation engine: folds raw per-game rows into derived statistics.

Everything here is pure and synchronous. Rows are mappings with the
scoreboard columns (kills, deaths, assists, gold, cs, damage_to_champions,
vision_score, team_kills, player_win, champion, link, name, role) plus an
optional ``gamelength_number`` in minutes.

Numeric semantics:
- Averages are total / games played.
- KDA is computed from the averages: (avg kills + avg assists) / avg deaths,
  or avg kills + avg assists when avg deaths is 0.
- Kill participation is an average of per-game ratios, not a ratio of sums.
- Per-minute rates divide totals by the summed game minutes and are 0 when
  either side is 0.
- Rounding is half-up: 2 decimals by default, gold and damage to integers,
  cs and vision to 1 decimal.
"""
import math
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from esports_stats.schemas import ChampionStat, PlayerStat

# Presence-rate heuristic: any banned champion is credited with bans in this
# share of the tournament's games (at least one game). Not an exact count.
ESTIMATED_BAN_SHARE = 0.10

WIN_FLAG = "Yes"


@dataclass(frozen=True)
class DraftPools:
    """Every champion picked or banned at least once in a set of games."""
    picks: frozenset
    bans: frozenset


@dataclass
class _Totals:
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    gold: int = 0
    cs: int = 0
    damage: int = 0
    vision: int = 0
    kill_participation: float = 0.0
    game_minutes: float = 0.0
    distinct: Set[str] = field(default_factory=set)
    name: Optional[str] = None
    role: Optional[str] = None

    def add(self, row: Mapping[str, Any], distinct_key: Optional[str]) -> None:
        self.games_played += 1
        if row.get("player_win") == WIN_FLAG:
            self.wins += 1
        else:
            self.losses += 1

        kills = row.get("kills") or 0
        assists = row.get("assists") or 0
        self.kills += kills
        self.deaths += row.get("deaths") or 0
        self.assists += assists
        self.gold += row.get("gold") or 0
        self.cs += row.get("cs") or 0
        self.damage += row.get("damage_to_champions") or 0
        self.vision += row.get("vision_score") or 0

        team_kills = max(row.get("team_kills") or 0, 1)
        self.kill_participation += (kills + assists) / team_kills * 100

        if distinct_key:
            self.distinct.add(distinct_key)

        minutes = row.get("gamelength_number")
        if minutes and minutes > 0:
            self.game_minutes += minutes

    def average(self, total: float) -> float:
        return total / self.games_played if self.games_played else 0.0

    def per_minute(self, total: float) -> float:
        if self.game_minutes > 0 and total > 0:
            return total / self.game_minutes
        return 0.0


def _round(value: float, digits: int = 2) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _round_int(value: float) -> int:
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _common_fields(totals: _Totals) -> Dict[str, Any]:
    avg_kills = totals.average(totals.kills)
    avg_deaths = totals.average(totals.deaths)
    avg_assists = totals.average(totals.assists)
    kda = (avg_kills + avg_assists) / avg_deaths if avg_deaths > 0 else avg_kills + avg_assists

    return {
        "games_played": totals.games_played,
        "wins": totals.wins,
        "losses": totals.losses,
        "total_kills": totals.kills,
        "total_deaths": totals.deaths,
        "total_assists": totals.assists,
        "total_gold": totals.gold,
        "total_cs": totals.cs,
        "total_damage_to_champions": totals.damage,
        "total_vision_score": totals.vision,
        "win_rate": _round(totals.average(totals.wins) * 100),
        "avg_kills": _round(avg_kills),
        "avg_deaths": _round(avg_deaths),
        "avg_assists": _round(avg_assists),
        "kda": _round(kda),
        "avg_gold": _round_int(totals.average(totals.gold)),
        "avg_cs": _round(totals.average(totals.cs), 1),
        "avg_damage_to_champions": _round_int(totals.average(totals.damage)),
        "avg_vision_score": _round(totals.average(totals.vision), 1),
        "avg_kill_participation": _round(totals.average(totals.kill_participation)),
        "avg_damage_per_minute": _round(totals.per_minute(totals.damage), 1),
    }


# =============================================================================
# CHAMPION VIEW
# =============================================================================

def presence_rate(
    champion: str,
    games_played: int,
    total_games: int,
    draft: DraftPools,
) -> float:
    """
    Estimated share of games in which a champion was picked or banned.

    Bans are not counted per game: a champion that shows up in the ban pool
    at all is credited with max(1, floor(total_games * 10%)) bans. The result
    is a heuristic, capped at 100.
    """
    presence = games_played if champion in draft.picks else 0
    if champion in draft.bans:
        presence += max(1, math.floor(total_games * ESTIMATED_BAN_SHARE))
    return min(100.0, presence / total_games * 100)


def aggregate_champion_stats(
    rows: Iterable[Mapping[str, Any]],
    total_games: Optional[int] = None,
    draft: Optional[DraftPools] = None,
) -> List[ChampionStat]:
    """
    Aggregate rows per champion.

    Args:
        rows: Raw per-game rows; rows without a champion are ignored
        total_games: Games in the tournament context; enables pick rate
        draft: Tournament pick/ban pools; enables presence rate (needs total_games)

    Returns:
        Champion statistics sorted by games played, then win rate (descending)
    """
    per_champion: Dict[str, _Totals] = defaultdict(_Totals)
    for row in rows:
        champion = row.get("champion")
        if not champion:
            continue
        per_champion[champion].add(row, row.get("link"))

    stats = []
    for champion, totals in per_champion.items():
        pick_rate = None
        presence = None
        if total_games:
            pick_rate = _round(totals.games_played / total_games * 100)
            if draft is not None:
                presence = _round(presence_rate(champion, totals.games_played, total_games, draft))

        stats.append(ChampionStat(
            champion=champion,
            unique_players=len(totals.distinct),
            pick_rate=pick_rate,
            presence_rate=presence,
            **_common_fields(totals),
        ))

    return sorted(stats, key=lambda s: (-s.games_played, -s.win_rate))


# =============================================================================
# PLAYER VIEW
# =============================================================================

def aggregate_player_stats(rows: Iterable[Mapping[str, Any]]) -> List[PlayerStat]:
    """
    Aggregate rows per player link.

    The display name is the first non-blank name seen for the link (falling
    back to the link itself) and the role is the first role seen.

    Returns:
        Player statistics sorted by KDA, then win rate (descending)
    """
    per_player: Dict[str, _Totals] = defaultdict(_Totals)
    for row in rows:
        link = row.get("link")
        if not link:
            continue
        totals = per_player[link]
        name = (row.get("name") or "").strip()
        if totals.name is None and name:
            totals.name = row.get("name")
        if totals.role is None and row.get("role"):
            totals.role = row.get("role")
        totals.add(row, row.get("champion"))

    stats = []
    for link, totals in per_player.items():
        stats.append(PlayerStat(
            player=link,
            name=totals.name or link,
            role=totals.role,
            unique_champions=len(totals.distinct),
            avg_cs_per_minute=_round(totals.per_minute(totals.cs), 1),
            avg_gold_per_minute=_round_int(totals.per_minute(totals.gold)),
            **_common_fields(totals),
        ))

    return sorted(stats, key=lambda s: (-s.kda, -s.win_rate))


def select_player(stats: List[PlayerStat], canonical_key: str) -> Optional[PlayerStat]:
    """The player's own entry, or the first entry when rows were recorded under an alias."""
    for stat in stats:
        if stat.player == canonical_key:
            return stat
    return stats[0] if stats else None


# =============================================================================
# PER-GAME CONTEXT
# =============================================================================

def game_length_map(games: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Game minutes per overview page.

    Context rows join on the page reference, not on the game, so one
    duration stands for every game of the page (the last non-empty one read).
    """
    lengths: Dict[str, float] = {}
    for game in games:
        minutes = game.get("gamelength_number")
        if minutes and game.get("overview_page"):
            lengths[game["overview_page"]] = minutes
    return lengths


def with_game_lengths(
    rows: Iterable[Mapping[str, Any]],
    lengths: Mapping[str, float],
) -> List[Dict[str, Any]]:
    """Copy rows adding ``gamelength_number`` looked up by overview page."""
    return [
        {**row, "gamelength_number": lengths.get(row.get("overview_page"))}
        for row in rows
    ]


def draft_pools(games: Iterable[Mapping[str, Any]]) -> DraftPools:
    picks: Set[str] = set()
    bans: Set[str] = set()
    for game in games:
        for column, pool in (("team1_picks", picks), ("team2_picks", picks),
                             ("team1_bans", bans), ("team2_bans", bans)):
            pool.update(champion for champion in game.get(column) or [] if champion)
    return DraftPools(picks=frozenset(picks), bans=frozenset(bans))
