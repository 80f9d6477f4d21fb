"""
Filter specifications for scoreboard reads.

A stats query is described by a small set of immutable clauses, composed with
StatsFilterBuilder and compiled once into SQLAlchemy criteria:

    spec = (
        StatsFilterBuilder()
        .by_tournament(conditions.names, conditions.overview_pages)
        .by_player(resolution.aliases)
        .build()
    )
    rows = ScoreboardPlayerRepository(db).find_rows(*compile_filter(spec))

Clauses are ANDed together. Inside a clause, alternatives are ORed.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple, Union

from sqlalchemy import and_, false, or_

from esports_stats.models import ScoreboardPlayer


@dataclass(frozen=True)
class ByTournament:
    """Rows whose tournament is one of ``names`` or whose overview page contains one of ``overview_pages``."""
    names: Tuple[str, ...] = ()
    overview_pages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ByPlayer:
    """Rows recorded under any of the player's alias names."""
    links: Tuple[str, ...]


@dataclass(frozen=True)
class ByTeam:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class ByDateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None


FilterClause = Union[ByTournament, ByPlayer, ByTeam, ByDateRange]


@dataclass(frozen=True)
class FilterSpec:
    clauses: Tuple[FilterClause, ...] = ()

    def has(self, clause_type: type) -> bool:
        return any(isinstance(clause, clause_type) for clause in self.clauses)

    @property
    def tournament_only(self) -> bool:
        """True when the filter is scoped to a tournament and nothing narrows it to a player or team."""
        return self.has(ByTournament) and not (self.has(ByPlayer) or self.has(ByTeam))


class StatsFilterBuilder:
    """Collects clauses in call order and freezes them into a FilterSpec."""

    def __init__(self):
        self._clauses: List[FilterClause] = []

    def by_tournament(self, names: List[str], overview_pages: List[str]) -> "StatsFilterBuilder":
        self._clauses.append(ByTournament(tuple(names), tuple(overview_pages)))
        return self

    def by_player(self, links: List[str]) -> "StatsFilterBuilder":
        self._clauses.append(ByPlayer(tuple(links)))
        return self

    def by_team(self, names: List[str]) -> "StatsFilterBuilder":
        self._clauses.append(ByTeam(tuple(names)))
        return self

    def by_date_range(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> "StatsFilterBuilder":
        if start is not None or end is not None:
            self._clauses.append(ByDateRange(start, end))
        return self

    def build(self) -> FilterSpec:
        return FilterSpec(tuple(self._clauses))


def _compile_clause(clause: FilterClause):
    if isinstance(clause, ByTournament):
        alternatives = [ScoreboardPlayer.tournament == name for name in clause.names]
        alternatives += [
            ScoreboardPlayer.overview_page.contains(page, autoescape=True)
            for page in clause.overview_pages
        ]
        return or_(*alternatives) if alternatives else false()
    if isinstance(clause, ByPlayer):
        return ScoreboardPlayer.link.in_(clause.links)
    if isinstance(clause, ByTeam):
        return ScoreboardPlayer.team.in_(clause.names)
    if isinstance(clause, ByDateRange):
        bounds = []
        if clause.start is not None:
            bounds.append(ScoreboardPlayer.date_time_utc >= clause.start)
        if clause.end is not None:
            bounds.append(ScoreboardPlayer.date_time_utc <= clause.end)
        return and_(*bounds)
    raise TypeError(f"Unsupported filter clause: {clause!r}")


def compile_filter(spec: FilterSpec, champion_required: bool = False) -> list:
    """
    Compile a FilterSpec into a list of SQLAlchemy criteria for ScoreboardPlayer.

    Args:
        spec: The filter specification
        champion_required: Also exclude rows without a champion
    """
    criteria = []
    if champion_required:
        criteria.append(ScoreboardPlayer.champion.isnot(None))
    criteria.extend(_compile_clause(clause) for clause in spec.clauses)
    return criteria
