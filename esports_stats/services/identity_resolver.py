"""
Identity resolution for players, teams and tournaments.

Human-entered names are mapped to one canonical record before any stats
query runs. Each entity type resolves differently:

Players (alias table):
1. Exact lookup in player_redirects
2. Exact lookup of the name as a canonical key
3. Same lookup with the first character upper-cased
4. PlayerNotFoundError

Teams (no alias table):
- Exact name lookup; the alias set is always the name itself

Tournaments:
- Identifiers that start with an integer (after optional whitespace and
  sign) are treated as ids, so "1 Spring" looks up id 1. Anything else is
  matched against name, overview page and standard name. A tournament whose
  name starts with digits therefore collides with id lookup.
"""
import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar, Union
from datetime import datetime

from sqlalchemy.orm import Session

from esports_stats.core.exceptions import (
    EntityNotFoundError,
    PlayerNotFoundError,
    TeamNotFoundError,
)
from esports_stats.repositories import PlayerRepository, TeamRepository, TournamentRepository
from esports_stats.utils.names import clean_team_name

logger = logging.getLogger(__name__)

R = TypeVar("R")


# =============================================================================
# RESOLUTION RESULTS
# =============================================================================

@dataclass(frozen=True)
class AliasedMatch:
    """The input matched a row of the alias table."""
    alias: str
    overview_page: str


@dataclass(frozen=True)
class DirectMatch:
    """The input (possibly first-letter capitalised) is itself a canonical key."""
    overview_page: str


PlayerMatch = Union[AliasedMatch, DirectMatch]


@dataclass(frozen=True)
class PlayerResolution:
    """Canonical key plus every name the player's rows may be recorded under."""
    canonical_key: str
    aliases: List[str]
    match: PlayerMatch


@dataclass(frozen=True)
class TeamResolution:
    canonical_key: str
    aliases: List[str]
    display_name: str


@dataclass(frozen=True)
class TournamentRef:
    id: int
    name: str
    overview_page: Optional[str] = None
    date_end: Optional[datetime] = None


@dataclass(frozen=True)
class BatchOutcome(Generic[R]):
    """Result of resolving one input of a batch."""
    input: str
    resolution: Optional[R] = None
    error: Optional[EntityNotFoundError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class TournamentConditions:
    """
    What a tournament identifier expands to when filtering scoreboard rows.

    Rows match when their tournament equals any of ``names`` or their
    overview page contains any of ``overview_pages``.
    """
    names: List[str] = field(default_factory=list)
    overview_pages: List[str] = field(default_factory=list)
    tournament: Optional[TournamentRef] = None


def successful(outcomes: List[BatchOutcome[R]]) -> List[R]:
    """Best-effort view of a batch: resolutions only, failures dropped."""
    return [outcome.resolution for outcome in outcomes if outcome.ok]


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_tournament_id(identifier: str) -> Optional[int]:
    """Return the leading integer of the identifier, None if it does not start with one."""
    match = _LEADING_INT.match(identifier)
    return int(match.group(1)) if match else None


async def _resolve_batch(
    names: List[str],
    resolve: Callable[[str], Awaitable[R]],
) -> List[BatchOutcome[R]]:
    """
    Resolve every name, one outcome per input in input order.

    The gather is nominal: lookups go through the synchronous Session, so
    they still run one after another.
    """
    async def one(name: str) -> BatchOutcome[R]:
        try:
            return BatchOutcome(input=name, resolution=await resolve(name))
        except EntityNotFoundError as exc:
            return BatchOutcome(input=name, error=exc)

    return list(await asyncio.gather(*(one(name) for name in names)))


# =============================================================================
# RESOLVERS
# =============================================================================

class PlayerResolver:
    """Resolve player names and aliases to a canonical overview page."""

    def __init__(self, db: Session):
        self.db = db
        self.players = PlayerRepository(db)

    async def resolve(self, name: str) -> PlayerResolution:
        """
        Resolve a player name or alias.

        Args:
            name: Free-text player name as entered by a user

        Returns:
            PlayerResolution with the canonical key and the full alias set

        Raises:
            PlayerNotFoundError: if no step of the pipeline matches
        """
        match = self._match(name)
        if match is None:
            logger.debug(f"No player match for {name!r}")
            raise PlayerNotFoundError(name)

        canonical_key = match.overview_page
        aliases = self.players.alias_names(canonical_key)
        if canonical_key not in aliases:
            aliases.append(canonical_key)

        logger.debug(
            f"Resolved player {name!r} -> {canonical_key!r} "
            f"({type(match).__name__}, {len(aliases)} aliases)"
        )
        return PlayerResolution(canonical_key=canonical_key, aliases=aliases, match=match)

    def _match(self, name: str) -> Optional[PlayerMatch]:
        # Step 1: alias table
        redirect = self.players.find_redirect(name)
        if redirect:
            return AliasedMatch(alias=redirect.name, overview_page=redirect.overview_page)

        # Step 2: canonical key as entered
        player = self.players.find_by_overview_page(name)
        if player:
            return DirectMatch(overview_page=player.overview_page)

        # Step 3: canonical key with the first letter upper-cased
        capitalised = name[:1].upper() + name[1:]
        if capitalised != name:
            player = self.players.find_by_overview_page(capitalised)
            if player:
                return DirectMatch(overview_page=player.overview_page)

        return None

    async def exists(self, name: str) -> bool:
        try:
            await self.resolve(name)
        except PlayerNotFoundError:
            return False
        return True

    async def search(self, fragment: str, limit: int = 10) -> List[str]:
        """Alias names containing ``fragment``, for autocompletion."""
        return [redirect.name for redirect in self.players.search_redirects(fragment, limit)]

    async def resolve_many(self, names: List[str]) -> List[BatchOutcome[PlayerResolution]]:
        """Resolve several players concurrently; one outcome per input, in order."""
        return await _resolve_batch(names, self.resolve)


class TeamResolver:
    """Resolve team names. There is no alias indirection for teams."""

    def __init__(self, db: Session):
        self.db = db
        self.teams = TeamRepository(db)

    async def resolve(self, name: str) -> TeamResolution:
        """
        Resolve a team by exact name.

        Raises:
            TeamNotFoundError: if no team has exactly this name
        """
        team = self.teams.find_by_name(name)
        if not team:
            logger.debug(f"No team match for {name!r}")
            raise TeamNotFoundError(name)

        return TeamResolution(
            canonical_key=team.overview_page or team.name,
            aliases=[team.name],
            display_name=clean_team_name(team.name),
        )

    async def resolve_many(self, names: List[str]) -> List[BatchOutcome[TeamResolution]]:
        return await _resolve_batch(names, self.resolve)


class TournamentResolver:
    """Resolve tournament ids or names."""

    def __init__(self, db: Session):
        self.db = db
        self.tournaments = TournamentRepository(db)

    async def resolve(self, identifier: str) -> Optional[TournamentRef]:
        """
        Resolve a tournament id or name.

        Returns:
            TournamentRef, or None when nothing matches
        """
        tournament_id = parse_tournament_id(identifier)
        if tournament_id is not None:
            tournament = self.tournaments.find_by_id(tournament_id)
        else:
            tournament = self.tournaments.find_by_identifier(identifier)

        if tournament is None:
            return None

        return TournamentRef(
            id=tournament.id,
            name=tournament.name,
            overview_page=tournament.overview_page,
            date_end=tournament.date_end,
        )

    async def conditions(self, identifier: str) -> TournamentConditions:
        """
        Expand a tournament identifier into scoreboard filter conditions.

        Resolved tournaments match on their name and overview page, plus the
        raw identifier when it differs from the name. Unresolved identifiers
        match rows whose tournament equals them or whose overview page
        contains them.
        """
        tournament = await self.resolve(identifier)
        if tournament is None:
            return TournamentConditions(names=[identifier], overview_pages=[identifier])

        names = [tournament.name]
        if tournament.name != identifier:
            names.append(identifier)
        overview_pages = [tournament.overview_page] if tournament.overview_page else []
        return TournamentConditions(names=names, overview_pages=overview_pages, tournament=tournament)
