"""
Stats query orchestrator.

The only entry point callers use. Every query runs the same pipeline:

    resolve identifiers -> build filter spec -> cache key -> cache get
    -> (miss) read rows -> read per-game context -> aggregate
    -> compute TTL -> cache set -> return

Resolution failures for players, teams and leagues raise
EntityNotFoundError subclasses. Queries matching no rows return None.
Store errors propagate unchanged.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from esports_stats.core.config import settings
from esports_stats.core.exceptions import LeagueNotFoundError
from esports_stats.models import ScoreboardPlayer
from esports_stats.repositories import (
    LeagueRepository,
    ScoreboardGameRepository,
    ScoreboardPlayerRepository,
    TournamentRepository,
)
from esports_stats.schemas import (
    ChampionStatsResult,
    PlayerStatsResult,
    ResultMeta,
    SeasonGroup,
    SinglePlayerStatsResult,
    StatsFilter,
    TournamentEntry,
)
from esports_stats.services.aggregation import (
    aggregate_champion_stats,
    aggregate_player_stats,
    draft_pools,
    game_length_map,
    select_player,
    with_game_lengths,
)
from esports_stats.services.cache import CachePolicy, build_cache_key, ttl_for, ttl_for_many
from esports_stats.services.filters import FilterSpec, StatsFilterBuilder, compile_filter
from esports_stats.services.identity_resolver import (
    PlayerResolution,
    PlayerResolver,
    TeamResolution,
    TeamResolver,
    TournamentConditions,
    TournamentResolver,
)
from esports_stats.services.season_grouping import TournamentMeta, group_tournaments
from esports_stats.utils.timezone import utc_now

logger = logging.getLogger(__name__)

_ROW_COLUMNS = [column.key for column in ScoreboardPlayer.__table__.columns]

_GAME_COLUMNS = (
    "overview_page", "gamelength_number",
    "team1_picks", "team2_picks", "team1_bans", "team2_bans",
)


class _Resolved:
    """Everything the resolution step produced for one filter."""

    def __init__(self):
        self.player: Optional[PlayerResolution] = None
        self.team: Optional[TeamResolution] = None
        self.tournament: Optional[TournamentConditions] = None
        self.spec: FilterSpec = FilterSpec()


class StatsService:
    """
    Champion, player and season queries over the scoreboard store.

    Both handles are injected so tests can pass an in-memory SQLite session
    and an in-memory cache backend.
    """

    def __init__(self, db: Session, cache: CachePolicy):
        """
        Initialize stats service.

        Args:
            db: SQLAlchemy database session (read only)
            cache: Cache policy wrapping the configured backend
        """
        self.db = db
        self.cache = cache
        self.players = PlayerResolver(db)
        self.teams = TeamResolver(db)
        self.tournaments = TournamentResolver(db)
        self.rows = ScoreboardPlayerRepository(db)
        self.games = ScoreboardGameRepository(db)

    # =========================================================================
    # PIPELINE STEPS
    # =========================================================================

    async def _resolve(self, query: StatsFilter) -> _Resolved:
        resolved = _Resolved()
        builder = StatsFilterBuilder()

        if query.tournament:
            resolved.tournament = await self.tournaments.conditions(query.tournament)
            builder.by_tournament(resolved.tournament.names, resolved.tournament.overview_pages)
        if query.player:
            resolved.player = await self.players.resolve(query.player)
            builder.by_player(resolved.player.aliases)
        if query.team:
            resolved.team = await self.teams.resolve(query.team)
            builder.by_team(resolved.team.aliases)
        builder.by_date_range(query.date_from, query.date_to)

        resolved.spec = builder.build()
        return resolved

    def _cache_key(self, kind: str, query: StatsFilter, resolved: _Resolved) -> str:
        return build_cache_key(
            kind,
            player=resolved.player.canonical_key if resolved.player else None,
            team=resolved.team.aliases[0] if resolved.team else None,
            tournament=query.tournament,
            date_from=query.date_from,
            date_to=query.date_to,
        )

    def _ttl(self, resolved: _Resolved) -> int:
        """Temporal TTL for tournament-scoped results, a fixed one otherwise."""
        if resolved.tournament is None:
            return settings.CACHE_TTL_CAREER
        tournament = resolved.tournament.tournament
        return ttl_for(tournament.date_end if tournament else None)

    def _read_rows(self, spec: FilterSpec, champion_required: bool = False) -> List[Dict[str, Any]]:
        rows = self.rows.find_rows(*compile_filter(spec, champion_required=champion_required))
        return [{column: getattr(row, column) for column in _ROW_COLUMNS} for row in rows]

    def _read_games(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        pages = {row["overview_page"] for row in rows if row.get("overview_page")}
        games = self.games.find_by_overview_pages(pages)
        return [{column: getattr(game, column) for column in _GAME_COLUMNS} for game in games]

    def _tournament_game_count(self, query: StatsFilter, resolved: _Resolved) -> int:
        tournament = resolved.tournament.tournament if resolved.tournament else None
        return self.games.count_for_tournament(tournament.name if tournament else query.tournament)

    @staticmethod
    def _meta(cached: bool = False) -> ResultMeta:
        return ResultMeta(cached=cached, timestamp=utc_now())

    async def _cached(self, key: str, model):
        payload = await self.cache.get(key)
        if payload is None:
            return None
        try:
            result = model.model_validate(payload)
        except ValidationError as exc:
            logger.warning(f"Cached {key} no longer matches {model.__name__}, recomputing: {exc}")
            return None
        result.meta = ResultMeta(cached=True, timestamp=result.meta.timestamp)
        return result

    async def _cached_list(self, key: str, model) -> Optional[list]:
        payload = await self.cache.get(key)
        if payload is None:
            return None
        try:
            return TypeAdapter(List[model]).validate_python(payload)
        except ValidationError as exc:
            logger.warning(f"Cached {key} no longer matches {model.__name__} list, recomputing: {exc}")
            return None

    async def _store(self, key: str, result, ttl: int) -> None:
        await self.cache.set(key, result.model_dump(mode="json"), ttl)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_champion_stats(
        self,
        query: StatsFilter,
        include_presence_rate: bool = False,
    ) -> Optional[ChampionStatsResult]:
        """
        Per-champion statistics for a filter.

        Pick rate is reported only for tournament-wide queries (no player or
        team filter). Presence rate additionally needs include_presence_rate
        and is an estimate, see aggregation.presence_rate.

        Raises:
            PlayerNotFoundError / TeamNotFoundError: unknown player or team
        """
        resolved = await self._resolve(query)
        kind = "champions:presence" if include_presence_rate else "champions"
        cache_key = self._cache_key(kind, query, resolved)

        cached = await self._cached(cache_key, ChampionStatsResult)
        if cached is not None:
            return cached

        rows = self._read_rows(resolved.spec, champion_required=True)
        if not rows:
            logger.info(f"No scoreboard rows for champion query {cache_key}")
            return None

        games = self._read_games(rows)
        rows = with_game_lengths(rows, game_length_map(games))

        total_games = None
        draft = None
        if resolved.spec.tournament_only:
            total_games = self._tournament_game_count(query, resolved)
            if include_presence_rate:
                draft = draft_pools(games)

        champions = aggregate_champion_stats(rows, total_games=total_games, draft=draft)
        result = ChampionStatsResult(
            tournament=query.tournament,
            player=resolved.player.canonical_key if resolved.player else None,
            team=query.team,
            total_games=len(rows),
            unique_champions=len(champions),
            champions=champions,
            meta=self._meta(),
        )

        await self._store(cache_key, result, self._ttl(resolved))
        return result

    async def get_player_stats(
        self,
        query: StatsFilter,
    ) -> Optional[Union[PlayerStatsResult, SinglePlayerStatsResult]]:
        """
        Per-player statistics for a filter.

        A player filter without a team filter returns that player's own
        entry (SinglePlayerStatsResult); everything else returns the full
        list (PlayerStatsResult).

        Raises:
            PlayerNotFoundError / TeamNotFoundError: unknown player or team
        """
        resolved = await self._resolve(query)
        single = resolved.player is not None and resolved.team is None
        cache_key = self._cache_key("players", query, resolved)
        model = SinglePlayerStatsResult if single else PlayerStatsResult

        cached = await self._cached(cache_key, model)
        if cached is not None:
            return cached

        rows = self._read_rows(resolved.spec)
        if not rows:
            logger.info(f"No scoreboard rows for player query {cache_key}")
            return None

        rows = with_game_lengths(rows, game_length_map(self._read_games(rows)))
        players = aggregate_player_stats(rows)

        if single:
            stats = select_player(players, resolved.player.canonical_key)
            if stats is None:
                return None
            result = SinglePlayerStatsResult(
                player=resolved.player.canonical_key,
                tournament=query.tournament,
                total_games=stats.games_played,
                stats=stats,
                meta=self._meta(),
            )
        else:
            result = PlayerStatsResult(
                tournament=query.tournament,
                team=query.team,
                total_games=len(rows),
                unique_players=len(players),
                players=players,
                meta=self._meta(),
            )

        await self._store(cache_key, result, self._ttl(resolved))
        return result

    async def get_seasons_for_league(self, league_id: int) -> List[SeasonGroup]:
        """
        Season -> split -> tournament tree for a league.

        Cached with the TTL of the most volatile tournament in the tree.

        Raises:
            LeagueNotFoundError: unknown league id
        """
        cache_key = f"seasons:league:{league_id}"
        cached = await self._cached_list(cache_key, SeasonGroup)
        if cached is not None:
            return cached

        league = LeagueRepository(self.db).find_by_id(league_id)
        if league is None:
            logger.debug(f"No league with id {league_id}")
            raise LeagueNotFoundError(str(league_id))

        counted = TournamentRepository(self.db).find_with_match_counts(league.name)
        metas = [
            TournamentMeta(
                id=tournament.id,
                name=tournament.name,
                year=tournament.year,
                split=tournament.split,
                split_number=tournament.split_number,
                split_main_page=tournament.split_main_page,
                date_start=tournament.date_start,
                overview_page=tournament.overview_page,
                match_count=match_count,
            )
            for tournament, match_count in counted
        ]
        seasons = group_tournaments(metas, league.name, league.short)

        ttl = ttl_for_many(tournament.date_end for tournament, match_count in counted if match_count)
        await self.cache.set(cache_key, [season.model_dump(mode="json") for season in seasons], ttl)
        return seasons

    async def list_tournaments_for_league(self, league_name: str) -> List[TournamentEntry]:
        """Tournaments of a league, most recent first (reference data, fixed TTL)."""
        cache_key = f"tournaments:league:{league_name}"
        cached = await self._cached_list(cache_key, TournamentEntry)
        if cached is not None:
            return cached

        entries = [
            TournamentEntry(tournament=tournament.name, id=tournament.id)
            for tournament in TournamentRepository(self.db).find_by_league(league_name)
        ]
        await self.cache.set(
            cache_key,
            [entry.model_dump(mode="json") for entry in entries],
            settings.CACHE_TTL_REFERENCE,
        )
        return entries
