"""Shared pytest fixtures for esports-stats tests."""
from datetime import datetime
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from esports_stats.models import (
    Base,
    Player,
    PlayerRedirect,
    Team,
    League,
    Tournament,
    ScoreboardPlayer,
    ScoreboardGame,
)
from esports_stats.services.cache import CachePolicy, InMemoryCacheBackend
from esports_stats.services.stats_service import StatsService

SPRING = "LEC 2024 Spring"
SPRING_PAGE = "LEC/2024 Season/Spring Season"
PLAYOFFS = "LEC 2024 Spring Playoffs"
PLAYOFFS_PAGE = "LEC/2024 Season/Spring Playoffs"
SUMMER_PAGE = "LEC/2024 Season/Summer Season"
WINTER_PAGE = "LEC/2023 Season/Winter Season"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create fresh test database session with isolated in-memory database."""
    # StaticPool keeps the single in-memory connection alive for the session
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def sample_players(db_session: Session):
    """Players with their alias table. Caps is known under three names."""
    players = [
        Player(overview_page="Caps", name="Caps", team="G2 Esports", role="Mid"),
        Player(overview_page="Humanoid", name="Humanoid", team="Fnatic", role="Mid"),
        Player(overview_page="Faker", name="Faker", team="T1", role="Mid"),
    ]
    redirects = [
        PlayerRedirect(name="Caps", overview_page="Caps"),
        PlayerRedirect(name="G2 Caps", overview_page="Caps"),
        PlayerRedirect(name="Claps", overview_page="Caps"),
        PlayerRedirect(name="Humanoid", overview_page="Humanoid"),
    ]
    db_session.add_all(players + redirects)
    db_session.commit()
    return players


@pytest.fixture
def sample_teams(db_session: Session):
    teams = [
        Team(id=1, name="G2 Esports", overview_page="G2 Esports", short="G2", region="EMEA"),
        Team(id=2, name="Fnatic", overview_page="Fnatic", short="FNC", region="EMEA"),
        Team(id=3, name="T1 (Korean Team)", overview_page="T1", short="T1", region="Korea"),
    ]
    db_session.add_all(teams)
    db_session.commit()
    return teams


@pytest.fixture
def sample_tournaments(db_session: Session):
    """
    One league across three seasons:
    - 2023: Winter (year only inferable from the name, split from a keyword)
    - 2024: Spring (regular season + playoffs), Summer (still running)
    - 2025: Winter with no recorded games (skipped by grouping)
    """
    league = League(id=1, name="LoL EMEA Championship", short="LEC", region="EMEA")
    tournaments = [
        Tournament(
            id=1, name=SPRING, standard_name="LEC Spring 2024", overview_page=SPRING_PAGE,
            league=league.name, year="2024", split="Spring", split_number=1,
            date_start=datetime(2024, 3, 9), date_end=datetime(2024, 4, 7),
        ),
        Tournament(
            id=2, name=PLAYOFFS, overview_page=PLAYOFFS_PAGE,
            league=league.name, year="2024", split="Spring", split_number=1,
            date_start=datetime(2024, 4, 12), date_end=datetime(2024, 4, 21),
        ),
        Tournament(
            id=3, name="LEC 2024 Summer", overview_page=SUMMER_PAGE,
            league=league.name, year="2024", split="Summer", split_number=2,
            date_start=datetime(2024, 6, 15), date_end=None,
        ),
        Tournament(
            id=4, name="LEC 2023 Winter", overview_page=WINTER_PAGE,
            league=league.name, year=None, split=None,
            date_start=datetime(2023, 1, 21), date_end=datetime(2023, 3, 5),
        ),
        Tournament(
            id=5, name="LEC 2025 Winter", overview_page="LEC/2025 Season/Winter Season",
            league=league.name, year="2025", split="Winter", split_number=1,
            date_start=datetime(2025, 1, 11), date_end=datetime(2025, 2, 16),
        ),
    ]
    games = [
        ScoreboardGame(
            id=1, tournament=SPRING, overview_page=SPRING_PAGE, gamelength_number=30.0,
            team1_picks=["Azir", "Sylas"], team2_picks=["Orianna"],
            team1_bans=["Kalista"], team2_bans=["Azir"],
            date_time_utc=datetime(2024, 3, 9, 17),
        ),
        ScoreboardGame(
            id=2, tournament=SPRING, overview_page=SPRING_PAGE, gamelength_number=30.0,
            team1_picks=["Azir"], team2_picks=["Orianna"], team1_bans=[], team2_bans=[],
            date_time_utc=datetime(2024, 3, 10, 17),
        ),
        ScoreboardGame(
            id=3, tournament=SPRING, overview_page=SPRING_PAGE, gamelength_number=30.0,
            team1_picks=["Azir"], team2_picks=[], team1_bans=None, team2_bans=None,
            date_time_utc=datetime(2024, 3, 16, 17),
        ),
        ScoreboardGame(
            id=4, tournament=PLAYOFFS, overview_page=PLAYOFFS_PAGE, gamelength_number=25.0,
            team1_picks=["Azir"], team2_picks=["Sylas"], team1_bans=[], team2_bans=[],
            date_time_utc=datetime(2024, 4, 13, 17),
        ),
        ScoreboardGame(
            id=5, tournament="LEC 2024 Summer", overview_page=SUMMER_PAGE, gamelength_number=33.0,
            date_time_utc=datetime(2024, 6, 15, 17),
        ),
        ScoreboardGame(
            id=6, tournament="LEC 2023 Winter", overview_page=WINTER_PAGE, gamelength_number=28.0,
            date_time_utc=datetime(2023, 1, 21, 17),
        ),
    ]
    db_session.add(league)
    db_session.add_all(tournaments + games)
    db_session.commit()
    return tournaments


def _row(**kwargs) -> ScoreboardPlayer:
    defaults = {
        "tournament": SPRING,
        "overview_page": SPRING_PAGE,
        "role": "Mid",
        "date_time_utc": datetime(2024, 3, 10, 17),
    }
    defaults.update(kwargs)
    return ScoreboardPlayer(**defaults)


@pytest.fixture
def sample_scoreboard(db_session: Session, sample_players, sample_teams, sample_tournaments):
    """
    Six Spring rows and one Playoffs row.

    Caps appears under two links ("Caps" and the alias "G2 Caps").
    """
    rows = [
        _row(id=1, link="Caps", name="Caps", champion="Azir", team="G2 Esports",
             kills=5, deaths=1, assists=7, gold=12000, cs=300, damage_to_champions=24000,
             vision_score=30, team_kills=15, player_win="Yes"),
        _row(id=2, link="G2 Caps", name="Caps", champion="Azir", team="G2 Esports",
             kills=3, deaths=2, assists=5, gold=11000, cs=280, damage_to_champions=20000,
             vision_score=25, team_kills=10, player_win="No"),
        _row(id=3, link="Humanoid", name="Humanoid", champion="Azir", team="Fnatic",
             kills=2, deaths=3, assists=4, gold=10000, cs=270, damage_to_champions=18000,
             vision_score=20, team_kills=8, player_win="No"),
        _row(id=4, link="Caps", name="Caps", champion="Orianna", team="G2 Esports",
             kills=4, deaths=0, assists=8, gold=13000, cs=310, damage_to_champions=26000,
             vision_score=28, team_kills=20, player_win="Yes"),
        _row(id=5, link="Humanoid", name="", champion="Orianna", team="Fnatic",
             kills=1, deaths=4, assists=2, gold=9000, cs=250, damage_to_champions=15000,
             vision_score=22, team_kills=5, player_win="No"),
        _row(id=6, link="Humanoid", name="Humanoid", champion="Sylas", team="Fnatic",
             kills=6, deaths=2, assists=3, gold=12500, cs=260, damage_to_champions=22000,
             vision_score=18, team_kills=12, player_win="Yes"),
        _row(id=7, link="Caps", name="Caps", champion="Azir", team="G2 Esports",
             tournament=PLAYOFFS, overview_page=PLAYOFFS_PAGE,
             kills=7, deaths=1, assists=6, gold=14000, cs=320, damage_to_champions=30000,
             vision_score=31, team_kills=18, player_win="Yes",
             date_time_utc=datetime(2024, 4, 13, 17)),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def cache_backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture
def stats_service(db_session: Session, cache_backend: InMemoryCacheBackend) -> StatsService:
    return StatsService(db_session, CachePolicy(cache_backend))
