"""
Database models for the esports stats core.

The tables mirror the scraped esports dataset. The core only reads them:
- players / player_redirects: canonical players and their alias table
- teams: canonical teams (no alias table)
- leagues / tournaments: competition metadata used for season navigation
- scoreboard_players: one row per player per game (aggregation input)
- scoreboard_games: per-game context (duration, picks, bans)
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, Index, JSON, ForeignKey
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


# =============================================================================
# PLAYERS & ALIASES
# =============================================================================

class Player(Base):
    """Canonical player, keyed by its overview page."""
    __tablename__ = "players"

    overview_page = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=True)
    real_name = Column(String(255), nullable=True)
    team = Column(String(255), nullable=True, index=True)
    role = Column(String(32), nullable=True)
    country = Column(String(64), nullable=True)

    redirects = relationship("PlayerRedirect", back_populates="player")


class PlayerRedirect(Base):
    """
    Alias table: every historical or alternative name of a player.

    alias -> canonical is a total function: one row per alias name.
    """
    __tablename__ = "player_redirects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    overview_page = Column(String(255), ForeignKey("players.overview_page"), nullable=False, index=True)
    id_number = Column(Integer, nullable=True)

    player = relationship("Player", back_populates="redirects")


# =============================================================================
# TEAMS & COMPETITIONS
# =============================================================================

class Team(Base):
    """Canonical team. Teams resolve by exact name; they have no alias table."""
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    overview_page = Column(String(255), nullable=True, index=True)
    short = Column(String(32), nullable=True)
    region = Column(String(64), nullable=True)


class League(Base):
    """Competitive league (LEC, LCK, ...)."""
    __tablename__ = "leagues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    short = Column(String(32), nullable=True)
    region = Column(String(64), nullable=True)


class Tournament(Base):
    """Tournament metadata; year/split fields are frequently missing."""
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    standard_name = Column(String(255), nullable=True)
    overview_page = Column(String(255), nullable=True, index=True)
    league = Column(String(255), nullable=True, index=True)  # League.name
    year = Column(String(8), nullable=True)
    split = Column(String(64), nullable=True)
    split_number = Column(Integer, nullable=True)
    split_main_page = Column(String(255), nullable=True)
    date_start = Column(DateTime, nullable=True)
    date_end = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('ix_tournaments_league_start', 'league', 'date_start'),
    )


# =============================================================================
# SCOREBOARDS (aggregation input)
# =============================================================================

class ScoreboardPlayer(Base):
    """One player's recorded performance in one game. Immutable."""
    __tablename__ = "scoreboard_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    link = Column(String(255), nullable=True, index=True)  # player key or alias
    name = Column(String(255), nullable=True)  # display name at the time
    champion = Column(String(64), nullable=True, index=True)
    team = Column(String(255), nullable=True, index=True)
    role = Column(String(32), nullable=True)
    kills = Column(Integer, nullable=True)
    deaths = Column(Integer, nullable=True)
    assists = Column(Integer, nullable=True)
    gold = Column(Integer, nullable=True)
    cs = Column(Integer, nullable=True)
    damage_to_champions = Column(Integer, nullable=True)
    vision_score = Column(Integer, nullable=True)
    team_kills = Column(Integer, nullable=True)
    player_win = Column(String(8), nullable=True)  # "Yes" / "No"
    tournament = Column(String(255), nullable=True, index=True)
    overview_page = Column(String(255), nullable=True, index=True)
    date_time_utc = Column(DateTime, nullable=True)


class ScoreboardGame(Base):
    """Per-game context: duration in minutes plus the draft."""
    __tablename__ = "scoreboard_games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament = Column(String(255), nullable=True, index=True)
    overview_page = Column(String(255), nullable=True, index=True)
    gamelength_number = Column(Float, nullable=True)  # minutes
    team1_picks = Column(JSON, nullable=True)
    team2_picks = Column(JSON, nullable=True)
    team1_bans = Column(JSON, nullable=True)
    team2_bans = Column(JSON, nullable=True)
    date_time_utc = Column(DateTime, nullable=True)
