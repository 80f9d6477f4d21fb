"""Season -> split -> tournament navigation tree."""
from typing import List, Optional

from pydantic import BaseModel


class TournamentEntry(BaseModel):
    tournament: str
    id: int


class SplitGroup(BaseModel):
    split: Optional[str] = None  # None: tournaments sit directly under the season
    tournaments: List[TournamentEntry]


class SeasonGroup(BaseModel):
    season: str
    data: List[SplitGroup]
