"""
Season -> split -> tournament grouping.

Rebuilds a league's navigation tree from flat tournament metadata. Year and
split are frequently missing upstream, so both are inferred from ordered
fallbacks:

    year:  explicit year -> 19xx/20xx in name -> start date year
           -> 19xx/20xx in overview page -> "Unknown"
    split: explicit split -> split main page -> keyword in name -> none

Tournaments with no inferable split sit directly under their season.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from esports_stats.schemas import SeasonGroup, SplitGroup, TournamentEntry

UNKNOWN_SEASON = "Unknown"

_YEAR = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")

# First matching keyword wins
_SPLIT_KEYWORDS = (
    (("spring", "split 1"), "spring"),
    (("summer", "split 2"), "summer"),
    (("winter",), "winter"),
    (("playoff",), "playoffs"),
    (("championship", "finals"), "championship"),
)

# Season-part words that the split heading already shows
_SEASON_PART = re.compile(r"\b(?:spring|summer|winter|split\s*\d+)\b", re.IGNORECASE)

_SEPARATOR_RUN = re.compile(r"\s*[-_]+[\s\-_]*")
_WHITESPACE_RUN = re.compile(r"\s+")
_SEPARATOR_CHARS = " -_"


@dataclass(frozen=True)
class TournamentMeta:
    """Flat tournament metadata as read from the store."""
    id: int
    name: str
    year: Optional[str] = None
    split: Optional[str] = None
    split_number: Optional[int] = None
    split_main_page: Optional[str] = None
    date_start: Optional[datetime] = None
    overview_page: Optional[str] = None
    match_count: int = 0


def infer_year(meta: TournamentMeta) -> str:
    if meta.year:
        return str(meta.year)
    match = _YEAR.search(meta.name or "")
    if match:
        return match.group(0)
    if meta.date_start is not None:
        return str(meta.date_start.year)
    match = _YEAR.search(meta.overview_page or "")
    if match:
        return match.group(0)
    return UNKNOWN_SEASON


def infer_split(meta: TournamentMeta) -> Optional[str]:
    if meta.split:
        return meta.split.lower()
    if meta.split_main_page:
        return meta.split_main_page.lower()
    lower_name = (meta.name or "").lower()
    for keywords, split in _SPLIT_KEYWORDS:
        if any(keyword in lower_name for keyword in keywords):
            return split
    return None


def clean_name(
    name: str,
    league_name: Optional[str] = None,
    short_name: Optional[str] = None,
    year: Optional[str] = None,
) -> str:
    """
    Strip the parts of a tournament name that its position in the tree
    already conveys: league name, league short name, year and season part.

    Separator runs collapse to " - " and the first letter is capitalised.
    When stripping leaves nothing meaningful (empty, two characters or
    fewer, separators only) the original name is returned unchanged.

    Examples:
        >>> clean_name("LEC 2024 Spring Playoffs", "LEC", "LEC", "2024")
        'Playoffs'
        >>> clean_name("LEC", "LEC", "LEC", "2024")
        'LEC'
    """
    cleaned = name
    for part in (league_name, short_name, year):
        if part:
            cleaned = re.sub(rf"\b{re.escape(part)}\b", " ", cleaned, flags=re.IGNORECASE)
    cleaned = _SEASON_PART.sub(" ", cleaned)

    cleaned = _SEPARATOR_RUN.sub(" - ", cleaned)
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    cleaned = cleaned.strip(_SEPARATOR_CHARS)

    if len(cleaned) <= 2:
        return name
    return cleaned[0].upper() + cleaned[1:]


# =============================================================================
# SORTING
# =============================================================================

def _as_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_seasons(a: str, b: str) -> int:
    """
    Numeric when both seasons are integers, lexicographic otherwise.

    Decided per pair, so mixed sets are not guaranteed a total order.
    """
    a_num, b_num = _as_int(a), _as_int(b)
    if a_num is not None and b_num is not None:
        return _cmp(a_num, b_num)
    return _cmp(a, b)


@dataclass
class _SplitBucket:
    split: Optional[str]
    split_number: Optional[int]
    date_start: Optional[datetime]
    tournaments: List[TournamentMeta]


def _compare_splits(a: _SplitBucket, b: _SplitBucket) -> int:
    if a.split is None or b.split is None:
        return (a.split is not None) - (b.split is not None)
    if a.split_number is not None and b.split_number is not None:
        return _cmp(a.split_number, b.split_number)
    if a.split_number is not None:
        return -1
    if b.split_number is not None:
        return 1
    if a.date_start is not None and b.date_start is not None:
        return _cmp(a.date_start, b.date_start)
    return _cmp(a.split, b.split)


def _compare_tournaments(a: TournamentMeta, b: TournamentMeta) -> int:
    if a.date_start is not None and b.date_start is not None:
        return _cmp(a.date_start, b.date_start)
    return _cmp(a.name, b.name)


# =============================================================================
# GROUPING
# =============================================================================

def group_tournaments(
    rows: Iterable[TournamentMeta],
    league_name: Optional[str] = None,
    league_short: Optional[str] = None,
) -> List[SeasonGroup]:
    """
    Build the season tree for one league.

    Rows without recorded matches are skipped. A split bucket takes its
    split number and start date from the first tournament placed in it.
    """
    seasons: Dict[str, Dict[Optional[str], _SplitBucket]] = {}

    for meta in rows:
        if not meta.match_count:
            continue
        season = infer_year(meta)
        split = infer_split(meta)
        splits = seasons.setdefault(season, {})
        bucket = splits.get(split)
        if bucket is None:
            bucket = splits[split] = _SplitBucket(
                split=split,
                split_number=meta.split_number,
                date_start=meta.date_start,
                tournaments=[],
            )
        bucket.tournaments.append(meta)

    result = []
    for season in sorted(seasons, key=cmp_to_key(compare_seasons)):
        buckets = sorted(seasons[season].values(), key=cmp_to_key(_compare_splits))
        data = []
        for bucket in buckets:
            tournaments = sorted(bucket.tournaments, key=cmp_to_key(_compare_tournaments))
            data.append(SplitGroup(
                split=bucket.split,
                tournaments=[
                    TournamentEntry(
                        tournament=clean_name(t.name, league_name, league_short, season),
                        id=t.id,
                    )
                    for t in tournaments
                ],
            ))
        result.append(SeasonGroup(season=season, data=data))
    return result
