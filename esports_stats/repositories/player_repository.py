"""
Player Repository for canonical players and their alias table.

Usage:
    repo = PlayerRepository(db)
    redirect = repo.find_redirect("G2 Caps")
    names = repo.alias_names(redirect.overview_page)
"""
from typing import Optional, List

from esports_stats.models import Player, PlayerRedirect
from esports_stats.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for players and player redirects."""

    def __init__(self, db):
        super().__init__(Player, db)

    # ========================================================================
    # Canonical Lookups
    # ========================================================================

    def find_by_overview_page(self, overview_page: str) -> Optional[Player]:
        """Find a player by its canonical key (exact, case-sensitive)."""
        return self.where_first(Player.overview_page == overview_page)

    # ========================================================================
    # Alias Table
    # ========================================================================

    def find_redirect(self, name: str) -> Optional[PlayerRedirect]:
        """Find the alias row for an exact name."""
        return self.db.query(PlayerRedirect).filter(
            PlayerRedirect.name == name
        ).first()

    def find_redirects(self, overview_page: str) -> List[PlayerRedirect]:
        """All alias rows pointing at one canonical player."""
        return self.db.query(PlayerRedirect).filter(
            PlayerRedirect.overview_page == overview_page
        ).order_by(PlayerRedirect.name).all()

    def alias_names(self, overview_page: str) -> List[str]:
        """Names of every alias pointing at one canonical player."""
        return [redirect.name for redirect in self.find_redirects(overview_page)]

    def search_redirects(self, fragment: str, limit: int = 10) -> List[PlayerRedirect]:
        """
        Search alias names containing a fragment.

        Args:
            fragment: Substring to look for (case handling follows the
                database's LIKE semantics)
            limit: Maximum number of results
        """
        return self.db.query(PlayerRedirect).filter(
            PlayerRedirect.name.contains(fragment, autoescape=True)
        ).order_by(PlayerRedirect.name).limit(limit).all()
