"""Team Repository. Teams have no alias table: lookups are by exact name."""
from typing import Optional

from esports_stats.models import Team
from esports_stats.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for teams."""

    def __init__(self, db):
        super().__init__(Team, db)

    def find_by_name(self, name: str) -> Optional[Team]:
        """Find a team by exact, case-sensitive name."""
        return self.where_first(Team.name == name)
