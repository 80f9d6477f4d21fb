"""
Base repository class for the read-only data access layer.

The stats core never writes to the store, so repositories only expose
lookups, filtered reads and counts. Keeping every query in a repository
means services can be exercised against an in-memory SQLite session or a
mock.

Example:
    class TeamRepository(BaseRepository[Team]):
        def find_by_name(self, name: str) -> Optional[Team]:
            return self.where_first(Team.name == name)
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, List, Any
from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Base repository providing common read methods.

    Attributes:
        model_type: The SQLAlchemy model class this repository reads
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    def find_by_id(self, id: Any) -> Optional[T]:
        """Find a single record by primary key."""
        return self.db.get(self.model_type, id)

    # ========================================================================
    # Query Builders
    # ========================================================================

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def where(self, *criterion, order_by: Optional[str] = None) -> List[T]:
        """
        Filter records using SQLAlchemy expressions.

        Args:
            criterion: Filter expressions, ANDed together
            order_by: Column name to order by (prefix with '-' for descending)
        """
        return self._ordered(self.query().filter(*criterion), order_by).all()

    def where_first(self, *criterion, order_by: Optional[str] = None) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self._ordered(self.query().filter(*criterion), order_by).first()

    def _ordered(self, query: Query, order_by: Optional[str]) -> Query:
        if not order_by:
            return query
        if order_by.startswith('-'):
            return query.order_by(desc(getattr(self.model_type, order_by[1:])))
        return query.order_by(getattr(self.model_type, order_by))

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count()).select_from(self.model_type)
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0
