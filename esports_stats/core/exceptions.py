"""
Exception taxonomy for the stats core.

- EntityNotFoundError: an identifier could not be resolved. Expected, never
  retried; callers map it to their own not-found response.
- CacheBackendError: the key-value cache failed. Caught by the cache policy
  manager and degraded to a miss.

Errors from the relational store (sqlalchemy.exc.SQLAlchemyError) are not
wrapped and propagate to the caller unchanged.
"""


class EsportsStatsError(Exception):
    """Base class for errors raised by this package."""


class EntityNotFoundError(EsportsStatsError):
    """An entity identifier did not resolve to a canonical record."""

    entity_type = "entity"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"{self.entity_type.capitalize()} not found: {identifier}")


class PlayerNotFoundError(EntityNotFoundError):
    entity_type = "player"


class TeamNotFoundError(EntityNotFoundError):
    entity_type = "team"


class LeagueNotFoundError(EntityNotFoundError):
    entity_type = "league"


class CacheBackendError(EsportsStatsError):
    """The cache backend was unreachable or returned an error."""
