"""
Services module for the stats core.

This module organizes the query pipeline into:
- identity_resolver: player, team and tournament name resolution
- filters: filter specifications compiled to SQLAlchemy criteria
- aggregation: pure per-champion / per-player statistics
- season_grouping: season -> split -> tournament tree
- cache: temporal TTL policy and cache backends
- stats_service: the orchestrator callers use
"""
from esports_stats.services.cache import CachePolicy, create_cache_backend
from esports_stats.services.stats_service import StatsService

__all__ = ["CachePolicy", "create_cache_backend", "StatsService"]
