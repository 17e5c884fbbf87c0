"""Services layer

Services are initialized with their dependencies and accessed through
dependency injection.
"""

from .stats_service import StatsService, clear_history_cache

__all__ = ["StatsService", "clear_history_cache"]
