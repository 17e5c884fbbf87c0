"""API Routers package"""

from . import stats_router

__all__ = ["stats_router"]
