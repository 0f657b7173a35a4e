"""
Routes Module

Route and schedule lookup for the public site and the booking flow:

- Route listings with origin/destination filters, popular routes first
- Route details with dated schedules and resolved arrival times
- Location lists for search filters
- Route quotes: the read-only route/schedule snapshot a booking flow is built on
"""

from .router import router
from .service import RouteService, RouteNotFoundError
from .schemas import (
    RouteInfo, RouteDetail, RouteSearchResult, RouteQuote, ScheduleInfo,
    LocationInfo, BusInfo
)

__all__ = [
    "router",
    "RouteService",
    "RouteNotFoundError",
    "RouteInfo",
    "RouteDetail",
    "RouteSearchResult",
    "RouteQuote",
    "ScheduleInfo",
    "LocationInfo",
    "BusInfo"
]
