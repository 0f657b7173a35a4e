"""
Schedule Time Module

Clock-time helpers shared by the route listings and the booking flow:

- Parsing 12-hour departure times ("8:00 AM")
- Parsing free-text travel durations ("4h 30m")
- Resolving arrival times from a departure and a duration

Both the route display and the booking submission call resolve_arrival_time,
so the two never disagree about when a bus arrives.
"""

from .service import (
    parse_departure_time, parse_duration, format_time, resolve_arrival_time
)

__all__ = [
    "parse_departure_time",
    "parse_duration",
    "format_time",
    "resolve_arrival_time"
]
