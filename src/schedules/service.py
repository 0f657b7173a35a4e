import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# "8:00 AM", "08:00 pm"
DEPARTURE_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")

# "4h 30m", "5h", "4h30m", "45m"
DURATION_PATTERN = re.compile(r"^\s*(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?\s*$", re.IGNORECASE)

MINUTES_PER_DAY = 24 * 60


def parse_departure_time(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a 12-hour "H:MM AM|PM" string into a 24-hour (hour, minute) pair.

    Returns None when the string is not a valid clock time.
    """
    if not value:
        return None

    match = DEPARTURE_TIME_PATTERN.match(value)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()

    if not 1 <= hour <= 12 or minute > 59:
        return None

    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0

    return hour, minute


def parse_duration(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a free-text "<int>h <int>m" duration into (hours, minutes).

    The minutes segment is optional. Returns None when neither segment is present.
    """
    if not value:
        return None

    match = DURATION_PATTERN.match(value)
    if not match or (match.group(1) is None and match.group(2) is None):
        return None

    return int(match.group(1) or 0), int(match.group(2) or 0)


def format_time(hour: int, minute: int, pad_hour: bool = False) -> str:
    """Format a 24-hour clock value as "H:MM AM|PM" (hours 0 and 12 both show as 12).

    With pad_hour the hour is zero padded to two digits, e.g. "08:00 AM".
    """
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    if pad_hour:
        return f"{display_hour:02d}:{minute:02d} {period}"
    return f"{display_hour}:{minute:02d} {period}"


def resolve_arrival_time(departure_time: str, duration: Optional[str]) -> str:
    """Compute the arrival time for a departure and a travel duration.

    Used both when displaying a schedule and when recording a booking. The arrival
    keeps the hour width of the departure ("08:00 AM" in, "01:30 PM" out). Malformed
    input degrades to the departure time unchanged instead of raising.
    """
    departure = parse_departure_time(departure_time)
    if departure is None:
        logger.debug("Unparseable departure time %r, using it as arrival time", departure_time)
        return departure_time

    travel = parse_duration(duration)
    if travel is None:
        logger.debug("Unparseable duration %r, using departure time as arrival time", duration)
        return departure_time

    hour, minute = departure
    hours, minutes = travel

    total_minutes = minute + minutes
    arrival_hour = (hour + hours + total_minutes // 60) % 24
    arrival_minute = total_minutes % 60

    pad_hour = len(departure_time.strip().split(":", 1)[0]) == 2
    return format_time(arrival_hour, arrival_minute, pad_hour)
