import math
import random
from decimal import Decimal
from typing import List, Optional

from src.bookings.schemas import Seat, SeatType

UNAVAILABLE_RATIO = 0.2
PREMIUM_RATIO = 0.1


def generate_seat_map(capacity: int, price: Decimal, rng: Optional[random.Random] = None) -> List[Seat]:
    """Lay out `capacity` seats numbered 1..capacity.

    About a fifth of the seats are drawn as unavailable. The draws are independent,
    so duplicates can leave fewer than floor(capacity * 0.2) seats taken. The first
    tenth of the seats are premium; both classes are priced at `price`.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ValueError("Seat capacity must be a positive integer")

    rng = rng or random.Random()

    unavailable = {
        rng.randint(1, capacity)
        for _ in range(math.floor(capacity * UNAVAILABLE_RATIO))
    }
    premium_count = math.floor(capacity * PREMIUM_RATIO)

    return [
        Seat(
            id=f"seat-{number}",
            number=number,
            is_available=number not in unavailable,
            is_selected=False,
            price=price,
            type=SeatType.PREMIUM if number <= premium_count else SeatType.STANDARD
        )
        for number in range(1, capacity + 1)
    ]
