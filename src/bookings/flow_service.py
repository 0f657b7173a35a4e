import logging
import random
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from src.config import settings
from src.auth.schemas import SessionUser
from src.routes.service import RouteService
from src.bookings.flow import BookingFlow
from src.bookings.seat_service import generate_seat_map
from src.bookings.fare_service import FareCalculator
from src.bookings.schemas import BookingFlowCreate, BookingFlowView, Passenger
from src.bookings.exceptions import FlowNotFoundError
from src.bookings.booking_service import BookingService

logger = logging.getLogger(__name__)


class FlowRegistry:
    """In-memory store of active booking flows.

    Flows expire after a period of inactivity and are discarded once submitted.
    """

    def __init__(self, ttl_minutes: int = settings.BOOKING_FLOW_TTL_MINUTES):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._flows: Dict[str, BookingFlow] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._flows)

    def add(self, flow: BookingFlow) -> BookingFlow:
        with self._lock:
            flow.expires_at = datetime.now() + self.ttl
            self._flows[flow.flow_id] = flow
        return flow

    def get(self, flow_id: str) -> BookingFlow:
        with self._lock:
            flow = self._flows.get(flow_id)
            if flow is None:
                raise FlowNotFoundError("Booking session not found or expired")

            now = datetime.now()
            if now > flow.expires_at:
                del self._flows[flow_id]
                logger.info("Booking flow %s expired", flow_id)
                raise FlowNotFoundError("Booking session not found or expired")

            flow.expires_at = now + self.ttl
            return flow

    def discard(self, flow_id: str) -> bool:
        with self._lock:
            return self._flows.pop(flow_id, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired flow and return how many were removed"""
        now = datetime.now()
        with self._lock:
            expired = [flow_id for flow_id, flow in self._flows.items() if now > flow.expires_at]
            for flow_id in expired:
                del self._flows[flow_id]

        if expired:
            logger.info("Purged %d expired booking flow(s)", len(expired))
        return len(expired)


flow_registry = FlowRegistry()


def get_flow_registry() -> FlowRegistry:
    return flow_registry


class BookingFlowService:
    """Creates booking flows and renders them for the API"""

    def __init__(self, db: Session, registry: FlowRegistry, rng: Optional[random.Random] = None):
        self.db = db
        self.registry = registry
        self.rng = rng

    def start_flow(self, request: BookingFlowCreate, session: Optional[SessionUser] = None) -> BookingFlow:
        """Quote the route, lay out its seats and register a new flow"""
        self.registry.purge_expired()

        quote = RouteService.get_route_quote(self.db, request.route_id, request.departure_date)
        seats = generate_seat_map(quote.capacity, quote.fare_per_seat, self.rng)

        flow = BookingFlow(
            quote=quote,
            seats=seats,
            fare_calculator=FareCalculator.from_db(self.db),
            session=session
        )
        taken = BookingService(self.db).get_taken_seats(
            quote.route_id, quote.departure_date, quote.departure_time
        )
        flow.mark_unavailable(taken)
        self.registry.add(flow)

        logger.info(
            "Started booking flow %s for route %s with %d seats",
            flow.flow_id, quote.route_id, len(seats)
        )
        return flow

    def get_flow(self, flow_id: str, session: Optional[SessionUser] = None) -> BookingFlow:
        flow = self.registry.get(flow_id)
        flow.attach_session(session)
        return flow

    @staticmethod
    def to_view(flow: BookingFlow) -> BookingFlowView:
        return BookingFlowView(
            flow_id=flow.flow_id,
            step=flow.step,
            quote=flow.quote,
            arrival_time=flow.arrival_time,
            seats=flow.seats,
            selected_seats=[seat.number for seat in flow.selected_seats],
            passenger=Passenger(**flow.passenger.model_dump()),
            fare=flow.fare,
            error=flow.error,
            show_login_prompt=flow.show_login_prompt,
            is_processing=flow.is_processing,
            is_authenticated=flow.is_authenticated,
            expires_at=flow.expires_at
        )
