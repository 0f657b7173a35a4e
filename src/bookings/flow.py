import functools
import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from src.config import settings
from src.auth.schemas import SessionUser
from src.routes.schemas import RouteQuote
from src.schedules.service import resolve_arrival_time
from src.bookings.fare_service import FareCalculator
from src.bookings.schemas import (
    Seat, Passenger, FareBreakdown, BookingRecord, BookingStatus, FlowStep
)
from src.bookings.exceptions import (
    BookingFlowError, SeatSelectionError, PassengerDetailsError,
    AuthenticationRequiredError, BookingSubmissionError, FlowAccessError, SeatConflictError
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

NEXT_STEP = {
    FlowStep.SEAT_SELECTION: FlowStep.PASSENGER_DETAILS,
    FlowStep.PASSENGER_DETAILS: FlowStep.PAYMENT,
}

PREVIOUS_STEP = {
    FlowStep.PASSENGER_DETAILS: FlowStep.SEAT_SELECTION,
    FlowStep.PAYMENT: FlowStep.PASSENGER_DETAILS,
}


def synchronized(method):
    """Run a flow method while holding that flow's lock"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class BookingFlow:
    """Three-step booking wizard: seat selection, passenger details, payment.

    One instance owns its seat map for its whole lifetime. The session is passed
    in explicitly; without one the flow stops before payment and raises the login
    prompt instead of advancing.

    Requests for the same flow can arrive on different worker threads, so every
    state change runs under the flow's own lock.
    """

    def __init__(
        self,
        quote: RouteQuote,
        seats: List[Seat],
        fare_calculator: Optional[FareCalculator] = None,
        session: Optional[SessionUser] = None,
        max_seats: int = settings.MAX_SEATS_PER_BOOKING,
        flow_id: Optional[str] = None
    ):
        self.flow_id = flow_id or str(uuid.uuid4())
        self.quote = quote
        self.seats = seats
        self.fare_calculator = fare_calculator or FareCalculator()
        self.max_seats = max_seats
        self._lock = threading.RLock()
        self.session: Optional[SessionUser] = None

        self.step = FlowStep.SEAT_SELECTION
        self.passenger = Passenger()
        self.error: Optional[str] = None
        self.show_login_prompt = False
        self.is_processing = False
        self.created_at = datetime.now()
        self.expires_at = self.created_at

        self.arrival_time = resolve_arrival_time(quote.departure_time, quote.duration_text)

        if session:
            self.attach_session(session)

    @property
    def selected_seats(self) -> List[Seat]:
        return [seat for seat in self.seats if seat.is_selected]

    @property
    def fare(self) -> FareBreakdown:
        return self.fare_calculator.calculate(self.seats)

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @synchronized
    def attach_session(self, session: Optional[SessionUser]):
        """Bind the caller's session, rejecting anyone but the flow's owner"""
        if self.session is not None:
            if session is None or session.user_id != self.session.user_id:
                raise FlowAccessError("This booking belongs to another user")
            return

        if session is None:
            return

        self.session = session
        self.show_login_prompt = False
        self._prefill_passenger()
        logger.info("Booking flow %s signed in as user %s", self.flow_id, session.user_id)

    @synchronized
    def mark_unavailable(self, seat_numbers):
        """Take seats out of the map, dropping them from the selection"""
        numbers = set(seat_numbers)
        for seat in self.seats:
            if seat.number in numbers:
                seat.is_available = False
                seat.is_selected = False

    def _prefill_passenger(self):
        if not self.passenger.name and self.session.full_name:
            self.passenger.name = self.session.full_name
        if not self.passenger.email and self.session.email:
            self.passenger.email = self.session.email
        if not self.passenger.phone and self.session.phone:
            self.passenger.phone = self.session.phone

    def _block(self, error_class, message: str):
        self.error = message
        logger.info("Booking flow %s blocked at %s: %s", self.flow_id, self.step.value, message)
        raise error_class(message)

    def _require_step(self, *steps: FlowStep):
        if self.step not in steps:
            self._block(BookingFlowError, f"Action not allowed during step '{self.step.value}'")

    @synchronized
    def toggle_seat(self, seat_number: int) -> Seat:
        """Select or deselect a seat, keeping at most max_seats selected"""
        self._require_step(FlowStep.SEAT_SELECTION)

        seat = next((s for s in self.seats if s.number == seat_number), None)
        if seat is None:
            self._block(SeatSelectionError, f"Seat {seat_number} does not exist")

        if not seat.is_available:
            self._block(SeatSelectionError, f"Seat {seat_number} is not available")

        if not seat.is_selected and len(self.selected_seats) >= self.max_seats:
            self._block(SeatSelectionError, f"You can select a maximum of {self.max_seats} seats")

        seat.is_selected = not seat.is_selected
        self.error = None
        return seat

    @synchronized
    def update_passenger(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Passenger:
        self._require_step(FlowStep.SEAT_SELECTION, FlowStep.PASSENGER_DETAILS)

        if name is not None:
            self.passenger.name = name
        if email is not None:
            self.passenger.email = email
        if phone is not None:
            self.passenger.phone = phone
        return self.passenger

    @synchronized
    def next_step(self) -> FlowStep:
        """Advance one step if the current step's guard passes"""
        if self.step not in NEXT_STEP:
            self._block(BookingFlowError, f"Cannot advance from step '{self.step.value}'")

        if self.step == FlowStep.SEAT_SELECTION and not self.selected_seats:
            self._block(SeatSelectionError, "Please select at least one seat to continue")

        if self.step == FlowStep.PASSENGER_DETAILS:
            passenger = self.passenger
            if not (passenger.name.strip() and passenger.email.strip() and passenger.phone.strip()):
                self._block(PassengerDetailsError, "Please fill in all passenger details")

            if not self.is_authenticated:
                self.show_login_prompt = True
                self._block(AuthenticationRequiredError, "Please sign in to continue to payment")

        self.error = None
        self.step = NEXT_STEP[self.step]
        logger.info("Booking flow %s advanced to %s", self.flow_id, self.step.value)
        return self.step

    @synchronized
    def back(self) -> FlowStep:
        if self.step not in PREVIOUS_STEP:
            self._block(BookingFlowError, f"Cannot go back from step '{self.step.value}'")

        self.error = None
        self.step = PREVIOUS_STEP[self.step]
        return self.step

    def build_record(self) -> BookingRecord:
        """Assemble the booking record for the current selection"""
        if not self.is_authenticated:
            self.show_login_prompt = True
            self._block(AuthenticationRequiredError, "Please sign in to complete your booking")

        return BookingRecord(
            user_id=self.session.user_id,
            route_id=self.quote.route_id,
            from_location=self.quote.from_location,
            to_location=self.quote.to_location,
            departure_date=self.quote.departure_date,
            departure_time=self.quote.departure_time,
            arrival_time=resolve_arrival_time(self.quote.departure_time, self.quote.duration_text),
            seat_numbers=[str(seat.number) for seat in self.selected_seats],
            total_price=self.fare.total,
            status=BookingStatus.UPCOMING
        )

    @synchronized
    def submit(self, persist: Callable[[BookingRecord], T]) -> T:
        """Hand the booking record to `persist`.

        On failure the flow stays on the payment step with the error recorded;
        there is no automatic retry. Seats taken by another booking in the meantime
        are removed and the flow returns to seat selection.
        """
        self._require_step(FlowStep.PAYMENT)

        if self.is_processing:
            self._block(BookingSubmissionError, "This booking is already being submitted")

        if not self.selected_seats:
            self._block(SeatSelectionError, "Please select at least one seat to continue")

        record = self.build_record()

        self.is_processing = True
        try:
            result = persist(record)
        except SeatConflictError as e:
            self.mark_unavailable(e.seat_numbers)
            self.error = str(e)
            self.step = FlowStep.SEAT_SELECTION
            logger.info("Booking flow %s lost seats %s before submission", self.flow_id, e.seat_numbers)
            raise
        except Exception as e:
            self.error = str(e) or "Failed to complete booking"
            logger.warning("Booking flow %s submission failed: %s", self.flow_id, self.error)
            raise BookingSubmissionError(self.error) from e
        finally:
            self.is_processing = False

        self.error = None
        self.step = FlowStep.SUBMITTED
        logger.info(
            "Booking flow %s submitted %d seat(s) for user %s",
            self.flow_id, len(record.seat_numbers), record.user_id
        )
        return result
