"""
Booking Module

Seat selection, fares and the booking wizard for bus tickets. It includes:

- Seat map generation for a bus of a given capacity
- Fare calculation: seat subtotal, booking fee and tax
- The three-step booking flow (seats, passenger details, payment)
- Booking persistence, booking history and cancellation

Key Components:
- seat_service.py: Seat map generation with simulated seat availability
- fare_service.py: Fare totals and currency formatting
- flow.py: Booking flow state machine and its transition guards
- flow_service.py: In-memory registry of active flows and flow rendering
- booking_service.py: Storing and querying bookings, booking statistics
- router.py: FastAPI endpoints for the booking flow and booking history
- schemas.py: Pydantic models for seats, fares, flows and bookings
"""

from .router import router
from .flow import BookingFlow
from .flow_service import BookingFlowService, FlowRegistry, flow_registry, get_flow_registry
from .booking_service import BookingService
from .fare_service import FareCalculator, format_currency
from .seat_service import generate_seat_map
from .exceptions import (
    BookingFlowError, SeatSelectionError, PassengerDetailsError,
    AuthenticationRequiredError, BookingSubmissionError, FlowNotFoundError,
    FlowAccessError, SeatConflictError
)
from .schemas import (
    Seat, SeatType, Passenger, FareBreakdown, BookingRecord, BookingStatus,
    FlowStep, BookingFlowView, BookingResponse, BookingStats
)

__all__ = [
    "router",
    "BookingFlow",
    "BookingFlowService",
    "FlowRegistry",
    "flow_registry",
    "get_flow_registry",
    "BookingService",
    "FareCalculator",
    "format_currency",
    "generate_seat_map",
    "BookingFlowError",
    "SeatSelectionError",
    "PassengerDetailsError",
    "AuthenticationRequiredError",
    "BookingSubmissionError",
    "FlowNotFoundError",
    "FlowAccessError",
    "SeatConflictError",
    "Seat",
    "SeatType",
    "Passenger",
    "FareBreakdown",
    "BookingRecord",
    "BookingStatus",
    "FlowStep",
    "BookingFlowView",
    "BookingResponse",
    "BookingStats"
]
