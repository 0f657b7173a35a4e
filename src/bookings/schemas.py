from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from src.routes.schemas import RouteQuote

class BookingStatus(str, Enum):
    """Booking status enumeration"""
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class FlowStep(str, Enum):
    """Steps of the booking wizard"""
    SEAT_SELECTION = "seat_selection"
    PASSENGER_DETAILS = "passenger_details"
    PAYMENT = "payment"
    SUBMITTED = "submitted"

class SeatType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"

class PaymentMethod(str, Enum):
    CREDIT_CARD = "creditCard"
    MOBILE_MONEY = "mobileMoney"
    PAYPAL = "paypal"

# Seat map
class Seat(BaseModel):
    """A seat on the bus as shown in the seat picker"""
    id: str
    number: int
    is_available: bool
    is_selected: bool = False
    price: Decimal
    type: SeatType = SeatType.STANDARD

class FareBreakdown(BaseModel):
    """Running totals for the selected seats"""
    seat_count: int
    subtotal: Decimal
    booking_fee: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    formatted_total: str

# Passenger
class Passenger(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""

class PassengerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

# Booking record handed to persistence
class BookingRecord(BaseModel):
    user_id: int
    route_id: int
    from_location: str
    to_location: str
    departure_date: date
    departure_time: str
    arrival_time: str
    seat_numbers: List[str]
    total_price: Decimal
    status: BookingStatus = BookingStatus.UPCOMING

# Flow API models
class BookingFlowCreate(BaseModel):
    route_id: int
    departure_date: Optional[date] = None

class SubmitRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD

class BookingFlowView(BaseModel):
    """Snapshot of one booking flow as rendered by the wizard"""
    flow_id: str
    step: FlowStep
    quote: RouteQuote
    arrival_time: str
    seats: List[Seat]
    selected_seats: List[int]
    passenger: Passenger
    fare: FareBreakdown
    error: Optional[str] = None
    show_login_prompt: bool = False
    is_processing: bool = False
    is_authenticated: bool = False
    expires_at: datetime

class BookingSubmitted(BaseModel):
    booking_id: str
    status: BookingStatus
    message: str = "Booking confirmed! Check your email for details."

# Persisted bookings
class BookingResponse(BaseModel):
    id: str
    user_id: int
    route_id: int
    from_location: str
    to_location: str
    departure_date: date
    departure_time: str
    arrival_time: str
    seat_numbers: List[str]
    price: Decimal
    status: BookingStatus
    created_at: Optional[datetime] = None
    passenger_name: Optional[str] = None

    class Config:
        from_attributes = True

class UserBookingStats(BaseModel):
    total: int = 0
    upcoming: int = 0
    completed: int = 0
    total_spent: Decimal = Decimal("0")

class UserBookingsResponse(BaseModel):
    bookings: List[BookingResponse]
    stats: UserBookingStats

class BookingStats(BaseModel):
    total: int = 0
    upcoming: int = 0
    completed: int = 0
    cancelled: int = 0
    revenue: Decimal = Decimal("0")

class BookingSearchFilters(BaseModel):
    status: Optional[Literal["all", "upcoming", "completed", "cancelled"]] = None
    search: Optional[str] = None

class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    stats: BookingStats
    total: int

class BookingStatusUpdate(BaseModel):
    status: BookingStatus = Field(..., description="New booking status")
