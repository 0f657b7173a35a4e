import logging
from decimal import Decimal
from datetime import date
from typing import List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from src.models import Booking, User
from src.bookings.schemas import (
    BookingRecord, BookingStatus, BookingResponse, BookingSearchFilters,
    BookingStats, UserBookingStats
)
from src.bookings.exceptions import BookingSubmissionError, SeatConflictError

logger = logging.getLogger(__name__)


class BookingService:
    """Service for persisting and querying bookings"""

    def __init__(self, db: Session):
        self.db = db

    def create_booking(self, record: BookingRecord) -> Booking:
        """Persist a booking record submitted by a booking flow"""
        self._ensure_seats_free(
            record.route_id, record.departure_date, record.departure_time, record.seat_numbers
        )

        booking = Booking(
            user_id=record.user_id,
            route_id=record.route_id,
            from_location=record.from_location,
            to_location=record.to_location,
            departure_date=record.departure_date,
            departure_time=record.departure_time,
            arrival_time=record.arrival_time,
            seat_numbers=list(record.seat_numbers),
            price=record.total_price,
            status=record.status.value
        )

        try:
            self.db.add(booking)
            user = self.db.query(User).filter(User.id == record.user_id).first()
            if user:
                user.booking_count = (user.booking_count or 0) + 1
            self.db.commit()
            self.db.refresh(booking)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to store booking for user %s: %s", record.user_id, e)
            raise BookingSubmissionError("Failed to complete booking") from e

        logger.info("Stored booking %s for user %s", booking.id, record.user_id)
        return booking

    def get_taken_seats(
        self,
        route_id: int,
        departure_date: date,
        departure_time: str,
        exclude_booking_id: Optional[str] = None
    ) -> Set[int]:
        """Seat numbers held by bookings that are not cancelled on one departure"""
        query = self.db.query(Booking).filter(
            Booking.route_id == route_id,
            Booking.departure_date == departure_date,
            Booking.departure_time == departure_time,
            Booking.status != BookingStatus.CANCELLED.value
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        bookings = query.all()

        return {
            int(number)
            for booking in bookings
            for number in (booking.seat_numbers or [])
            if str(number).isdigit()
        }

    def _ensure_seats_free(
        self,
        route_id: int,
        departure_date: date,
        departure_time: str,
        seat_numbers: List[str],
        exclude_booking_id: Optional[str] = None
    ):
        taken = self.get_taken_seats(route_id, departure_date, departure_time, exclude_booking_id)
        conflicts = [
            int(number) for number in seat_numbers
            if str(number).isdigit() and int(number) in taken
        ]
        if conflicts:
            logger.info("Seats %s on route %s already taken", conflicts, route_id)
            raise SeatConflictError(conflicts)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_user_bookings(self, user_id: int) -> List[Booking]:
        """Bookings of one user, newest first"""
        return self.db.query(Booking).filter(
            Booking.user_id == user_id
        ).order_by(Booking.created_at.desc()).all()

    def cancel_booking(self, booking_id: str, user_id: int) -> Booking:
        """Cancel an upcoming booking owned by the user"""
        booking = self.get_booking(booking_id)
        if not booking or booking.user_id != user_id:
            raise LookupError("Booking not found")

        if booking.status != BookingStatus.UPCOMING.value:
            raise ValueError(f"Booking cannot be cancelled. Status: {booking.status}")

        booking.status = BookingStatus.CANCELLED.value
        self.db.commit()
        self.db.refresh(booking)
        logger.info("User %s cancelled booking %s", user_id, booking_id)
        return booking

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        booking = self.get_booking(booking_id)
        if not booking:
            raise LookupError("Booking not found")

        if booking.status == BookingStatus.CANCELLED.value and status != BookingStatus.CANCELLED:
            self._ensure_seats_free(
                booking.route_id, booking.departure_date, booking.departure_time,
                booking.seat_numbers or [], exclude_booking_id=booking.id
            )

        booking.status = status.value
        self.db.commit()
        self.db.refresh(booking)
        logger.info("Booking %s status set to %s", booking_id, status.value)
        return booking

    def search_bookings(self, filters: BookingSearchFilters) -> List[BookingResponse]:
        """All bookings matching a status and a free-text search"""
        query = self.db.query(Booking).options(joinedload(Booking.user))
        if filters.status and filters.status != "all":
            query = query.filter(Booking.status == filters.status)

        bookings = [
            self.to_response(booking)
            for booking in query.order_by(Booking.created_at.desc()).all()
        ]

        search = (filters.search or "").strip().lower()
        if not search:
            return bookings

        return [booking for booking in bookings if self._matches(booking, search)]

    @staticmethod
    def _matches(booking: BookingResponse, search: str) -> bool:
        return (
            search in booking.from_location.lower()
            or search in booking.to_location.lower()
            or search in booking.id.lower()
            or any(search in seat.lower() for seat in booking.seat_numbers)
            or bool(booking.passenger_name and search in booking.passenger_name.lower())
        )

    @staticmethod
    def to_response(booking: Booking) -> BookingResponse:
        response = BookingResponse.model_validate(booking)
        if booking.user is not None:
            response.passenger_name = booking.user.full_name
        return response

    @staticmethod
    def calculate_stats(bookings) -> BookingStats:
        """Counts per status and revenue across the given bookings"""
        stats = BookingStats()
        for booking in bookings:
            stats.total += 1
            stats.revenue += Decimal(booking.price)
            if booking.status == BookingStatus.UPCOMING.value:
                stats.upcoming += 1
            elif booking.status == BookingStatus.COMPLETED.value:
                stats.completed += 1
            elif booking.status == BookingStatus.CANCELLED.value:
                stats.cancelled += 1
        return stats

    @staticmethod
    def calculate_user_stats(bookings) -> UserBookingStats:
        stats = BookingService.calculate_stats(bookings)
        return UserBookingStats(
            total=stats.total,
            upcoming=stats.upcoming,
            completed=stats.completed,
            total_spent=stats.revenue
        )
