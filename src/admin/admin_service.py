import logging
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from src.config import settings
from src.admin.schemas import DashboardData, BookingSettingsInfo, BookingSettingsUpdate
from src.models import User, Route, Bus, Booking, BookingSettings
from src.bookings.booking_service import BookingService

logger = logging.getLogger(__name__)

class AdminManagementService:
    """Service for administrative management operations"""

    def __init__(self, db: Session):
        self.db = db
        self.booking_service = BookingService(db)

    def get_dashboard(self) -> DashboardData:
        """Overview counts across users, routes, fleet and bookings"""
        bookings = self.db.query(Booking).all()

        yesterday = datetime.now() - timedelta(days=1)
        recent_bookings = sum(
            1 for booking in bookings
            if booking.created_at and booking.created_at.replace(tzinfo=None) >= yesterday
        )

        return DashboardData(
            total_users=self.db.query(User).count(),
            total_routes=self.db.query(Route).count(),
            total_buses=self.db.query(Bus).count(),
            bookings=BookingService.calculate_stats(bookings),
            recent_bookings=recent_bookings
        )

    def get_booking_settings(self) -> BookingSettingsInfo:
        stored = self.db.query(BookingSettings).order_by(BookingSettings.id.desc()).first()
        if not stored:
            return BookingSettingsInfo(booking_fee=settings.BOOKING_FEE, tax_rate=settings.TAX_RATE)

        return BookingSettingsInfo(
            booking_fee=stored.booking_fee,
            tax_rate=stored.tax_rate,
            updated_at=stored.updated_at
        )

    def update_booking_settings(self, update: BookingSettingsUpdate, updated_by_id: int) -> BookingSettingsInfo:
        """Store new booking fee or tax rate; flows started afterwards use them"""
        stored = self.db.query(BookingSettings).order_by(BookingSettings.id.desc()).first()
        if not stored:
            stored = BookingSettings(booking_fee=settings.BOOKING_FEE, tax_rate=settings.TAX_RATE)
            self.db.add(stored)

        if update.booking_fee is not None:
            stored.booking_fee = update.booking_fee
        if update.tax_rate is not None:
            stored.tax_rate = update.tax_rate

        self.db.commit()
        self.db.refresh(stored)

        logger.info(
            "Admin %s set booking fee %s and tax rate %s",
            updated_by_id, stored.booking_fee, stored.tax_rate
        )
        return BookingSettingsInfo(
            booking_fee=stored.booking_fee,
            tax_rate=stored.tax_rate,
            updated_at=stored.updated_at
        )
