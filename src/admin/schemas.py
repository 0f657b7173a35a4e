from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from src.bookings.schemas import BookingStats

class DashboardData(BaseModel):
    """Headline figures for the back office overview"""
    total_users: int
    total_routes: int
    total_buses: int
    bookings: BookingStats
    recent_bookings: int

class BookingSettingsInfo(BaseModel):
    booking_fee: Decimal
    tax_rate: Decimal
    updated_at: Optional[datetime] = None

class BookingSettingsUpdate(BaseModel):
    booking_fee: Optional[Decimal] = Field(None, ge=0)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=1)
