from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
from sqlalchemy.orm import Session

from .schemas import DashboardData, BookingSettingsInfo, BookingSettingsUpdate
from .admin_service import AdminManagementService
from ..config import settings
from ..database import get_db
from ..auth.dependencies import require_admin
from ..bookings.booking_service import BookingService
from ..bookings.exceptions import SeatConflictError
from ..bookings.schemas import (
    BookingListResponse, BookingResponse, BookingSearchFilters, BookingStatusUpdate
)

router = APIRouter(prefix=f"{settings.API_V1_STR}/admin", tags=["admin"])


@router.get("/dashboard", response_model=DashboardData)
def get_dashboard(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get admin dashboard data"""
    return AdminManagementService(db).get_dashboard()


@router.get("/bookings", response_model=BookingListResponse)
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status", description="all, upcoming, completed or cancelled"),
    search: Optional[str] = Query(None, description="Search locations, booking ID, seats or passenger name"),
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List bookings with filters and overall booking statistics"""
    try:
        filters = BookingSearchFilters(status=status_filter or None, search=search)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid booking filter: {str(e)}"
        )

    booking_service = BookingService(db)
    bookings = booking_service.search_bookings(filters)
    everything = booking_service.search_bookings(BookingSearchFilters())

    return BookingListResponse(
        bookings=bookings,
        stats=BookingService.calculate_stats(everything),
        total=len(bookings)
    )


@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    update: BookingStatusUpdate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Change the status of a booking"""
    booking_service = BookingService(db)
    try:
        booking = booking_service.update_status(booking_id, update.status)
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except SeatConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    return BookingService.to_response(booking)


@router.get("/booking-settings", response_model=BookingSettingsInfo)
def get_booking_settings(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get the booking fee and tax rate"""
    return AdminManagementService(db).get_booking_settings()


@router.put("/booking-settings", response_model=BookingSettingsInfo)
def update_booking_settings(
    update: BookingSettingsUpdate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update the booking fee and tax rate"""
    return AdminManagementService(db).update_booking_settings(update, admin_user.id)
