import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.auth.dependencies import get_current_user, get_optional_session
from src.auth.schemas import SessionUser
from src.routes.service import RouteNotFoundError
from src.bookings.schemas import (
    BookingFlowCreate, BookingFlowView, PassengerUpdate, SubmitRequest,
    BookingSubmitted, BookingResponse, UserBookingsResponse, BookingStatus
)
from src.bookings.exceptions import (
    BookingFlowError, AuthenticationRequiredError, BookingSubmissionError,
    FlowNotFoundError, FlowAccessError, SeatConflictError
)
from src.bookings.flow_service import BookingFlowService, FlowRegistry, get_flow_registry
from src.bookings.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter()

def _flow_http_error(error: BookingFlowError, flow=None) -> HTTPException:
    """Map a booking flow error onto an HTTP response"""
    if isinstance(error, FlowNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, FlowAccessError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))

    if isinstance(error, AuthenticationRequiredError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(error, SeatConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(error, BookingSubmissionError):
        status_code = status.HTTP_502_BAD_GATEWAY
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return HTTPException(
        status_code=status_code,
        detail={
            "message": str(error),
            "step": flow.step.value if flow else None,
            "login_required": bool(flow and flow.show_login_prompt)
        }
    )

def _load_flow(service: BookingFlowService, flow_id: str, session: Optional[SessionUser]):
    try:
        return service.get_flow(flow_id, session)
    except BookingFlowError as e:
        raise _flow_http_error(e)

# Booking flow endpoints
@router.post("/flows", response_model=BookingFlowView, status_code=status.HTTP_201_CREATED)
def start_booking_flow(
    request: BookingFlowCreate,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Start a booking for a route and lay out its seat map"""
    service = BookingFlowService(db, registry)
    try:
        flow = service.start_flow(request, session)
    except RouteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return service.to_view(flow)

@router.get("/flows/{flow_id}", response_model=BookingFlowView)
def get_booking_flow(
    flow_id: str,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Get the current state of a booking flow"""
    service = BookingFlowService(db, registry)
    return service.to_view(_load_flow(service, flow_id, session))

@router.post("/flows/{flow_id}/seats/{seat_number}", response_model=BookingFlowView)
def toggle_seat(
    flow_id: str,
    seat_number: int,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Select or deselect a seat"""
    service = BookingFlowService(db, registry)
    flow = _load_flow(service, flow_id, session)
    try:
        flow.toggle_seat(seat_number)
    except BookingFlowError as e:
        raise _flow_http_error(e, flow)
    return service.to_view(flow)

@router.put("/flows/{flow_id}/passenger", response_model=BookingFlowView)
def update_passenger(
    flow_id: str,
    passenger: PassengerUpdate,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Update passenger contact details"""
    service = BookingFlowService(db, registry)
    flow = _load_flow(service, flow_id, session)
    try:
        flow.update_passenger(**passenger.model_dump(exclude_unset=True))
    except BookingFlowError as e:
        raise _flow_http_error(e, flow)
    return service.to_view(flow)

@router.post("/flows/{flow_id}/next", response_model=BookingFlowView)
def next_step(
    flow_id: str,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Advance to the next step of the booking"""
    service = BookingFlowService(db, registry)
    flow = _load_flow(service, flow_id, session)
    try:
        flow.next_step()
    except BookingFlowError as e:
        raise _flow_http_error(e, flow)
    return service.to_view(flow)

@router.post("/flows/{flow_id}/back", response_model=BookingFlowView)
def previous_step(
    flow_id: str,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Return to the previous step of the booking"""
    service = BookingFlowService(db, registry)
    flow = _load_flow(service, flow_id, session)
    try:
        flow.back()
    except BookingFlowError as e:
        raise _flow_http_error(e, flow)
    return service.to_view(flow)

@router.post("/flows/{flow_id}/submit", response_model=BookingSubmitted, status_code=status.HTTP_201_CREATED)
def submit_booking(
    flow_id: str,
    payment: SubmitRequest = SubmitRequest(),
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Confirm the booking and store it"""
    service = BookingFlowService(db, registry)
    flow = _load_flow(service, flow_id, session)
    booking_service = BookingService(db)

    try:
        booking = flow.submit(booking_service.create_booking)
    except BookingFlowError as e:
        raise _flow_http_error(e, flow)

    registry.discard(flow_id)
    logger.info("Booking %s paid with %s", booking.id, payment.payment_method.value)

    return BookingSubmitted(booking_id=booking.id, status=BookingStatus(booking.status))

@router.delete("/flows/{flow_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_booking_flow(
    flow_id: str,
    session: Optional[SessionUser] = Depends(get_optional_session),
    registry: FlowRegistry = Depends(get_flow_registry),
    db: Session = Depends(get_db)
):
    """Abandon a booking flow"""
    service = BookingFlowService(db, registry)
    _load_flow(service, flow_id, session)
    registry.discard(flow_id)

# Booking history endpoints
@router.get("/me", response_model=UserBookingsResponse)
def get_my_bookings(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's bookings and booking statistics"""
    booking_service = BookingService(db)
    bookings = booking_service.get_user_bookings(current_user.id)

    return UserBookingsResponse(
        bookings=[BookingService.to_response(booking) for booking in bookings],
        stats=BookingService.calculate_user_stats(bookings)
    )

@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel one of the current user's upcoming bookings"""
    booking_service = BookingService(db)
    try:
        booking = booking_service.cancel_booking(booking_id, current_user.id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BookingService.to_response(booking)
