class BookingFlowError(ValueError):
    """Base class for errors raised while stepping through a booking flow"""

class SeatSelectionError(BookingFlowError):
    pass

class PassengerDetailsError(BookingFlowError):
    pass

class AuthenticationRequiredError(BookingFlowError):
    pass

class BookingSubmissionError(BookingFlowError):
    pass

class FlowNotFoundError(BookingFlowError):
    pass

class FlowAccessError(BookingFlowError):
    pass

class SeatConflictError(SeatSelectionError):
    """Raised when selected seats were booked by someone else in the meantime"""

    def __init__(self, seat_numbers):
        self.seat_numbers = sorted(seat_numbers)
        seats = ", ".join(str(number) for number in self.seat_numbers)
        super().__init__(f"Seat(s) {seats} are no longer available. Please choose other seats")
