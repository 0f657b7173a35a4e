import threading
import time
from datetime import date
from decimal import Decimal

import pytest

from src.auth.schemas import SessionUser
from src.routes.schemas import RouteQuote
from src.bookings.flow import BookingFlow
from src.bookings.schemas import Seat, FlowStep, BookingStatus
from src.bookings.exceptions import (
    BookingFlowError, SeatSelectionError, PassengerDetailsError,
    AuthenticationRequiredError, BookingSubmissionError, FlowAccessError, SeatConflictError
)


def make_quote(**overrides):
    values = dict(
        route_id=1,
        from_location="Nairobi",
        to_location="Mombasa",
        departure_date=date(2026, 11, 2),
        departure_time="08:00 AM",
        duration_text="4h 30m",
        fare_per_seat=Decimal("4500"),
        capacity=10
    )
    values.update(overrides)
    return RouteQuote(**values)


def make_seats(capacity=10, unavailable=(3,)):
    return [
        Seat(
            id=f"seat-{number}",
            number=number,
            is_available=number not in unavailable,
            price=Decimal("4500")
        )
        for number in range(1, capacity + 1)
    ]


def make_session(user_id=7):
    return SessionUser(user_id=user_id, email="jane@example.com", full_name="Jane Wanjiru", phone="+254700000001")


@pytest.fixture
def flow():
    return BookingFlow(make_quote(), make_seats())


@pytest.fixture
def signed_in_flow():
    return BookingFlow(make_quote(), make_seats(), session=make_session())


def advance_to_payment(flow):
    flow.toggle_seat(1)
    flow.toggle_seat(2)
    flow.next_step()
    flow.next_step()
    assert flow.step == FlowStep.PAYMENT


class TestSeatSelection:
    def test_toggle_selects_and_deselects(self, flow):
        flow.toggle_seat(1)
        assert [seat.number for seat in flow.selected_seats] == [1]

        flow.toggle_seat(1)
        assert flow.selected_seats == []

    def test_sixth_seat_is_rejected(self, flow):
        for number in (1, 2, 4, 5, 6):
            flow.toggle_seat(number)

        with pytest.raises(SeatSelectionError):
            flow.toggle_seat(7)

        assert len(flow.selected_seats) == 5
        assert flow.error == "You can select a maximum of 5 seats"

    def test_deselecting_is_allowed_at_the_limit(self, flow):
        for number in (1, 2, 4, 5, 6):
            flow.toggle_seat(number)

        flow.toggle_seat(6)
        flow.toggle_seat(7)
        assert [seat.number for seat in flow.selected_seats] == [1, 2, 4, 5, 7]

    def test_selection_never_exceeds_limit(self, flow):
        for number in [1, 2, 4, 5, 6, 7, 8, 1, 9, 10, 2, 7, 8]:
            try:
                flow.toggle_seat(number)
            except SeatSelectionError:
                pass
            assert len(flow.selected_seats) <= 5

    def test_unavailable_seat_is_rejected(self, flow):
        with pytest.raises(SeatSelectionError):
            flow.toggle_seat(3)
        assert flow.selected_seats == []

    def test_unknown_seat_is_rejected(self, flow):
        with pytest.raises(SeatSelectionError):
            flow.toggle_seat(99)

    def test_running_fare(self, flow):
        flow.toggle_seat(1)
        flow.toggle_seat(2)

        assert flow.fare.subtotal == Decimal("9000")
        assert flow.fare.tax == Decimal("720")
        assert flow.fare.total == Decimal("10220")


class TestStepTransitions:
    def test_cannot_advance_without_seats(self, flow):
        with pytest.raises(SeatSelectionError):
            flow.next_step()

        assert flow.step == FlowStep.SEAT_SELECTION
        assert flow.error == "Please select at least one seat to continue"

    def test_successful_transition_clears_error(self, flow):
        with pytest.raises(SeatSelectionError):
            flow.next_step()

        flow.toggle_seat(1)
        flow.next_step()

        assert flow.step == FlowStep.PASSENGER_DETAILS
        assert flow.error is None

    def test_passenger_details_required(self, signed_in_flow):
        signed_in_flow.toggle_seat(1)
        signed_in_flow.next_step()
        signed_in_flow.update_passenger(phone="  ")

        with pytest.raises(PassengerDetailsError):
            signed_in_flow.next_step()
        assert signed_in_flow.step == FlowStep.PASSENGER_DETAILS

    def test_unauthenticated_user_gets_login_prompt(self, flow):
        flow.toggle_seat(1)
        flow.next_step()
        flow.update_passenger(name="Jane", email="jane@example.com", phone="0700000000")

        with pytest.raises(AuthenticationRequiredError):
            flow.next_step()

        assert flow.step == FlowStep.PASSENGER_DETAILS
        assert flow.show_login_prompt is True
        assert [seat.number for seat in flow.selected_seats] == [1]

    def test_signing_in_keeps_flow_state(self, flow):
        flow.toggle_seat(1)
        flow.next_step()
        flow.update_passenger(name="Jane", email="jane@example.com", phone="0700000000")
        with pytest.raises(AuthenticationRequiredError):
            flow.next_step()

        flow.attach_session(make_session())
        flow.next_step()

        assert flow.step == FlowStep.PAYMENT
        assert flow.show_login_prompt is False
        assert flow.passenger.name == "Jane"

    def test_back_transitions(self, signed_in_flow):
        advance_to_payment(signed_in_flow)

        assert signed_in_flow.back() == FlowStep.PASSENGER_DETAILS
        assert signed_in_flow.back() == FlowStep.SEAT_SELECTION

        with pytest.raises(BookingFlowError):
            signed_in_flow.back()

    def test_seats_locked_after_seat_selection(self, signed_in_flow):
        signed_in_flow.toggle_seat(1)
        signed_in_flow.next_step()

        with pytest.raises(BookingFlowError):
            signed_in_flow.toggle_seat(2)


class TestSession:
    def test_passenger_prefilled_from_session(self, signed_in_flow):
        assert signed_in_flow.passenger.name == "Jane Wanjiru"
        assert signed_in_flow.passenger.email == "jane@example.com"
        assert signed_in_flow.passenger.phone == "+254700000001"

    def test_prefill_keeps_typed_values(self, flow):
        flow.update_passenger(name="Someone Else")
        flow.attach_session(make_session())

        assert flow.passenger.name == "Someone Else"
        assert flow.passenger.email == "jane@example.com"

    def test_other_user_cannot_take_over_flow(self, signed_in_flow):
        with pytest.raises(FlowAccessError):
            signed_in_flow.attach_session(make_session(user_id=99))

        with pytest.raises(FlowAccessError):
            signed_in_flow.attach_session(None)


class TestSubmit:
    def test_builds_record(self, signed_in_flow):
        advance_to_payment(signed_in_flow)
        stored = []

        result = signed_in_flow.submit(lambda record: stored.append(record) or "booking-1")

        assert result == "booking-1"
        assert signed_in_flow.step == FlowStep.SUBMITTED
        record = stored[0]
        assert record.user_id == 7
        assert record.seat_numbers == ["1", "2"]
        assert record.total_price == Decimal("10220")
        assert record.departure_time == "08:00 AM"
        assert record.arrival_time == "12:30 PM"
        assert record.status == BookingStatus.UPCOMING

    def test_arrival_time_matches_display(self, signed_in_flow):
        advance_to_payment(signed_in_flow)

        assert signed_in_flow.build_record().arrival_time == signed_in_flow.arrival_time

    def test_failure_stays_on_payment(self, signed_in_flow):
        advance_to_payment(signed_in_flow)

        def failing_persist(record):
            raise RuntimeError("connection reset")

        with pytest.raises(BookingSubmissionError):
            signed_in_flow.submit(failing_persist)

        assert signed_in_flow.step == FlowStep.PAYMENT
        assert signed_in_flow.error == "connection reset"
        assert signed_in_flow.is_processing is False

    def test_submit_only_from_payment(self, signed_in_flow):
        signed_in_flow.toggle_seat(1)

        with pytest.raises(BookingFlowError):
            signed_in_flow.submit(lambda record: record)
        assert signed_in_flow.step == FlowStep.SEAT_SELECTION

    def test_taken_seats_send_flow_back_to_seat_selection(self, signed_in_flow):
        advance_to_payment(signed_in_flow)

        def conflicting_persist(record):
            raise SeatConflictError([2])

        with pytest.raises(SeatConflictError):
            signed_in_flow.submit(conflicting_persist)

        assert signed_in_flow.step == FlowStep.SEAT_SELECTION
        assert [seat.number for seat in signed_in_flow.selected_seats] == [1]
        assert signed_in_flow.seats[1].is_available is False
        assert "2" in signed_in_flow.error

        with pytest.raises(SeatSelectionError):
            signed_in_flow.toggle_seat(2)


def run_together(*calls):
    """Start every call on its own thread at the same moment and collect the errors"""
    barrier = threading.Barrier(len(calls))
    errors = []

    def run(call):
        barrier.wait()
        try:
            call()
        except BookingFlowError as e:
            errors.append(e)

    threads = [threading.Thread(target=run, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)
    return errors


class TestConcurrentRequests:
    def test_concurrent_toggles_respect_seat_limit(self, flow):
        for number in (1, 2, 4, 8):
            flow.toggle_seat(number)

        errors = run_together(*(lambda n=number: flow.toggle_seat(n) for number in (5, 6, 7)))

        assert len(flow.selected_seats) == 5
        assert len(errors) == 2
        assert all(isinstance(error, SeatSelectionError) for error in errors)

    def test_concurrent_submits_store_one_booking(self, signed_in_flow):
        advance_to_payment(signed_in_flow)
        stored = []

        def slow_persist(record):
            time.sleep(0.05)
            stored.append(record)
            return "booking-1"

        errors = run_together(
            lambda: signed_in_flow.submit(slow_persist),
            lambda: signed_in_flow.submit(slow_persist)
        )

        assert len(stored) == 1
        assert len(errors) == 1
        assert signed_in_flow.step == FlowStep.SUBMITTED
