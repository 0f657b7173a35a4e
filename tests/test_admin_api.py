from datetime import date
from decimal import Decimal

import pytest

from src.models import Booking
from src.bookings.booking_service import BookingService
from src.bookings.schemas import BookingResponse

API = "/api/v1"


@pytest.fixture
def bookings(db, route, user):
    departure_date = route.schedules[0].departure_date
    rows = [
        Booking(user_id=user.id, route_id=route.id, from_location="Nairobi", to_location="Mombasa",
                departure_date=departure_date, departure_time="08:00 AM", arrival_time="12:30 PM",
                seat_numbers=["4", "5"], price=Decimal("10220"), status="upcoming"),
        Booking(user_id=user.id, route_id=route.id, from_location="Nairobi", to_location="Mombasa",
                departure_date=departure_date, departure_time="08:00 AM", arrival_time="12:30 PM",
                seat_numbers=["17"], price=Decimal("5360"), status="completed"),
        Booking(user_id=user.id, route_id=route.id, from_location="Mombasa", to_location="Nairobi",
                departure_date=departure_date, departure_time="09:00 PM", arrival_time="1:30 AM",
                seat_numbers=["9"], price=Decimal("5360"), status="cancelled"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


def test_requires_admin(client, auth_headers):
    assert client.get(f"{API}/admin/bookings", headers=auth_headers).status_code == 403
    assert client.get(f"{API}/admin/bookings").status_code == 401


def test_list_with_stats(client, admin_headers, bookings):
    response = client.get(f"{API}/admin/bookings", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    stats = body["stats"]
    assert (stats["total"], stats["upcoming"], stats["completed"], stats["cancelled"]) == (3, 1, 1, 1)
    assert Decimal(stats["revenue"]) == Decimal("20940")
    assert body["bookings"][0]["passenger_name"] == "Jane Wanjiru"


def test_filter_by_status(client, admin_headers, bookings):
    body = client.get(f"{API}/admin/bookings", params={"status": "upcoming"}, headers=admin_headers).json()

    assert body["total"] == 1
    assert body["bookings"][0]["status"] == "upcoming"
    assert body["stats"]["total"] == 3


def test_all_status_filter(client, admin_headers, bookings):
    body = client.get(f"{API}/admin/bookings", params={"status": "all"}, headers=admin_headers).json()
    assert body["total"] == 3


def test_invalid_status_filter(client, admin_headers, bookings):
    response = client.get(f"{API}/admin/bookings", params={"status": "lost"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.parametrize("search, expected", [
    ("mombasa", 3),
    ("wanjiru", 3),
    ("kisumu", 0),
])
def test_search(client, admin_headers, bookings, search, expected):
    body = client.get(f"{API}/admin/bookings", params={"search": search}, headers=admin_headers).json()
    assert body["total"] == expected


def test_search_matches_seat_numbers():
    booking = BookingResponse(
        id="b-0001", user_id=1, route_id=1, from_location="Nairobi", to_location="Mombasa",
        departure_date=date(2026, 11, 2), departure_time="08:00 AM", arrival_time="12:30 PM",
        seat_numbers=["17", "18"], price=Decimal("10220"), status="upcoming"
    )

    assert BookingService._matches(booking, "17")
    assert not BookingService._matches(booking, "23")


def test_search_by_booking_id(client, admin_headers, bookings):
    booking_id = bookings[1].id
    body = client.get(f"{API}/admin/bookings", params={"search": booking_id[:13]}, headers=admin_headers).json()
    assert booking_id in [booking["id"] for booking in body["bookings"]]


def test_update_status(client, admin_headers, bookings):
    response = client.patch(
        f"{API}/admin/bookings/{bookings[0].id}/status",
        json={"status": "completed"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_reinstate_cancelled_booking(client, admin_headers, bookings):
    response = client.patch(
        f"{API}/admin/bookings/{bookings[2].id}/status",
        json={"status": "upcoming"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "upcoming"


def test_reinstate_rejected_when_seats_were_rebooked(client, admin_headers, bookings, db, route, user):
    cancelled = Booking(
        user_id=user.id, route_id=route.id, from_location="Nairobi", to_location="Mombasa",
        departure_date=bookings[0].departure_date, departure_time="08:00 AM", arrival_time="12:30 PM",
        seat_numbers=["5"], price=Decimal("5360"), status="cancelled"
    )
    db.add(cancelled)
    db.commit()

    response = client.patch(
        f"{API}/admin/bookings/{cancelled.id}/status",
        json={"status": "upcoming"},
        headers=admin_headers
    )

    assert response.status_code == 409
    db.refresh(cancelled)
    assert cancelled.status == "cancelled"
    holders = db.query(Booking).filter(Booking.status == "upcoming").all()
    assert [b.id for b in holders if "5" in b.seat_numbers] == [bookings[0].id]


def test_update_status_of_unknown_booking(client, admin_headers):
    response = client.patch(
        f"{API}/admin/bookings/missing/status",
        json={"status": "completed"},
        headers=admin_headers
    )
    assert response.status_code == 404


def test_dashboard(client, admin_headers, bookings):
    body = client.get(f"{API}/admin/dashboard", headers=admin_headers).json()

    assert body["total_users"] == 2
    assert body["total_routes"] == 1
    assert body["total_buses"] == 1
    assert body["bookings"]["total"] == 3


def test_booking_settings_apply_to_new_flows(client, admin_headers, route):
    response = client.put(
        f"{API}/admin/booking-settings",
        json={"booking_fee": "300", "tax_rate": "0.10"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["booking_fee"]) == Decimal("300")

    view = client.post(f"{API}/bookings/flows", json={"route_id": route.id}).json()
    assert Decimal(view["fare"]["booking_fee"]) == Decimal("300")
    assert Decimal(view["fare"]["total"]) == Decimal("300")


def test_booking_settings_defaults(client, admin_headers):
    body = client.get(f"{API}/admin/booking-settings", headers=admin_headers).json()
    assert Decimal(body["booking_fee"]) == Decimal("500")
    assert Decimal(body["tax_rate"]) == Decimal("0.08")
