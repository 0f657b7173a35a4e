from datetime import date
from decimal import Decimal

import pytest

from src.models import Route
from src.routes.service import RouteService, RouteNotFoundError
API = "/api/v1"


@pytest.fixture
def other_route(db):
    route = Route(
        from_location="Nairobi",
        to_location="Kisumu",
        departure_times=["06:30 AM"],
        duration="6h",
        price=Decimal("3500"),
        is_popular=False
    )
    db.add(route)
    db.commit()
    db.refresh(route)
    return route


def test_list_routes_popular_first(client, route, other_route):
    response = client.get(f"{API}/routes/")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert body["routes"][0]["id"] == route.id


def test_filter_routes_by_destination(client, route, other_route):
    response = client.get(f"{API}/routes/", params={"from": "nairobi", "to": "kis"})
    body = response.json()
    assert body["total"] == 1
    assert body["routes"][0]["to_location"] == "Kisumu"


def test_route_detail_includes_arrival_times(client, route, bus):
    response = client.get(f"{API}/routes/{route.id}")
    assert response.status_code == 200
    body = response.json()
    assert body["schedules"][0]["departure_time"] == "08:00 AM"
    assert body["schedules"][0]["arrival_time"] == "12:30 PM"
    assert body["bus"]["name"] == "Executive Coach"


def test_unknown_route(client):
    assert client.get(f"{API}/routes/999").status_code == 404


def test_locations(client, route):
    response = client.get(f"{API}/routes/locations")
    assert [location["name"] for location in response.json()] == ["Mombasa", "Nairobi"]


class TestRouteQuote:
    def test_quote_uses_schedule(self, db, route, bus):
        quote = RouteService.get_route_quote(db, route.id)

        assert quote.departure_time == "08:00 AM"
        assert quote.capacity == 40
        assert quote.fare_per_seat == Decimal("4500")
        assert quote.bus_name == "Executive Coach"

    def test_quote_without_schedule_falls_back(self, db, other_route):
        quote = RouteService.get_route_quote(db, other_route.id, date(2026, 12, 24))

        assert quote.departure_time == "06:30 AM"
        assert quote.capacity == 40
        assert quote.departure_date == date(2026, 12, 24)
        assert quote.schedule_id is None

    def test_quote_for_missing_route(self, db):
        with pytest.raises(RouteNotFoundError):
            RouteService.get_route_quote(db, 12345)
