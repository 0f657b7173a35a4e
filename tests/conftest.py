import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.database import Base, get_db
from src.main import app
from src.models import Route, Schedule, Bus, Location, User
from src.auth.utils import get_password_hash
from src.bookings.flow_service import FlowRegistry, get_flow_registry

API = "/api/v1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registry():
    return FlowRegistry()


@pytest.fixture
def client(session_factory, registry):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_flow_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def bus(db):
    bus = Bus(name="Executive Coach", capacity=40, description="", features=["WiFi"])
    db.add(bus)
    db.commit()
    db.refresh(bus)
    return bus


@pytest.fixture
def route(db, bus):
    db.add_all([Location(name="Nairobi", type="city"), Location(name="Mombasa", type="city")])
    route = Route(
        from_location="Nairobi",
        to_location="Mombasa",
        departure_times=["08:00 AM", "09:00 PM"],
        duration="4h 30m",
        price=Decimal("4500"),
        is_popular=True
    )
    db.add(route)
    db.flush()
    db.add(Schedule(
        route_id=route.id,
        bus_id=bus.id,
        departure_date=date.today() + timedelta(days=1),
        departure_time="08:00 AM",
        available_seats=40
    ))
    db.commit()
    db.refresh(route)
    return route


def _create_user(db, email, is_admin=False, full_name="Jane Wanjiru", phone="+254700000001"):
    user = User(
        email=email,
        password=get_password_hash("secret123"),
        full_name=full_name,
        phone=phone,
        is_admin=is_admin
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _login(client, email):
    response = client.post(f"{API}/auth/login", json={"email": email, "password": "secret123"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def user(db):
    return _create_user(db, "jane@example.com")


@pytest.fixture
def auth_headers(client, user):
    return _login(client, user.email)


@pytest.fixture
def admin(db):
    return _create_user(db, "admin@example.com", is_admin=True, full_name="Admin", phone=None)


@pytest.fixture
def admin_headers(client, admin):
    return _login(client, admin.email)
