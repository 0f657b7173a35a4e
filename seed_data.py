#!/usr/bin/env python3

import os
from datetime import date, timedelta
from decimal import Decimal

from src.database import engine, Base, SessionLocal
from src.models import Location, Bus, Route, Schedule, Booking, BookingSettings, User
from src.auth.utils import get_password_hash
from src.config import settings

def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for the bus booking platform...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(Booking).delete()
        db.query(Schedule).delete()
        db.query(Route).delete()
        db.query(Bus).delete()
        db.query(Location).delete()
        db.query(BookingSettings).delete()

        # 1. Locations
        print("Creating locations...")
        city_names = ["Nairobi", "Mombasa", "Kisumu", "Nakuru", "Eldoret", "Malindi", "Nanyuki"]
        locations = [Location(name=name, type="city") for name in city_names]
        db.add_all(locations)
        db.flush()

        # 2. Fleet
        print("Creating fleet...")
        fleet = [
            Bus(
                name="Executive Coach",
                capacity=40,
                description="Reclining seats with extra legroom",
                features=["WiFi", "USB charging", "Air conditioning"]
            ),
            Bus(
                name="Luxury Liner",
                capacity=30,
                description="Premium long-distance coach",
                features=["WiFi", "Refreshments", "Entertainment", "Air conditioning"]
            ),
            Bus(
                name="City Shuttle",
                capacity=50,
                description="High-capacity coach for short routes",
                features=["Air conditioning"]
            ),
        ]
        db.add_all(fleet)
        db.flush()

        # 3. Routes
        print("Creating routes...")
        routes = [
            Route(from_location="Nairobi", to_location="Mombasa", duration="8h 30m",
                  price=Decimal("4500"), departure_times=["07:00 AM", "09:30 AM", "09:00 PM"], is_popular=True),
            Route(from_location="Nairobi", to_location="Kisumu", duration="6h",
                  price=Decimal("3500"), departure_times=["06:30 AM", "01:00 PM"], is_popular=True),
            Route(from_location="Nairobi", to_location="Nakuru", duration="2h 45m",
                  price=Decimal("1200"), departure_times=["08:00 AM", "11:00 AM", "04:00 PM"]),
            Route(from_location="Nakuru", to_location="Eldoret", duration="3h 15m",
                  price=Decimal("1500"), departure_times=["10:00 AM"]),
            Route(from_location="Mombasa", to_location="Malindi", duration="2h 30m",
                  price=Decimal("1000"), departure_times=["08:30 AM", "02:30 PM"]),
            Route(from_location="Nairobi", to_location="Nanyuki", duration="3h 30m",
                  price=Decimal("1300"), departure_times=["07:30 AM"]),
        ]
        db.add_all(routes)
        db.flush()

        # 4. Schedules for the next week
        print("Creating schedules...")
        schedules = []
        today = date.today()
        for index, route in enumerate(routes):
            bus = fleet[index % len(fleet)]
            for day in range(7):
                for departure_time in route.departure_times:
                    schedules.append(Schedule(
                        route_id=route.id,
                        bus_id=bus.id,
                        departure_date=today + timedelta(days=day),
                        departure_time=departure_time,
                        available_seats=bus.capacity
                    ))
        db.add_all(schedules)

        # 5. Booking settings
        print("Creating booking settings...")
        db.add(BookingSettings(booking_fee=settings.BOOKING_FEE, tax_rate=settings.TAX_RATE))

        # 6. Admin user
        admin_email = os.getenv("ADMIN_EMAIL", "admin@busbooking.co.ke")
        if not db.query(User).filter(User.email == admin_email).first():
            print("Creating admin user...")
            db.add(User(
                email=admin_email,
                full_name="System Administrator",
                password=get_password_hash(os.getenv("ADMIN_PASSWORD", "admin123")),
                is_admin=True
            ))

        db.commit()
        print("✅ Successfully created seed data!")
        print("Created:")
        print(f"  - {len(locations)} locations")
        print(f"  - {len(fleet)} buses")
        print(f"  - {len(routes)} routes")
        print(f"  - {len(schedules)} schedules")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
