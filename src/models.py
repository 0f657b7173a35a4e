import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, ForeignKey, Numeric, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from src.database import Base

# ================================
# Users
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    full_name = Column(String(255))
    phone = Column(String(50))
    is_admin = Column(Boolean, default=False, nullable=False)
    booking_count = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="user")

# ================================
# Locations / Fleet
# ================================
class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    type = Column(String(50), nullable=False, default="city")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Bus(Base):
    __tablename__ = "fleet"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(Text, default="")
    features = Column(JSON, default=list)
    image_url = Column(String(500), default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedules = relationship("Schedule", back_populates="bus")

# ================================
# Routes & Schedules
# ================================
class Route(Base):
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, index=True)
    from_location = Column(String(255), nullable=False, index=True)
    to_location = Column(String(255), nullable=False, index=True)
    departure_times = Column(JSON, default=list)
    duration = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_popular = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedules = relationship("Schedule", back_populates="route")
    bookings = relationship("Booking", back_populates="route")

class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    route_id = Column(Integer, ForeignKey("routes.id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("fleet.id"))
    departure_date = Column(Date, nullable=False, index=True)
    departure_time = Column(String(20), nullable=False)
    available_seats = Column(Integer, default=40)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    route = relationship("Route", back_populates="schedules")
    bus = relationship("Bus", back_populates="schedules")

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    route_id = Column(Integer, ForeignKey("routes.id"), nullable=False, index=True)
    from_location = Column(String(255), nullable=False)
    to_location = Column(String(255), nullable=False)
    departure_date = Column(Date, nullable=False)
    departure_time = Column(String(20), nullable=False)
    arrival_time = Column(String(20), nullable=False)
    seat_numbers = Column(JSON, nullable=False, default=list)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="upcoming", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    route = relationship("Route", back_populates="bookings")

class BookingSettings(Base):
    __tablename__ = "booking_settings"

    id = Column(Integer, primary_key=True, index=True)
    booking_fee = Column(Numeric(10, 2), nullable=False, default=500)
    tax_rate = Column(Numeric(5, 4), nullable=False, default=0.08)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
