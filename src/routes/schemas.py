from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal

class LocationInfo(BaseModel):
    id: int
    name: str
    type: str

    class Config:
        from_attributes = True

class BusInfo(BaseModel):
    id: int
    name: str
    capacity: int
    description: Optional[str] = None
    features: List[str] = []
    image_url: Optional[str] = None

    class Config:
        from_attributes = True

class RouteBase(BaseModel):
    from_location: str
    to_location: str
    departure_times: List[str] = []
    duration: str
    price: Decimal
    is_popular: bool = False

class RouteInfo(RouteBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ScheduleInfo(BaseModel):
    """Dated departure of a route, with its computed arrival time"""
    id: int
    route_id: int
    departure_date: date
    departure_time: str
    arrival_time: str
    available_seats: int
    bus_id: Optional[int] = None

class RouteDetail(RouteInfo):
    schedules: List[ScheduleInfo] = []
    bus: Optional[BusInfo] = None

class RouteSearchResult(BaseModel):
    routes: List[RouteInfo]
    total: int

class RouteQuote(BaseModel):
    """Read-only snapshot of a route and schedule used by one booking flow"""
    route_id: int
    from_location: str
    to_location: str
    departure_date: date
    departure_time: str
    duration_text: str
    fare_per_seat: Decimal = Field(..., ge=0)
    capacity: int = Field(..., gt=0)
    schedule_id: Optional[int] = None
    bus_id: Optional[int] = None
    bus_name: Optional[str] = None
