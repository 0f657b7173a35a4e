import logging
from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from src.config import settings
from src.models import Route, Schedule, Bus, Location
from src.routes.schemas import RouteQuote, ScheduleInfo
from src.schedules.service import resolve_arrival_time

logger = logging.getLogger(__name__)

class RouteNotFoundError(ValueError):
    pass

class RouteService:
    @staticmethod
    def get_route_by_id(db: Session, route_id: int) -> Optional[Route]:
        """Get route by ID"""
        return db.query(Route).filter(Route.id == route_id).first()

    @staticmethod
    def get_routes(
        db: Session,
        from_location: Optional[str] = None,
        to_location: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Route], int]:
        """Get routes, popular first, filtered by origin and destination"""
        query = db.query(Route)

        if from_location:
            query = query.filter(Route.from_location.ilike(f"%{from_location}%"))
        if to_location:
            query = query.filter(Route.to_location.ilike(f"%{to_location}%"))

        total = query.count()
        routes = query.order_by(Route.is_popular.desc(), Route.id).offset(skip).limit(limit).all()

        return routes, total

    @staticmethod
    def get_locations(db: Session) -> List[Location]:
        return db.query(Location).order_by(Location.name).all()

    @staticmethod
    def get_route_schedules(
        db: Session,
        route: Route,
        from_date: Optional[date] = None
    ) -> List[ScheduleInfo]:
        """Upcoming schedules for a route with arrival times resolved"""
        query = db.query(Schedule).filter(Schedule.route_id == route.id)
        if from_date:
            query = query.filter(Schedule.departure_date >= from_date)

        schedules = query.order_by(Schedule.departure_date, Schedule.id).all()

        return [
            ScheduleInfo(
                id=schedule.id,
                route_id=schedule.route_id,
                departure_date=schedule.departure_date,
                departure_time=schedule.departure_time,
                arrival_time=resolve_arrival_time(schedule.departure_time, route.duration),
                available_seats=schedule.available_seats,
                bus_id=schedule.bus_id
            )
            for schedule in schedules
        ]

    @staticmethod
    def find_schedule(
        db: Session,
        route_id: int,
        departure_date: Optional[date] = None
    ) -> Optional[Schedule]:
        """Earliest schedule of a route, on the requested date when one is given"""
        query = db.query(Schedule).filter(Schedule.route_id == route_id)
        if departure_date:
            query = query.filter(Schedule.departure_date == departure_date)
        return query.order_by(Schedule.departure_date, Schedule.id).first()

    @staticmethod
    def get_route_quote(
        db: Session,
        route_id: int,
        departure_date: Optional[date] = None
    ) -> RouteQuote:
        """Build the route/schedule snapshot a booking flow works from"""
        route = RouteService.get_route_by_id(db, route_id)
        if not route:
            raise RouteNotFoundError(f"Route with ID {route_id} not found")

        schedule = RouteService.find_schedule(db, route_id, departure_date)

        bus = None
        if schedule and schedule.bus_id:
            bus = db.query(Bus).filter(Bus.id == schedule.bus_id).first()

        if schedule:
            departure_time = schedule.departure_time
        elif route.departure_times:
            departure_time = route.departure_times[0]
        else:
            departure_time = settings.DEFAULT_DEPARTURE_TIME

        capacity = schedule.available_seats if schedule and schedule.available_seats else settings.DEFAULT_SEAT_CAPACITY

        quote = RouteQuote(
            route_id=route.id,
            from_location=route.from_location,
            to_location=route.to_location,
            departure_date=schedule.departure_date if schedule else (departure_date or date.today()),
            departure_time=departure_time,
            duration_text=route.duration,
            fare_per_seat=route.price if route.price is not None else settings.DEFAULT_SEAT_PRICE,
            capacity=capacity,
            schedule_id=schedule.id if schedule else None,
            bus_id=bus.id if bus else None,
            bus_name=bus.name if bus else None
        )

        logger.info(
            "Quoted route %s (%s -> %s) departing %s %s",
            route.id, route.from_location, route.to_location,
            quote.departure_date, quote.departure_time
        )
        return quote
