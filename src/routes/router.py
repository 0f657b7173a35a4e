from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from src.database import get_db
from src.models import Bus
from src.routes.schemas import RouteInfo, RouteDetail, RouteSearchResult, LocationInfo, BusInfo
from src.routes.service import RouteService

router = APIRouter()

@router.get("/", response_model=RouteSearchResult)
def get_routes(
    from_location: Optional[str] = Query(None, alias="from", description="Filter by origin"),
    to_location: Optional[str] = Query(None, alias="to", description="Filter by destination"),
    skip: int = Query(0, ge=0, description="Number of routes to skip"),
    limit: int = Query(50, ge=1, le=100, description="Number of routes to return"),
    db: Session = Depends(get_db)
):
    """List routes, popular routes first"""
    routes, total = RouteService.get_routes(
        db,
        from_location=from_location,
        to_location=to_location,
        skip=skip,
        limit=limit
    )
    return RouteSearchResult(
        routes=[RouteInfo.model_validate(route) for route in routes],
        total=total
    )

@router.get("/locations", response_model=List[LocationInfo])
def get_locations(db: Session = Depends(get_db)):
    """List locations for the origin/destination filters"""
    return RouteService.get_locations(db)

@router.get("/{route_id}", response_model=RouteDetail)
def get_route(
    route_id: int,
    from_date: Optional[date] = Query(None, description="Only schedules departing on or after this date"),
    db: Session = Depends(get_db)
):
    """Get a route with its schedules and arrival times"""
    route = RouteService.get_route_by_id(db, route_id)
    if not route:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route not found"
        )

    schedules = RouteService.get_route_schedules(db, route, from_date)

    bus = None
    bus_id = next((schedule.bus_id for schedule in schedules if schedule.bus_id), None)
    if bus_id:
        bus = db.query(Bus).filter(Bus.id == bus_id).first()

    return RouteDetail(
        **RouteInfo.model_validate(route).model_dump(),
        schedules=schedules,
        bus=BusInfo.model_validate(bus) if bus else None
    )
