"""
Admin System Module

Back office functionality for the bus booking platform:

- Dashboard overview of users, routes, fleet and bookings
- Booking management with status filters, free-text search and statistics
- Booking status changes (upcoming, completed, cancelled)
- Booking fee and tax rate settings

All endpoints require a signed-in administrator.
"""

from . import router, schemas, admin_service

__all__ = [
    "router",
    "schemas",
    "admin_service"
]
