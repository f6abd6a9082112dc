"""Classes domain - class types, instructors, schedule, bookings and waitlist"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
