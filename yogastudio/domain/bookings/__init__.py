"""Bookings domain - simple class bookings from the public form"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
