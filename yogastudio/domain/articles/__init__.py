"""Articles domain - mantra publishing, views and ratings"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
