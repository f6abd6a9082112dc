"""Analytics domain - admin dashboard"""

from .router import admin_router

__all__ = ["admin_router"]
