"""Newsletter domain - subscribers and issues"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
