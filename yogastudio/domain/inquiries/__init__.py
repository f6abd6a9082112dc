"""Inquiries domain - yoga queries, contact messages and form submissions"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
