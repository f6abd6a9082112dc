"""Billing domain - plans, recorded subscriptions and transactions"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
