"""Accounts domain - profiles, activity and role management"""

from .router import router

__all__ = ["router"]
