"""Settings domain - business settings"""

from .router import router

__all__ = ["router"]
