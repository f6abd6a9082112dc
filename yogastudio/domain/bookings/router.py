"""Booking router - booking form and admin booking management"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_optional_user, require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_bookings
from .schemas import BookingCreate, BookingResponse, BookingStatusUpdate, BookingUpdate
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
admin_router = APIRouter(prefix="/admin/bookings", tags=["Bookings Admin"], dependencies=[Depends(require_admin)])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    current_user: Optional[User] = Depends(get_optional_user),
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_bookings),
):
    return service.create_booking(data, current_user, background_tasks)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("", response_model=list[BookingResponse])
async def list_bookings(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    return service.list_bookings(status, search)


@admin_router.get("/export")
async def export_bookings_csv(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """Export bookings as CSV with the same filters as the list"""
    return service.export_bookings_csv(status, search)


@admin_router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return service.get_booking(booking_id)


@admin_router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str, data: BookingUpdate, service: BookingService = Depends(get_booking_service)
):
    return service.update_booking(booking_id, data)


@admin_router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str, data: BookingStatusUpdate, service: BookingService = Depends(get_booking_service)
):
    return service.update_status(booking_id, data.status)


@admin_router.delete("/{booking_id}")
async def delete_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return service.delete_booking(booking_id)
