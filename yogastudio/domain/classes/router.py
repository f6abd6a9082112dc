"""Class router - public catalogue and booking, plus class administration"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user, require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_bookings
from .schemas import (
    BookClassResponse,
    BookingStatusUpdate,
    CancelBookingRequest,
    CancelBookingResponse,
    CancelClassRequest,
    ClassBookingCreate,
    ClassBookingResponse,
    ClassTypeCreate,
    ClassTypeResponse,
    ClassTypeUpdate,
    InstructorCreate,
    InstructorResponse,
    InstructorStatsResponse,
    InstructorUpdate,
    ScheduledClassCreate,
    ScheduledClassResponse,
    ScheduledClassUpdate,
    ScheduleSlotCreate,
    ScheduleSlotResponse,
    ScheduleSlotUpdate,
    WaitlistEntryResponse,
)
from .service import ClassService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Classes"])
admin_router = APIRouter(prefix="/admin", tags=["Classes Admin"], dependencies=[Depends(require_admin)])


def get_class_service(db: Session = Depends(get_db)) -> ClassService:
    """Dependency injection for ClassService"""
    return ClassService(db)


# ============================================================================
# PUBLIC CATALOGUE
# ============================================================================


@router.get("/class-types", response_model=list[ClassTypeResponse])
async def list_class_types(service: ClassService = Depends(get_class_service)):
    return service.list_class_types()


@router.get("/instructors", response_model=list[InstructorResponse])
async def list_instructors(service: ClassService = Depends(get_class_service)):
    return service.list_instructors()


@router.get("/schedule/weekly", response_model=list[ScheduleSlotResponse])
async def get_weekly_schedule(service: ClassService = Depends(get_class_service)):
    """Active recurring slots ordered by day of week, then start time"""
    return service.get_weekly_schedule()


@router.get("/classes/upcoming", response_model=list[ScheduledClassResponse])
async def list_upcoming_classes(
    limit: int = Query(50, ge=1, le=200),
    service: ClassService = Depends(get_class_service),
):
    return service.list_upcoming(limit)


# ============================================================================
# BOOKING
# ============================================================================


@router.post("/classes/{class_id}/bookings", response_model=BookClassResponse, status_code=201)
async def book_class(
    class_id: str,
    data: ClassBookingCreate,
    background_tasks: BackgroundTasks,
    current_user: Optional[User] = Depends(get_optional_user),
    service: ClassService = Depends(get_class_service),
    _: None = Depends(rate_limit_bookings),
):
    """Book a spot, or join the waitlist when the class is full"""
    return service.book_class(class_id, data, current_user, background_tasks)


@router.post("/class-bookings/{booking_id}/cancel", response_model=CancelBookingResponse)
async def cancel_booking(
    booking_id: str,
    background_tasks: BackgroundTasks,
    data: Optional[CancelBookingRequest] = None,
    current_user: User = Depends(get_current_user),
    service: ClassService = Depends(get_class_service),
):
    reason = data.reason if data else None
    return service.cancel_booking(booking_id, current_user, reason, background_tasks)


# ============================================================================
# ADMIN - CLASS TYPES
# ============================================================================


@admin_router.get("/class-types", response_model=list[ClassTypeResponse])
async def admin_list_class_types(service: ClassService = Depends(get_class_service)):
    return service.list_class_types(active_only=False)


@admin_router.post("/class-types", response_model=ClassTypeResponse, status_code=201)
async def create_class_type(data: ClassTypeCreate, service: ClassService = Depends(get_class_service)):
    return service.create_class_type(data)


@admin_router.patch("/class-types/{class_type_id}", response_model=ClassTypeResponse)
async def update_class_type(
    class_type_id: str, data: ClassTypeUpdate, service: ClassService = Depends(get_class_service)
):
    return service.update_class_type(class_type_id, data)


@admin_router.delete("/class-types/{class_type_id}")
async def delete_class_type(class_type_id: str, service: ClassService = Depends(get_class_service)):
    return service.delete_class_type(class_type_id)


# ============================================================================
# ADMIN - INSTRUCTORS
# ============================================================================


@admin_router.get("/instructors", response_model=list[InstructorResponse])
async def admin_list_instructors(service: ClassService = Depends(get_class_service)):
    return service.list_instructors(active_only=False)


@admin_router.post("/instructors", response_model=InstructorResponse, status_code=201)
async def create_instructor(data: InstructorCreate, service: ClassService = Depends(get_class_service)):
    return service.create_instructor(data)


@admin_router.patch("/instructors/{instructor_id}", response_model=InstructorResponse)
async def update_instructor(
    instructor_id: str, data: InstructorUpdate, service: ClassService = Depends(get_class_service)
):
    return service.update_instructor(instructor_id, data)


@admin_router.delete("/instructors/{instructor_id}")
async def delete_instructor(instructor_id: str, service: ClassService = Depends(get_class_service)):
    return service.delete_instructor(instructor_id)


@admin_router.get("/instructors/{instructor_id}/stats", response_model=InstructorStatsResponse)
async def get_instructor_stats(instructor_id: str, service: ClassService = Depends(get_class_service)):
    return service.get_instructor_stats(instructor_id)


# ============================================================================
# ADMIN - WEEKLY TIMETABLE
# ============================================================================


@admin_router.get("/class-schedules", response_model=list[ScheduleSlotResponse])
async def list_schedule_slots(service: ClassService = Depends(get_class_service)):
    return service.list_schedule_slots()


@admin_router.post("/class-schedules", response_model=ScheduleSlotResponse, status_code=201)
async def create_schedule_slot(data: ScheduleSlotCreate, service: ClassService = Depends(get_class_service)):
    return service.create_schedule_slot(data)


@admin_router.patch("/class-schedules/{slot_id}", response_model=ScheduleSlotResponse)
async def update_schedule_slot(
    slot_id: str, data: ScheduleSlotUpdate, service: ClassService = Depends(get_class_service)
):
    return service.update_schedule_slot(slot_id, data)


@admin_router.delete("/class-schedules/{slot_id}")
async def delete_schedule_slot(slot_id: str, service: ClassService = Depends(get_class_service)):
    return service.delete_schedule_slot(slot_id)


# ============================================================================
# ADMIN - DATED CLASSES & BOOKINGS
# ============================================================================


@admin_router.get("/classes", response_model=list[ScheduledClassResponse])
async def list_scheduled_classes(
    status: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    instructor_id: Optional[str] = Query(None),
    service: ClassService = Depends(get_class_service),
):
    return service.list_scheduled_classes(status, start, end, instructor_id)


@admin_router.post("/classes", response_model=ScheduledClassResponse, status_code=201)
async def create_scheduled_class(data: ScheduledClassCreate, service: ClassService = Depends(get_class_service)):
    """End time defaults to start + class duration, capacity to the class type's"""
    return service.create_scheduled_class(data)


@admin_router.patch("/classes/{class_id}", response_model=ScheduledClassResponse)
async def update_scheduled_class(
    class_id: str, data: ScheduledClassUpdate, service: ClassService = Depends(get_class_service)
):
    return service.update_scheduled_class(class_id, data)


@admin_router.post("/classes/{class_id}/cancel", response_model=ScheduledClassResponse)
async def cancel_scheduled_class(
    class_id: str,
    background_tasks: BackgroundTasks,
    data: Optional[CancelClassRequest] = None,
    service: ClassService = Depends(get_class_service),
):
    return service.cancel_scheduled_class(class_id, data.reason if data else None, background_tasks)


@admin_router.get("/classes/{class_id}/bookings", response_model=list[ClassBookingResponse])
async def list_class_bookings(class_id: str, service: ClassService = Depends(get_class_service)):
    return service.list_class_bookings(class_id)


@admin_router.get("/classes/{class_id}/waitlist", response_model=list[WaitlistEntryResponse])
async def list_class_waitlist(class_id: str, service: ClassService = Depends(get_class_service)):
    return service.list_waitlist(class_id)


@admin_router.patch("/class-bookings/{booking_id}/status", response_model=ClassBookingResponse)
async def update_class_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    service: ClassService = Depends(get_class_service),
):
    return service.update_booking_status(booking_id, data, background_tasks)
