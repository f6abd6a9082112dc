"""Class service - catalogue, timetable, booking, waitlist and class administration"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from sqlalchemy.orm import Session

from ... import permissions
from ...email_service import (
    notify_class_booking,
    notify_class_cancelled,
    notify_waitlist_promoted,
    notify_waitlisted,
)
from ...models import (
    ClassBooking,
    ClassSchedule,
    ClassType,
    Instructor,
    ScheduledClass,
    User,
    WaitlistEntry,
)
from ...shared.dates import to_naive_utc, utcnow
from ...shared.db import commit_or_raise
from .repository import CONFIRMED, ClassRepository
from .schemas import (
    BookingStatusUpdate,
    ClassBookingCreate,
    ClassTypeCreate,
    ClassTypeUpdate,
    InstructorCreate,
    InstructorUpdate,
    ScheduledClassCreate,
    ScheduledClassUpdate,
    ScheduleSlotCreate,
    ScheduleSlotUpdate,
)

logger = logging.getLogger(__name__)


def describe_when(scheduled_class: ScheduledClass) -> str:
    return scheduled_class.start_time.strftime("%A %d %B %Y, %H:%M UTC")


def serialize_scheduled_class(scheduled_class: ScheduledClass) -> dict:
    class_type = scheduled_class.class_type
    return {
        "id": scheduled_class.id,
        "class_type_id": scheduled_class.class_type_id,
        "instructor_id": scheduled_class.instructor_id,
        "class_name": class_type.name if class_type else None,
        "instructor_name": scheduled_class.instructor.name if scheduled_class.instructor else None,
        "difficulty_level": class_type.difficulty_level if class_type else None,
        "price": class_type.price if class_type else None,
        "start_time": scheduled_class.start_time,
        "end_time": scheduled_class.end_time,
        "max_participants": scheduled_class.max_participants,
        "current_participants": scheduled_class.current_participants,
        "spots_left": scheduled_class.spots_left,
        "is_full": scheduled_class.spots_left == 0,
        "status": scheduled_class.status,
        "meeting_link": scheduled_class.meeting_link,
        "notes": scheduled_class.notes,
    }


def serialize_slot(slot: ClassSchedule) -> dict:
    return {
        "id": slot.id,
        "class_type_id": slot.class_type_id,
        "instructor_id": slot.instructor_id,
        "day_of_week": slot.day_of_week,
        "start_time": slot.start_time,
        "duration_minutes": slot.duration_minutes,
        "max_participants": slot.max_participants,
        "is_active": slot.is_active,
        "effective_from": slot.effective_from,
        "effective_until": slot.effective_until,
        "class_name": slot.class_type.name if slot.class_type else None,
        "instructor_name": slot.instructor.name if slot.instructor else None,
        "difficulty_level": slot.class_type.difficulty_level if slot.class_type else None,
    }


class ClassService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ClassRepository()

    # ========================================================================
    # CATALOGUE (public reads)
    # ========================================================================

    def list_class_types(self, active_only: bool = True) -> list[ClassType]:
        return self.repo.list_class_types(self.db, active_only)

    def list_instructors(self, active_only: bool = True) -> list[Instructor]:
        return self.repo.list_instructors(self.db, active_only)

    def get_weekly_schedule(self) -> list[dict]:
        return [serialize_slot(slot) for slot in self.repo.list_schedule_slots(self.db)]

    def list_upcoming(self, limit: int = 50) -> list[dict]:
        return [serialize_scheduled_class(c) for c in self.repo.list_upcoming(self.db, utcnow(), limit)]

    # ========================================================================
    # PARTICIPANT COUNTS & WAITLIST
    # ========================================================================

    def recount_participants(self, scheduled_class: ScheduledClass) -> int:
        """current_participants always mirrors the confirmed booking count"""
        self.db.flush()
        scheduled_class.current_participants = self.repo.count_confirmed(self.db, scheduled_class.id)
        return scheduled_class.current_participants

    def promote_from_waitlist(self, scheduled_class: ScheduledClass) -> Optional[ClassBooking]:
        """Move the head of the waitlist into a confirmed booking if a spot is free"""
        if scheduled_class.status != "scheduled":
            return None
        if scheduled_class.current_participants >= scheduled_class.max_participants:
            return None

        waitlist = self.repo.list_waitlist(self.db, scheduled_class.id)
        if not waitlist:
            return None

        head, rest = waitlist[0], waitlist[1:]
        booking = ClassBooking(
            user_id=head.user_id,
            scheduled_class_id=scheduled_class.id,
            first_name=head.first_name,
            last_name=head.last_name,
            email=head.email,
            phone=head.phone,
            booking_status=CONFIRMED,
        )
        self.db.add(booking)
        self.db.delete(head)
        for entry in rest:
            entry.position -= 1

        self.recount_participants(scheduled_class)
        logger.info(f"⬆️ Promoted {head.email} from waitlist for class {scheduled_class.id}")
        return booking

    def fill_from_waitlist(self, scheduled_class: ScheduledClass) -> list[ClassBooking]:
        """Hand every free spot to the waitlist, head first, before anyone new can claim it"""
        promoted = []
        booking = self.promote_from_waitlist(scheduled_class)
        while booking is not None:
            promoted.append(booking)
            booking = self.promote_from_waitlist(scheduled_class)
        return promoted

    # ========================================================================
    # BOOKING
    # ========================================================================

    def book_class(
        self,
        class_id: str,
        data: ClassBookingCreate,
        user: Optional[User],
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> dict:
        scheduled_class = self.repo.get_scheduled_class(self.db, class_id)
        if not scheduled_class:
            raise HTTPException(status_code=404, detail="Class not found")
        if scheduled_class.status != "scheduled":
            raise HTTPException(status_code=400, detail="This class is not open for booking")
        if scheduled_class.start_time <= utcnow():
            raise HTTPException(status_code=400, detail="This class has already started")

        if self.repo.find_active_booking(self.db, class_id, data.email):
            raise HTTPException(status_code=409, detail="You already have a booking for this class")

        class_name = scheduled_class.class_type.name
        self.recount_participants(scheduled_class)
        # Spots freed by attended/no_show go to the waitlist before any newcomer
        promoted = self.fill_from_waitlist(scheduled_class)
        own_promotion = next((b for b in promoted if b.email.lower() == data.email.lower()), None)
        if promoted:
            commit_or_raise(self.db, "promote from waitlist")
            for promoted_booking in promoted:
                self._queue_promotion_notice(promoted_booking, background_tasks)
        if own_promotion is not None:
            self.db.refresh(own_promotion)
            return {"status": "confirmed", "booking": own_promotion, "waitlist_entry": None}

        if scheduled_class.current_participants >= scheduled_class.max_participants:
            if self.repo.find_waitlist_entry(self.db, class_id, data.email):
                raise HTTPException(status_code=409, detail="You are already on the waitlist for this class")

            entry = WaitlistEntry(
                scheduled_class_id=class_id,
                user_id=user.id if user else None,
                position=self.repo.next_waitlist_position(self.db, class_id),
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                phone=data.phone,
            )
            self.db.add(entry)
            commit_or_raise(self.db, "join waitlist")
            self.db.refresh(entry)
            logger.info(f"⏳ {data.email} waitlisted for class {class_id} at position {entry.position}")

            if background_tasks is not None:
                background_tasks.add_task(
                    notify_waitlisted, entry.email, entry.first_name, class_name, describe_when(scheduled_class), entry.position
                )
            return {"status": "waitlisted", "booking": None, "waitlist_entry": entry}

        booking = ClassBooking(
            user_id=user.id if user else None,
            scheduled_class_id=class_id,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone,
            emergency_contact=data.emergency_contact,
            emergency_phone=data.emergency_phone,
            special_requests=data.special_requests or "",
            booking_status=CONFIRMED,
        )
        self.db.add(booking)
        self.recount_participants(scheduled_class)
        commit_or_raise(self.db, "book class")
        self.db.refresh(booking)
        logger.info(
            f"✅ Class {class_id} booked by {booking.email} "
            f"({scheduled_class.current_participants}/{scheduled_class.max_participants})"
        )

        if background_tasks is not None:
            background_tasks.add_task(
                notify_class_booking,
                booking.email,
                booking.first_name,
                class_name,
                scheduled_class.instructor.name,
                describe_when(scheduled_class),
            )
        return {"status": "confirmed", "booking": booking, "waitlist_entry": None}

    def _apply_cancellation(self, booking: ClassBooking, reason: Optional[str]) -> Optional[ClassBooking]:
        booking.booking_status = "cancelled"
        booking.cancelled_at = utcnow()
        booking.cancellation_reason = reason
        scheduled_class = booking.scheduled_class
        self.recount_participants(scheduled_class)
        return self.promote_from_waitlist(scheduled_class)

    def _queue_promotion_notice(self, promoted: Optional[ClassBooking], background_tasks: Optional[BackgroundTasks]):
        if promoted is None or background_tasks is None:
            return
        scheduled_class = promoted.scheduled_class
        background_tasks.add_task(
            notify_waitlist_promoted,
            promoted.email,
            promoted.first_name,
            scheduled_class.class_type.name,
            describe_when(scheduled_class),
        )

    def cancel_booking(
        self,
        booking_id: str,
        user: User,
        reason: Optional[str] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> dict:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

        is_owner = booking.user_id == user.id or (booking.email or "").lower() == (user.email or "").lower()
        if not is_owner and not permissions.is_admin(self.db, user):
            raise HTTPException(status_code=403, detail="You can only cancel your own bookings")
        if booking.booking_status == "cancelled":
            raise HTTPException(status_code=409, detail="Booking is already cancelled")

        promoted = self._apply_cancellation(booking, reason)
        commit_or_raise(self.db, "cancel booking")
        self.db.refresh(booking)
        if promoted is not None:
            self.db.refresh(promoted)
        logger.info(f"❌ Booking {booking_id} cancelled by {user.email}")

        self._queue_promotion_notice(promoted, background_tasks)
        return {"booking": booking, "promoted_booking": promoted}

    # ========================================================================
    # ADMIN - CLASS TYPES
    # ========================================================================

    def _get_class_type(self, class_type_id: str) -> ClassType:
        class_type = self.repo.get_class_type(self.db, class_type_id)
        if not class_type:
            raise HTTPException(status_code=404, detail="Class type not found")
        return class_type

    def create_class_type(self, data: ClassTypeCreate) -> ClassType:
        class_type = ClassType(**data.model_dump())
        self.db.add(class_type)
        commit_or_raise(self.db, "create class type")
        self.db.refresh(class_type)
        logger.info(f"🧘 Class type created: {class_type.name}")
        return class_type

    def update_class_type(self, class_type_id: str, data: ClassTypeUpdate) -> ClassType:
        class_type = self._get_class_type(class_type_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(class_type, key, value)
        commit_or_raise(self.db, "update class type")
        self.db.refresh(class_type)
        return class_type

    def delete_class_type(self, class_type_id: str) -> dict:
        class_type = self._get_class_type(class_type_id)
        in_use = self.db.query(ScheduledClass.id).filter(ScheduledClass.class_type_id == class_type_id).first()
        if in_use:
            raise HTTPException(
                status_code=409,
                detail="Class type has scheduled classes. Deactivate it instead of deleting.",
            )
        self.db.delete(class_type)
        commit_or_raise(self.db, "delete class type")
        return {"message": "Class type deleted"}

    # ========================================================================
    # ADMIN - INSTRUCTORS
    # ========================================================================

    def _get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self.repo.get_instructor(self.db, instructor_id)
        if not instructor:
            raise HTTPException(status_code=404, detail="Instructor not found")
        return instructor

    def create_instructor(self, data: InstructorCreate) -> Instructor:
        instructor = Instructor(**data.model_dump())
        self.db.add(instructor)
        commit_or_raise(self.db, "create instructor", conflict_detail="An instructor with this email already exists")
        self.db.refresh(instructor)
        logger.info(f"🧑‍🏫 Instructor created: {instructor.name}")
        return instructor

    def update_instructor(self, instructor_id: str, data: InstructorUpdate) -> Instructor:
        instructor = self._get_instructor(instructor_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None or key in ("bio", "phone", "certification", "avatar_url"):
                setattr(instructor, key, value)
        commit_or_raise(self.db, "update instructor", conflict_detail="An instructor with this email already exists")
        self.db.refresh(instructor)
        return instructor

    def delete_instructor(self, instructor_id: str) -> dict:
        instructor = self._get_instructor(instructor_id)
        if self.repo.count_instructor_classes(self.db, instructor_id) > 0:
            raise HTTPException(
                status_code=409,
                detail="Cannot delete instructor with scheduled classes. Deactivate them instead.",
            )
        self.db.delete(instructor)
        commit_or_raise(self.db, "delete instructor")
        logger.info(f"🗑️ Instructor {instructor_id} deleted")
        return {"message": "Instructor deleted"}

    def get_instructor_stats(self, instructor_id: str) -> dict:
        self._get_instructor(instructor_id)
        return {
            "instructor_id": instructor_id,
            "total_classes": self.repo.count_instructor_classes(self.db, instructor_id),
            "completed_classes": self.repo.count_instructor_classes(self.db, instructor_id, status="completed"),
            "upcoming_classes": self.repo.count_instructor_classes(
                self.db, instructor_id, status="scheduled", starting_after=utcnow()
            ),
            "total_students": self.repo.count_instructor_students(self.db, instructor_id),
        }

    # ========================================================================
    # ADMIN - WEEKLY TIMETABLE
    # ========================================================================

    def _get_slot(self, slot_id: str) -> ClassSchedule:
        slot = self.repo.get_schedule_slot(self.db, slot_id)
        if not slot:
            raise HTTPException(status_code=404, detail="Schedule slot not found")
        return slot

    def list_schedule_slots(self) -> list[dict]:
        return [serialize_slot(slot) for slot in self.repo.list_schedule_slots(self.db, active_only=False)]

    def create_schedule_slot(self, data: ScheduleSlotCreate) -> dict:
        self._get_class_type(data.class_type_id)
        self._get_instructor(data.instructor_id)
        slot = ClassSchedule(**data.model_dump())
        self.db.add(slot)
        commit_or_raise(self.db, "create schedule slot")
        self.db.refresh(slot)
        return serialize_slot(slot)

    def update_schedule_slot(self, slot_id: str, data: ScheduleSlotUpdate) -> dict:
        slot = self._get_slot(slot_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("class_type_id"):
            self._get_class_type(updates["class_type_id"])
        if updates.get("instructor_id"):
            self._get_instructor(updates["instructor_id"])
        for key, value in updates.items():
            if value is not None or key in ("effective_from", "effective_until"):
                setattr(slot, key, value)
        if slot.effective_from and slot.effective_until and slot.effective_until < slot.effective_from:
            raise HTTPException(status_code=400, detail="effective_until must not be before effective_from")
        commit_or_raise(self.db, "update schedule slot")
        self.db.refresh(slot)
        return serialize_slot(slot)

    def delete_schedule_slot(self, slot_id: str) -> dict:
        slot = self._get_slot(slot_id)
        self.db.delete(slot)
        commit_or_raise(self.db, "delete schedule slot")
        return {"message": "Schedule slot deleted"}

    # ========================================================================
    # ADMIN - DATED CLASSES
    # ========================================================================

    def _get_scheduled_class(self, class_id: str) -> ScheduledClass:
        scheduled_class = self.repo.get_scheduled_class(self.db, class_id)
        if not scheduled_class:
            raise HTTPException(status_code=404, detail="Class not found")
        return scheduled_class

    def list_scheduled_classes(self, status=None, start=None, end=None, instructor_id=None) -> list[dict]:
        classes = self.repo.list_scheduled_classes(
            self.db, status, to_naive_utc(start), to_naive_utc(end), instructor_id
        )
        return [serialize_scheduled_class(c) for c in classes]

    def create_scheduled_class(self, data: ScheduledClassCreate) -> dict:
        class_type = self._get_class_type(data.class_type_id)
        self._get_instructor(data.instructor_id)

        start_time = to_naive_utc(data.start_time)
        end_time = to_naive_utc(data.end_time) or start_time + timedelta(minutes=class_type.duration_minutes)
        if end_time <= start_time:
            raise HTTPException(status_code=400, detail="End time must be after start time")

        scheduled_class = ScheduledClass(
            class_type_id=class_type.id,
            instructor_id=data.instructor_id,
            start_time=start_time,
            end_time=end_time,
            max_participants=data.max_participants or class_type.max_participants,
            current_participants=0,
            status="scheduled",
            meeting_link=data.meeting_link,
            notes=data.notes,
        )
        self.db.add(scheduled_class)
        commit_or_raise(self.db, "schedule class")
        self.db.refresh(scheduled_class)
        logger.info(f"📅 Class {class_type.name} scheduled for {start_time.isoformat()}")
        return serialize_scheduled_class(scheduled_class)

    def update_scheduled_class(self, class_id: str, data: ScheduledClassUpdate) -> dict:
        scheduled_class = self._get_scheduled_class(class_id)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("instructor_id"):
            self._get_instructor(updates["instructor_id"])
        if "start_time" in updates:
            updates["start_time"] = to_naive_utc(updates["start_time"])
        if "end_time" in updates:
            updates["end_time"] = to_naive_utc(updates["end_time"])

        for key, value in updates.items():
            if value is not None or key in ("meeting_link", "notes"):
                setattr(scheduled_class, key, value)

        if scheduled_class.end_time <= scheduled_class.start_time:
            self.db.rollback()
            raise HTTPException(status_code=400, detail="End time must be after start time")

        confirmed = self.recount_participants(scheduled_class)
        if scheduled_class.max_participants < confirmed:
            self.db.rollback()
            raise HTTPException(
                status_code=409,
                detail=f"Class already has {confirmed} confirmed participants",
            )

        # A capacity increase can free several spots
        promoted_count = len(self.fill_from_waitlist(scheduled_class))
        commit_or_raise(self.db, "update class")
        self.db.refresh(scheduled_class)
        if promoted_count:
            logger.info(f"⬆️ Capacity change promoted {promoted_count} from the waitlist of class {class_id}")
        return serialize_scheduled_class(scheduled_class)

    def cancel_scheduled_class(
        self, class_id: str, reason: Optional[str] = None, background_tasks: Optional[BackgroundTasks] = None
    ) -> dict:
        scheduled_class = self._get_scheduled_class(class_id)
        if scheduled_class.status == "cancelled":
            raise HTTPException(status_code=409, detail="Class is already cancelled")
        if scheduled_class.status == "completed":
            raise HTTPException(status_code=400, detail="Completed classes cannot be cancelled")

        scheduled_class.status = "cancelled"
        if reason:
            scheduled_class.notes = f"{scheduled_class.notes}\n{reason}".strip() if scheduled_class.notes else reason
        commit_or_raise(self.db, "cancel class")
        self.db.refresh(scheduled_class)
        logger.info(f"🚫 Class {class_id} cancelled")

        if background_tasks is not None:
            for booking in self.repo.list_bookings(self.db, class_id):
                if booking.booking_status == CONFIRMED:
                    background_tasks.add_task(
                        notify_class_cancelled,
                        booking.email,
                        booking.first_name,
                        scheduled_class.class_type.name,
                        describe_when(scheduled_class),
                    )
        return serialize_scheduled_class(scheduled_class)

    def list_class_bookings(self, class_id: str) -> list[ClassBooking]:
        self._get_scheduled_class(class_id)
        return self.repo.list_bookings(self.db, class_id)

    def list_waitlist(self, class_id: str) -> list[WaitlistEntry]:
        self._get_scheduled_class(class_id)
        return self.repo.list_waitlist(self.db, class_id)

    def update_booking_status(
        self, booking_id: str, data: BookingStatusUpdate, background_tasks: Optional[BackgroundTasks] = None
    ) -> ClassBooking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

        if data.payment_status:
            booking.payment_status = data.payment_status

        promoted = None
        if data.booking_status and data.booking_status != booking.booking_status:
            if data.booking_status == "cancelled":
                promoted = self._apply_cancellation(booking, data.cancellation_reason)
            else:
                scheduled_class = booking.scheduled_class
                if data.booking_status == CONFIRMED:
                    self.recount_participants(scheduled_class)
                    if scheduled_class.current_participants >= scheduled_class.max_participants:
                        self.db.rollback()
                        raise HTTPException(status_code=409, detail="Class is full")
                    if self.repo.list_waitlist(self.db, scheduled_class.id):
                        self.db.rollback()
                        raise HTTPException(status_code=409, detail="Free spots belong to the waitlist first")
                    booking.cancelled_at = None
                    booking.cancellation_reason = None
                booking.booking_status = data.booking_status
                self.recount_participants(scheduled_class)

        commit_or_raise(self.db, "update booking status")
        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking_id} now {booking.booking_status}/{booking.payment_status}")
        self._queue_promotion_notice(promoted, background_tasks)
        return booking
