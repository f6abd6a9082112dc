"""Class repository - class types, instructors, timetable, dated classes and their bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import (
    ClassBooking,
    ClassSchedule,
    ClassType,
    Instructor,
    ScheduledClass,
    WaitlistEntry,
)

CONFIRMED = "confirmed"


class ClassRepository:
    # Class types

    @staticmethod
    def list_class_types(db: Session, active_only: bool = True) -> list[ClassType]:
        query = db.query(ClassType)
        if active_only:
            query = query.filter(ClassType.is_active.is_(True))
        return query.order_by(ClassType.name).all()

    @staticmethod
    def get_class_type(db: Session, class_type_id: str) -> Optional[ClassType]:
        return db.query(ClassType).filter(ClassType.id == class_type_id).first()

    # Instructors

    @staticmethod
    def list_instructors(db: Session, active_only: bool = True) -> list[Instructor]:
        query = db.query(Instructor)
        if active_only:
            query = query.filter(Instructor.is_active.is_(True))
        return query.order_by(Instructor.name).all()

    @staticmethod
    def get_instructor(db: Session, instructor_id: str) -> Optional[Instructor]:
        return db.query(Instructor).filter(Instructor.id == instructor_id).first()

    @staticmethod
    def count_instructor_classes(db: Session, instructor_id: str, status: Optional[str] = None, starting_after: Optional[datetime] = None) -> int:
        query = db.query(func.count(ScheduledClass.id)).filter(ScheduledClass.instructor_id == instructor_id)
        if status:
            query = query.filter(ScheduledClass.status == status)
        if starting_after:
            query = query.filter(ScheduledClass.start_time >= starting_after)
        return query.scalar() or 0

    @staticmethod
    def count_instructor_students(db: Session, instructor_id: str) -> int:
        return (
            db.query(func.count(ClassBooking.id))
            .join(ScheduledClass, ScheduledClass.id == ClassBooking.scheduled_class_id)
            .filter(
                ScheduledClass.instructor_id == instructor_id,
                ClassBooking.booking_status.in_([CONFIRMED, "attended"]),
            )
            .scalar()
            or 0
        )

    # Weekly timetable

    @staticmethod
    def list_schedule_slots(db: Session, active_only: bool = True) -> list[ClassSchedule]:
        query = db.query(ClassSchedule).options(
            joinedload(ClassSchedule.class_type), joinedload(ClassSchedule.instructor)
        )
        if active_only:
            query = query.filter(ClassSchedule.is_active.is_(True))
        return query.order_by(ClassSchedule.day_of_week, ClassSchedule.start_time).all()

    @staticmethod
    def get_schedule_slot(db: Session, slot_id: str) -> Optional[ClassSchedule]:
        return db.query(ClassSchedule).filter(ClassSchedule.id == slot_id).first()

    # Dated classes

    @staticmethod
    def get_scheduled_class(db: Session, class_id: str) -> Optional[ScheduledClass]:
        return db.query(ScheduledClass).filter(ScheduledClass.id == class_id).first()

    @staticmethod
    def list_upcoming(db: Session, now: datetime, limit: int) -> list[ScheduledClass]:
        return (
            db.query(ScheduledClass)
            .options(joinedload(ScheduledClass.class_type), joinedload(ScheduledClass.instructor))
            .filter(ScheduledClass.status == "scheduled", ScheduledClass.start_time >= now)
            .order_by(ScheduledClass.start_time)
            .limit(limit)
            .all()
        )

    @staticmethod
    def list_scheduled_classes(
        db: Session,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        instructor_id: Optional[str] = None,
    ) -> list[ScheduledClass]:
        query = db.query(ScheduledClass).options(
            joinedload(ScheduledClass.class_type), joinedload(ScheduledClass.instructor)
        )
        if status:
            query = query.filter(ScheduledClass.status == status)
        if start:
            query = query.filter(ScheduledClass.start_time >= start)
        if end:
            query = query.filter(ScheduledClass.start_time < end)
        if instructor_id:
            query = query.filter(ScheduledClass.instructor_id == instructor_id)
        return query.order_by(ScheduledClass.start_time).all()

    @staticmethod
    def count_confirmed(db: Session, class_id: str) -> int:
        return (
            db.query(func.count(ClassBooking.id))
            .filter(ClassBooking.scheduled_class_id == class_id, ClassBooking.booking_status == CONFIRMED)
            .scalar()
            or 0
        )

    # Bookings

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[ClassBooking]:
        return db.query(ClassBooking).filter(ClassBooking.id == booking_id).first()

    @staticmethod
    def list_bookings(db: Session, class_id: str) -> list[ClassBooking]:
        return (
            db.query(ClassBooking)
            .filter(ClassBooking.scheduled_class_id == class_id)
            .order_by(ClassBooking.booking_date)
            .all()
        )

    @staticmethod
    def find_active_booking(db: Session, class_id: str, email: str) -> Optional[ClassBooking]:
        return (
            db.query(ClassBooking)
            .filter(
                ClassBooking.scheduled_class_id == class_id,
                func.lower(ClassBooking.email) == email.lower(),
                ClassBooking.booking_status == CONFIRMED,
            )
            .first()
        )

    # Waitlist

    @staticmethod
    def list_waitlist(db: Session, class_id: str) -> list[WaitlistEntry]:
        return (
            db.query(WaitlistEntry)
            .filter(WaitlistEntry.scheduled_class_id == class_id)
            .order_by(WaitlistEntry.position)
            .all()
        )

    @staticmethod
    def find_waitlist_entry(db: Session, class_id: str, email: str) -> Optional[WaitlistEntry]:
        return (
            db.query(WaitlistEntry)
            .filter(
                WaitlistEntry.scheduled_class_id == class_id,
                func.lower(WaitlistEntry.email) == email.lower(),
            )
            .first()
        )

    @staticmethod
    def next_waitlist_position(db: Session, class_id: str) -> int:
        current = (
            db.query(func.max(WaitlistEntry.position))
            .filter(WaitlistEntry.scheduled_class_id == class_id)
            .scalar()
        )
        return (current or 0) + 1
