"""Booking repository - bookings made through the public booking form"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Booking, FormSubmission


class BookingRepository:
    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        return booking

    @staticmethod
    def add_form_submission(db: Session, **submission_data) -> FormSubmission:
        submission = FormSubmission(**submission_data)
        db.add(submission)
        return submission

    @staticmethod
    def get_booking(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def search_bookings(db: Session, status: Optional[str] = None, search: Optional[str] = None) -> list[Booking]:
        """Bookings newest first, optionally filtered by status and free text"""
        query = db.query(Booking)
        if status and status != "all":
            query = query.filter(Booking.status == status)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Booking.first_name.ilike(term),
                    Booking.last_name.ilike(term),
                    Booking.email.ilike(term),
                    Booking.class_name.ilike(term),
                    Booking.instructor.ilike(term),
                )
            )
        return query.order_by(Booking.created_at.desc()).all()
