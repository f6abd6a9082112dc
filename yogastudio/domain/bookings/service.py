"""Booking service - booking form intake and admin booking management"""

import csv
import logging
from datetime import datetime
from io import StringIO
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...email_service import notify_class_booking
from ...models import Booking, User
from ...shared.db import commit_or_raise
from ...utils.sanitization import sanitize_dict
from .repository import BookingRepository
from .schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "class_name",
    "instructor",
    "class_date",
    "class_time",
    "first_name",
    "last_name",
    "email",
    "phone",
    "experience_level",
    "emergency_contact",
    "emergency_phone",
    "status",
)


class BookingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def create_booking(
        self,
        data: BookingCreate,
        user: Optional[User] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> Booking:
        """Store the booking and mirror it into the form submission inbox"""
        logger.info(f"📥 Booking request for {data.class_name} on {data.class_date} from {data.email}")
        booking_data = data.model_dump()
        booking_data["special_requests"] = booking_data.get("special_requests") or ""

        booking = self.repo.create_booking(
            self.db, user_id=user.id if user else None, status="confirmed", **booking_data
        )
        self.repo.add_form_submission(
            self.db,
            type="booking",
            data=sanitize_dict(data.model_dump(mode="json")),
            user_email=data.email,
            user_name=f"{data.first_name} {data.last_name}",
            user_phone=data.phone,
        )
        commit_or_raise(self.db, "create booking")
        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking.id} confirmed")

        if background_tasks is not None:
            background_tasks.add_task(
                notify_class_booking,
                booking.email,
                booking.first_name,
                booking.class_name,
                booking.instructor,
                f"{booking.class_date.isoformat()} {booking.class_time}",
            )
        return booking

    # ========================================================================
    # ADMIN
    # ========================================================================

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking

    def list_bookings(self, status: Optional[str] = None, search: Optional[str] = None) -> list[Booking]:
        return self.repo.search_bookings(self.db, status, search)

    def update_booking(self, booking_id: str, data: BookingUpdate) -> Booking:
        booking = self.get_booking(booking_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(booking, key, value)
        commit_or_raise(self.db, "update booking")
        self.db.refresh(booking)
        return booking

    def update_status(self, booking_id: str, status: str) -> Booking:
        booking = self.get_booking(booking_id)
        old_status = booking.status
        booking.status = status
        commit_or_raise(self.db, "update booking status")
        self.db.refresh(booking)
        logger.info(f"🔄 Booking {booking_id} status {old_status} -> {status}")
        return booking

    def delete_booking(self, booking_id: str) -> dict:
        booking = self.get_booking(booking_id)
        self.db.delete(booking)
        commit_or_raise(self.db, "delete booking")
        logger.info(f"🗑️ Booking {booking_id} deleted")
        return {"message": "Booking deleted"}

    def export_bookings_csv(self, status: Optional[str] = None, search: Optional[str] = None) -> StreamingResponse:
        """Export bookings as CSV"""
        try:
            bookings = self.repo.search_bookings(self.db, status, search)
            logger.info(f"📊 Exporting {len(bookings)} bookings to CSV")

            output = StringIO()
            writer = csv.writer(output)
            writer.writerow(
                [
                    "ID",
                    "Class",
                    "Instructor",
                    "Date",
                    "Time",
                    "First Name",
                    "Last Name",
                    "Email",
                    "Phone",
                    "Experience",
                    "Emergency Contact",
                    "Emergency Phone",
                    "Special Requests",
                    "Status",
                    "Created At",
                ]
            )
            for b in bookings:
                writer.writerow(
                    [
                        b.id,
                        b.class_name,
                        b.instructor,
                        b.class_date.isoformat() if b.class_date else "",
                        b.class_time,
                        b.first_name,
                        b.last_name,
                        b.email,
                        b.phone,
                        b.experience_level,
                        b.emergency_contact,
                        b.emergency_phone,
                        b.special_requests or "",
                        b.status,
                        b.created_at.strftime("%Y-%m-%d %H:%M:%S") if b.created_at else "",
                    ]
                )

            output.seek(0)
            filename = f"bookings_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
            logger.info(f"✅ CSV export successful: {filename}")

            return StreamingResponse(
                iter([output.getvalue()]),
                media_type="text/csv",
                headers={
                    "Content-Disposition": f"attachment; filename={filename}",
                    "Cache-Control": "no-cache",
                },
            )
        except Exception as e:
            logger.error(f"❌ CSV export failed: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to export bookings. Please try again.") from e
