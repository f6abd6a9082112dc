"""Class domain schemas - catalogue, timetable, dated classes and bookings"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import require_text, validate_email, validate_phone

DifficultyLevel = Literal["beginner", "intermediate", "advanced", "all_levels"]
ClassStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
BookingStatus = Literal["confirmed", "cancelled", "attended", "no_show"]
PaymentStatus = Literal["pending", "paid", "refunded", "failed"]


# ============================================================================
# CLASS TYPES
# ============================================================================


class ClassTypeCreate(BaseModel):
    name: str
    description: Optional[str] = None
    difficulty_level: DifficultyLevel = "beginner"
    price: Decimal = Field(default=Decimal("0"), ge=0)
    duration_minutes: int = Field(default=60, gt=0, le=480)
    max_participants: int = Field(default=20, gt=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name")


class ClassTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=480)
    max_participants: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name") if v is not None else v


class ClassTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    difficulty_level: Optional[str] = None
    price: Optional[Decimal] = None
    duration_minutes: int
    max_participants: int
    is_active: bool

    class Config:
        from_attributes = True


# ============================================================================
# INSTRUCTORS
# ============================================================================


class InstructorCreate(BaseModel):
    name: str
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specialties: list[str] = []
    experience_years: int = Field(default=0, ge=0)
    certification: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v) if v else None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else None


class InstructorUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specialties: Optional[list[str]] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    certification: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name") if v is not None else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v) if v else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v


class InstructorResponse(BaseModel):
    id: str
    name: str
    bio: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specialties: list[str]
    experience_years: Optional[int] = None
    certification: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class InstructorStatsResponse(BaseModel):
    instructor_id: str
    total_classes: int
    completed_classes: int
    upcoming_classes: int
    total_students: int


# ============================================================================
# WEEKLY TIMETABLE
# ============================================================================


class ScheduleSlotCreate(BaseModel):
    class_type_id: str
    instructor_id: str
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    duration_minutes: int = Field(default=60, gt=0, le=480)
    max_participants: int = Field(default=20, gt=0)
    is_active: bool = True
    effective_from: Optional[date] = None
    effective_until: Optional[date] = None

    @model_validator(mode="after")
    def validate_effective_range(self):
        if self.effective_from and self.effective_until and self.effective_until < self.effective_from:
            raise ValueError("effective_until must not be before effective_from")
        return self


class ScheduleSlotUpdate(BaseModel):
    class_type_id: Optional[str] = None
    instructor_id: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=480)
    max_participants: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    effective_from: Optional[date] = None
    effective_until: Optional[date] = None


class ScheduleSlotResponse(BaseModel):
    id: str
    class_type_id: str
    instructor_id: str
    day_of_week: int
    start_time: time
    duration_minutes: int
    max_participants: int
    is_active: bool
    effective_from: Optional[date] = None
    effective_until: Optional[date] = None
    class_name: Optional[str] = None
    instructor_name: Optional[str] = None
    difficulty_level: Optional[str] = None


# ============================================================================
# DATED CLASSES
# ============================================================================


class ScheduledClassCreate(BaseModel):
    class_type_id: str
    instructor_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    max_participants: Optional[int] = Field(default=None, gt=0)
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class ScheduledClassUpdate(BaseModel):
    instructor_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    max_participants: Optional[int] = Field(default=None, gt=0)
    status: Optional[ClassStatus] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class ScheduledClassResponse(BaseModel):
    id: str
    class_type_id: str
    instructor_id: str
    class_name: Optional[str] = None
    instructor_name: Optional[str] = None
    difficulty_level: Optional[str] = None
    price: Optional[Decimal] = None
    start_time: datetime
    end_time: datetime
    max_participants: int
    current_participants: int
    spots_left: int
    is_full: bool
    status: str
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class CancelClassRequest(BaseModel):
    reason: Optional[str] = None


# ============================================================================
# BOOKINGS & WAITLIST
# ============================================================================


class ClassBookingCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    special_requests: Optional[str] = ""

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v):
        return require_text(v, "First name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v):
        return require_text(v, "Last name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))

    @field_validator("phone", "emergency_phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v


class ClassBookingResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    scheduled_class_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    special_requests: Optional[str] = None
    payment_status: str
    booking_status: str
    booking_date: datetime
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    class Config:
        from_attributes = True


class WaitlistEntryResponse(BaseModel):
    id: str
    scheduled_class_id: str
    user_id: Optional[str] = None
    position: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BookClassResponse(BaseModel):
    status: Literal["confirmed", "waitlisted"]
    booking: Optional[ClassBookingResponse] = None
    waitlist_entry: Optional[WaitlistEntryResponse] = None


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None


class CancelBookingResponse(BaseModel):
    booking: ClassBookingResponse
    promoted_booking: Optional[ClassBookingResponse] = None


class BookingStatusUpdate(BaseModel):
    booking_status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    cancellation_reason: Optional[str] = None

    @model_validator(mode="after")
    def require_change(self):
        if self.booking_status is None and self.payment_status is None:
            raise ValueError("booking_status or payment_status is required")
        return self
