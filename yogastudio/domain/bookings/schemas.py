"""Booking schemas - the public class booking form"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import require_text, validate_email, validate_phone

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class BookingCreate(BaseModel):
    class_name: str
    instructor: str
    class_date: date
    class_time: str
    first_name: str
    last_name: str
    email: str
    phone: str
    experience_level: ExperienceLevel = "beginner"
    special_requests: Optional[str] = ""
    emergency_contact: str
    emergency_phone: str

    @field_validator("class_name", "instructor", "class_time", "first_name", "last_name", "emergency_contact")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))

    @field_validator("phone", "emergency_phone")
    @classmethod
    def validate_phone(cls, v, info):
        return validate_phone(require_text(v, info.field_name.replace("_", " ").capitalize()))


class BookingUpdate(BaseModel):
    class_name: Optional[str] = None
    instructor: Optional[str] = None
    class_date: Optional[date] = None
    class_time: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    experience_level: Optional[ExperienceLevel] = None
    special_requests: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    status: Optional[BookingStatus] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v) if v else v

    @field_validator("phone", "emergency_phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    class_name: str
    instructor: str
    class_date: date
    class_time: str
    first_name: str
    last_name: str
    email: str
    phone: str
    experience_level: str
    special_requests: Optional[str] = None
    emergency_contact: str
    emergency_phone: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
