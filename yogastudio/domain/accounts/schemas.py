"""Account schemas - profiles, roles and the caller's identity"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_phone


class UserSummary(BaseModel):
    id: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Full name cannot be blank")
        return v.strip() if v else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v


class MeResponse(BaseModel):
    user: UserSummary
    profile: Optional[ProfileResponse] = None
    roles: list[str]
    highest_role: str
    is_admin: bool
    is_curator: bool


class BookingActivity(BaseModel):
    id: str
    class_name: str
    instructor: str
    class_date: date
    class_time: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ClassBookingActivity(BaseModel):
    id: str
    scheduled_class_id: str
    class_name: Optional[str] = None
    start_time: Optional[datetime] = None
    booking_status: str
    payment_status: str
    created_at: datetime


class QueryActivity(BaseModel):
    id: str
    subject: str
    category: str
    status: str
    response: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityResponse(BaseModel):
    bookings: list[BookingActivity]
    class_bookings: list[ClassBookingActivity]
    queries: list[QueryActivity]


class AdminUserResponse(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    roles: list[str]
    highest_role: str


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class RoleUpdateRequest(BaseModel):
    roles: list[str]

    @field_validator("roles")
    @classmethod
    def normalize_roles(cls, v):
        # Order-preserving de-duplication
        return list(dict.fromkeys(name.strip() for name in v if name and name.strip()))


class RoleUpdateResponse(BaseModel):
    user_id: str
    roles: list[str]
    highest_role: str


class RoleChangeResponse(BaseModel):
    id: str
    user_id: str
    changed_by: Optional[str] = None
    old_roles: list[str]
    new_roles: list[str]
    created_at: datetime

    class Config:
        from_attributes = True
