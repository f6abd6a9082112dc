"""Inquiry schemas - public question, contact and corporate forms"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import require_text, validate_email, validate_phone

SubmissionType = Literal["booking", "query", "contact", "corporate"]
SubmissionStatus = Literal["new", "in_progress", "completed", "rejected"]
QueryStatus = Literal["pending", "responded", "closed"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]


class YogaQueryCreate(BaseModel):
    name: str
    email: str
    subject: str
    category: str = "general"
    message: str = Field(max_length=5000)
    experience_level: ExperienceLevel = "beginner"

    @field_validator("name", "subject", "message")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.capitalize())

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))


class YogaQueryResponse(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    category: str
    message: str
    experience_level: str
    status: str
    response: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class QueryRespondRequest(BaseModel):
    response: str

    @field_validator("response")
    @classmethod
    def validate_response(cls, v):
        return require_text(v, "Response")


class QueryStatusUpdate(BaseModel):
    status: QueryStatus


class ContactMessageCreate(BaseModel):
    name: str
    email: str
    phone: Optional[str] = ""
    subject: str
    message: str = Field(max_length=5000)

    @field_validator("name", "subject", "message")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.capitalize())

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else ""


class ContactMessageResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ContactStatusUpdate(BaseModel):
    status: SubmissionStatus


class CorporateInquiryCreate(BaseModel):
    company_name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    employee_count: Optional[int] = Field(default=None, gt=0)
    program_interest: Optional[str] = None
    preferred_format: Optional[Literal["on_site", "online", "hybrid"]] = None
    message: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("company_name", "contact_name")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v


class FormSubmissionResponse(BaseModel):
    id: str
    type: str
    data: dict[str, Any]
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    user_phone: Optional[str] = None
    status: str
    notes: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionStatusUpdate(BaseModel):
    status: SubmissionStatus
    notes: Optional[str] = None
