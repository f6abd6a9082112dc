"""Newsletter schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import require_text, validate_email


class SubscribeRequest(BaseModel):
    email: str
    name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))


class UnsubscribeRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(require_text(v, "Email"))


class SubscriberResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    status: str
    subscribed_at: datetime
    unsubscribed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionResult(BaseModel):
    message: str
    subscriber: SubscriberResponse


class NewsletterCreate(BaseModel):
    title: str
    subject: str
    content: str

    @field_validator("title", "subject", "content")
    @classmethod
    def validate_required(cls, v, info):
        return require_text(v, info.field_name.capitalize())


class NewsletterUpdate(BaseModel):
    title: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title", "subject", "content")
    @classmethod
    def validate_not_blank(cls, v, info):
        return require_text(v, info.field_name.capitalize()) if v is not None else v


class NewsletterResponse(BaseModel):
    id: str
    title: str
    subject: str
    content: str
    status: str
    sent_at: Optional[datetime] = None
    recipient_count: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
