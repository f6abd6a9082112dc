from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class SettingResponse(BaseModel):
    key: str
    value: Any = None
    description: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    settings: dict[str, Any]

    @field_validator("settings")
    @classmethod
    def validate_keys(cls, v):
        for key in v:
            if not key or not key.strip() or len(key) > 100:
                raise ValueError("Setting keys must be 1-100 characters")
        return v
