from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel


class DashboardMetric(BaseModel):
    metric: str
    value: Union[int, float]
    type: Literal["count", "currency", "percentage"]
    last_updated: datetime


class UserEngagement(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    total_bookings: int
    attended_classes: int
    articles_viewed: int
    last_activity: datetime
    engagement_status: Literal["active", "inactive", "dormant"]
