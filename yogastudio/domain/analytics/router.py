from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import DashboardMetric, UserEngagement
from .service import AnalyticsService

admin_router = APIRouter(prefix="/admin/dashboard", tags=["Dashboard"], dependencies=[Depends(require_admin)])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@admin_router.get("/metrics", response_model=list[DashboardMetric])
async def get_dashboard_metrics(service: AnalyticsService = Depends(get_analytics_service)):
    return service.get_metrics()


@admin_router.get("/engagement", response_model=list[UserEngagement])
async def get_user_engagement(service: AnalyticsService = Depends(get_analytics_service)):
    return service.get_engagement()
