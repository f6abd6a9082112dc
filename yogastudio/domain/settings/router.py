import logging
from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...config import SETTINGS_CACHE_TTL
from ...database import get_db
from ...models import User
from .schemas import SettingResponse, SettingsUpdate
from .service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settings"])


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


@router.get("/settings/public", response_model=dict[str, Any])
async def get_public_settings(
    response: Response,
    service: SettingsService = Depends(get_settings_service),
):
    response.headers["Cache-Control"] = f"public, max-age={SETTINGS_CACHE_TTL}"
    return service.get_public_settings()


@router.get("/admin/settings", response_model=list[SettingResponse])
async def list_settings(
    _admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    return service.list_settings()


@router.put("/admin/settings", response_model=dict[str, Any])
async def update_settings(
    data: SettingsUpdate,
    admin: User = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    """Bulk upsert; returns the full settings map"""
    return service.update_settings(data.settings, admin)
