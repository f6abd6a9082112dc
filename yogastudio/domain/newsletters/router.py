"""Newsletter router - public sign-up and admin newsletter management"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_public_forms
from .schemas import (
    NewsletterCreate,
    NewsletterResponse,
    NewsletterUpdate,
    SubscribeRequest,
    SubscriberResponse,
    SubscriptionResult,
    UnsubscribeRequest,
)
from .service import NewsletterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["Newsletter"])
admin_router = APIRouter(prefix="/admin", tags=["Newsletter Admin"])


def get_newsletter_service(db: Session = Depends(get_db)) -> NewsletterService:
    """Dependency injection for NewsletterService"""
    return NewsletterService(db)


@router.post("/subscribe", response_model=SubscriptionResult, status_code=201)
async def subscribe(
    data: SubscribeRequest,
    service: NewsletterService = Depends(get_newsletter_service),
    _: None = Depends(rate_limit_public_forms),
):
    return service.subscribe(data.email, data.name)


@router.post("/unsubscribe", response_model=SubscriptionResult)
async def unsubscribe(
    data: UnsubscribeRequest,
    service: NewsletterService = Depends(get_newsletter_service),
    _: None = Depends(rate_limit_public_forms),
):
    return service.unsubscribe(data.email)


# ============================================================================
# ADMIN
# ============================================================================


@admin_router.get("/newsletter/subscribers", response_model=list[SubscriberResponse])
async def list_subscribers(
    status: Optional[str] = Query(None),
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.list_subscribers(status)


@admin_router.get("/newsletters", response_model=list[NewsletterResponse])
async def list_newsletters(
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.list_newsletters()


@admin_router.post("/newsletters", response_model=NewsletterResponse, status_code=201)
async def create_newsletter(
    data: NewsletterCreate,
    admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.create_newsletter(data, admin)


@admin_router.get("/newsletters/{newsletter_id}", response_model=NewsletterResponse)
async def get_newsletter(
    newsletter_id: str,
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.get_newsletter(newsletter_id)


@admin_router.patch("/newsletters/{newsletter_id}", response_model=NewsletterResponse)
async def update_newsletter(
    newsletter_id: str,
    data: NewsletterUpdate,
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.update_newsletter(newsletter_id, data)


@admin_router.delete("/newsletters/{newsletter_id}")
async def delete_newsletter(
    newsletter_id: str,
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.delete_newsletter(newsletter_id)


@admin_router.post("/newsletters/{newsletter_id}/send", response_model=NewsletterResponse)
async def send_newsletter(
    newsletter_id: str,
    background_tasks: BackgroundTasks,
    _admin: User = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
):
    return service.send_newsletter(newsletter_id, background_tasks)
