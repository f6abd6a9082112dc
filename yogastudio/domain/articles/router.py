"""Article router - public learning center and article management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from ...auth import require_article_manager
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_ratings, rate_limit_views
from .schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleStatsResponse,
    ArticleUpdate,
    ManagedArticleResponse,
    RatingRequest,
    RatingStatsResponse,
    ViewRequest,
    ViewResponse,
)
from .service import ArticleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["Articles"])
admin_router = APIRouter(prefix="/admin/articles", tags=["Articles Admin"])


def get_article_service(db: Session = Depends(get_db)) -> ArticleService:
    """Dependency injection for ArticleService"""
    return ArticleService(db)


# ============================================================================
# PUBLIC LEARNING CENTER
# ============================================================================


@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    category: Optional[str] = Query(None),
    sort_by: str = Query("latest"),
    limit: int = Query(50, ge=1, le=100),
    service: ArticleService = Depends(get_article_service),
):
    """Published articles with rating stats"""
    return service.list_articles(category, sort_by, limit)


@router.get("/categories", response_model=list[str])
async def list_categories(service: ArticleService = Depends(get_article_service)):
    return service.list_categories()


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    x_fingerprint: Optional[str] = Header(None),
    service: ArticleService = Depends(get_article_service),
):
    return service.get_article(article_id, x_fingerprint)


@router.post("/{article_id}/views", response_model=ViewResponse)
async def record_view(
    article_id: str,
    data: ViewRequest,
    service: ArticleService = Depends(get_article_service),
    _: None = Depends(rate_limit_views),
):
    return service.record_view(article_id, data.fingerprint)


@router.post("/{article_id}/ratings", response_model=RatingStatsResponse)
async def rate_article(
    article_id: str,
    data: RatingRequest,
    service: ArticleService = Depends(get_article_service),
    _: None = Depends(rate_limit_ratings),
):
    return service.rate_article(article_id, data.fingerprint, data.rating)


# ============================================================================
# MANAGEMENT
# ============================================================================


@admin_router.get("", response_model=list[ManagedArticleResponse])
async def list_managed_articles(
    status: Optional[str] = Query(None),
    current_user: User = Depends(require_article_manager),
    service: ArticleService = Depends(get_article_service),
):
    """Admins see every article, curators their own"""
    return service.list_managed(current_user, status)


@admin_router.post("", response_model=ManagedArticleResponse, status_code=201)
async def create_article(
    data: ArticleCreate,
    current_user: User = Depends(require_article_manager),
    service: ArticleService = Depends(get_article_service),
):
    return service.create_article(data, current_user)


@admin_router.patch("/{article_id}", response_model=ManagedArticleResponse)
async def update_article(
    article_id: str,
    data: ArticleUpdate,
    current_user: User = Depends(require_article_manager),
    service: ArticleService = Depends(get_article_service),
):
    return service.update_article(article_id, data, current_user)


@admin_router.delete("/{article_id}")
async def delete_article(
    article_id: str,
    current_user: User = Depends(require_article_manager),
    service: ArticleService = Depends(get_article_service),
):
    return service.delete_article(article_id, current_user)


@admin_router.get("/{article_id}/stats", response_model=ArticleStatsResponse)
async def get_article_stats(
    article_id: str,
    current_user: User = Depends(require_article_manager),
    service: ArticleService = Depends(get_article_service),
):
    return service.get_stats(article_id, current_user)
