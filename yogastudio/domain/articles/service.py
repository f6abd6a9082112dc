"""Article service - learning center reads, ratings, views and curation"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import permissions
from ...models import Article, Rating, User
from ...shared.dates import utcnow
from ...shared.db import commit_or_raise
from ...utils.sanitization import sanitize_html
from .repository import PUBLISHED, ArticleRepository
from .schemas import ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)

SORT_OPTIONS = ("latest", "popular", "highest_rated")


def round_rating(value) -> float:
    return round(float(value), 1) if value is not None else 0.0


def serialize_article(article: Article, avg_rating=None, total_ratings=0, user_rating=None) -> dict:
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "preview_text": article.preview_text,
        "image_url": article.image_url,
        "video_url": article.video_url,
        "category": article.category,
        "tags": article.tags or [],
        "status": article.status,
        "view_count": article.view_count,
        "author_id": article.author_id,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
        "published_at": article.published_at,
        "average_rating": round_rating(avg_rating),
        "total_ratings": total_ratings or 0,
        "user_rating": user_rating,
    }


class ArticleService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ArticleRepository()

    # ========================================================================
    # PUBLIC
    # ========================================================================

    def list_articles(self, category: Optional[str] = None, sort_by: str = "latest", limit: int = 50) -> list[dict]:
        if sort_by not in SORT_OPTIONS:
            raise HTTPException(
                status_code=400, detail=f"sort_by must be one of: {', '.join(SORT_OPTIONS)}"
            )
        if category == "all":
            category = None

        rows = self.repo.list_published_with_stats(self.db, category, sort_by, limit)
        return [serialize_article(article, avg, count) for article, avg, count in rows]

    def list_categories(self) -> list[str]:
        return self.repo.list_categories(self.db)

    def _get_published(self, article_id: str) -> Article:
        article = self.repo.get_published_article(self.db, article_id)
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        return article

    def get_article(self, article_id: str, fingerprint: Optional[str] = None) -> dict:
        article = self._get_published(article_id)
        avg, count = self.repo.get_rating_stats(self.db, article_id)
        user_rating = None
        if fingerprint:
            rating = self.repo.get_rating(self.db, article_id, fingerprint)
            user_rating = rating.rating if rating else None
        return serialize_article(article, avg, count, user_rating)

    def record_view(self, article_id: str, fingerprint: str) -> dict:
        """Store a view and recount view_count from the view rows"""
        article = self._get_published(article_id)
        self.repo.add_view(self.db, article.id, fingerprint)
        article.view_count = self.repo.count_views(self.db, article.id)
        commit_or_raise(self.db, "record article view")
        return {"article_id": article.id, "view_count": article.view_count}

    def rate_article(self, article_id: str, fingerprint: str, value: int) -> dict:
        """Insert or replace the rating given by `fingerprint`"""
        article = self._get_published(article_id)
        rating = self.repo.get_rating(self.db, article.id, fingerprint)
        if rating:
            rating.rating = value
        else:
            self.db.add(Rating(article_id=article.id, fingerprint=fingerprint, rating=value))
        commit_or_raise(self.db, "save rating", conflict_detail="Rating already recorded, please retry")

        avg, count = self.repo.get_rating_stats(self.db, article.id)
        logger.info(f"⭐ Article {article.id} rated {value} (now {round_rating(avg)} from {count})")
        return {
            "article_id": article.id,
            "average_rating": round_rating(avg),
            "total_ratings": count,
            "user_rating": value,
        }

    # ========================================================================
    # MANAGEMENT (admins and curators)
    # ========================================================================

    def _get_managed(self, article_id: str, user: User) -> Article:
        article = self.repo.get_article(self.db, article_id)
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        if not permissions.can_manage_article(self.db, user, article):
            raise HTTPException(status_code=403, detail="You can only manage your own articles")
        return article

    def list_managed(self, user: User, status: Optional[str] = None) -> list[Article]:
        author_id = None if permissions.is_admin(self.db, user) else user.id
        return self.repo.list_for_manager(self.db, author_id, status)

    def create_article(self, data: ArticleCreate, user: User) -> Article:
        values = data.model_dump()
        values["content"] = sanitize_html(values["content"])
        article = Article(**values, author_id=user.id)
        if article.status == PUBLISHED:
            article.published_at = utcnow()
        self.db.add(article)
        commit_or_raise(self.db, "create article")
        self.db.refresh(article)
        logger.info(f"📝 Article '{article.title}' created by {user.email} ({article.status})")
        return article

    def update_article(self, article_id: str, data: ArticleUpdate, user: User) -> Article:
        article = self._get_managed(article_id, user)
        updates = data.model_dump(exclude_unset=True)
        if "content" in updates:
            updates["content"] = sanitize_html(updates["content"])
        for key, value in updates.items():
            if value is None and key in ("title", "content", "preview_text", "category", "tags", "status"):
                continue
            setattr(article, key, value)

        # published_at marks the first publication only
        if article.status == PUBLISHED and article.published_at is None:
            article.published_at = utcnow()

        commit_or_raise(self.db, "update article")
        self.db.refresh(article)
        return article

    def delete_article(self, article_id: str, user: User) -> dict:
        article = self._get_managed(article_id, user)
        self.db.delete(article)
        commit_or_raise(self.db, "delete article")
        logger.info(f"🗑️ Article {article_id} deleted by {user.email}")
        return {"message": "Article deleted"}

    def get_stats(self, article_id: str, user: User) -> dict:
        article = self._get_managed(article_id, user)
        avg, count = self.repo.get_rating_stats(self.db, article.id)
        distribution = self.repo.get_rating_distribution(self.db, article.id)
        return {
            "article_id": article.id,
            "views": self.repo.count_views(self.db, article.id),
            "unique_viewers": self.repo.count_unique_viewers(self.db, article.id),
            "total_ratings": count,
            "average_rating": round_rating(avg),
            "rating_distribution": {str(i): distribution.get(i, 0) for i in range(1, 6)},
        }
