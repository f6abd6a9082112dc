"""Article repository - articles, ratings and views"""

from typing import Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from ...models import Article, ArticleView, Rating

PUBLISHED = "published"


def _rating_stats_subquery(db: Session):
    return (
        db.query(
            Rating.article_id.label("article_id"),
            func.avg(Rating.rating).label("avg_rating"),
            func.count(Rating.id).label("rating_count"),
        )
        .group_by(Rating.article_id)
        .subquery()
    )


class ArticleRepository:
    @staticmethod
    def list_published_with_stats(
        db: Session, category: Optional[str], sort_by: str, limit: int
    ) -> list[tuple[Article, Optional[float], Optional[int]]]:
        stats = _rating_stats_subquery(db)
        avg_rating = func.coalesce(stats.c.avg_rating, 0)
        rating_count = func.coalesce(stats.c.rating_count, 0)

        query = (
            db.query(Article, stats.c.avg_rating, stats.c.rating_count)
            .outerjoin(stats, stats.c.article_id == Article.id)
            .filter(Article.status == PUBLISHED)
        )
        if category:
            query = query.filter(Article.category == category)

        if sort_by == "popular":
            query = query.order_by(Article.view_count.desc(), Article.published_at.desc())
        elif sort_by == "highest_rated":
            query = query.order_by(avg_rating.desc(), rating_count.desc(), Article.published_at.desc())
        else:
            query = query.order_by(Article.published_at.desc())

        return query.limit(limit).all()

    @staticmethod
    def list_categories(db: Session) -> list[str]:
        rows = (
            db.query(distinct(Article.category))
            .filter(Article.status == PUBLISHED)
            .order_by(Article.category)
            .all()
        )
        return [row[0] for row in rows if row[0]]

    @staticmethod
    def get_article(db: Session, article_id: str) -> Optional[Article]:
        return db.query(Article).filter(Article.id == article_id).first()

    @staticmethod
    def get_published_article(db: Session, article_id: str) -> Optional[Article]:
        return (
            db.query(Article)
            .filter(Article.id == article_id, Article.status == PUBLISHED)
            .first()
        )

    @staticmethod
    def list_for_manager(db: Session, author_id: Optional[str] = None, status: Optional[str] = None) -> list[Article]:
        """All articles, or only those by `author_id` when given"""
        query = db.query(Article)
        if author_id:
            query = query.filter(Article.author_id == author_id)
        if status:
            query = query.filter(Article.status == status)
        return query.order_by(Article.created_at.desc()).all()

    # Ratings

    @staticmethod
    def get_rating_stats(db: Session, article_id: str) -> tuple[Optional[float], int]:
        avg_rating, count = (
            db.query(func.avg(Rating.rating), func.count(Rating.id))
            .filter(Rating.article_id == article_id)
            .one()
        )
        return avg_rating, count or 0

    @staticmethod
    def get_rating(db: Session, article_id: str, fingerprint: str) -> Optional[Rating]:
        return (
            db.query(Rating)
            .filter(Rating.article_id == article_id, Rating.fingerprint == fingerprint)
            .first()
        )

    @staticmethod
    def get_rating_distribution(db: Session, article_id: str) -> dict[int, int]:
        rows = (
            db.query(Rating.rating, func.count(Rating.id))
            .filter(Rating.article_id == article_id)
            .group_by(Rating.rating)
            .all()
        )
        return {int(value): count for value, count in rows}

    # Views

    @staticmethod
    def add_view(db: Session, article_id: str, fingerprint: str) -> ArticleView:
        view = ArticleView(article_id=article_id, fingerprint=fingerprint)
        db.add(view)
        db.flush()
        return view

    @staticmethod
    def count_views(db: Session, article_id: str) -> int:
        return db.query(func.count(ArticleView.id)).filter(ArticleView.article_id == article_id).scalar() or 0

    @staticmethod
    def count_unique_viewers(db: Session, article_id: str) -> int:
        return (
            db.query(func.count(distinct(ArticleView.fingerprint)))
            .filter(ArticleView.article_id == article_id)
            .scalar()
            or 0
        )
