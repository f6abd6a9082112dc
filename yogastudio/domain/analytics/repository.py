"""Analytics repository - aggregate queries backing the admin dashboard"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    Article,
    ArticleView,
    Booking,
    ClassBooking,
    ContactMessage,
    Profile,
    Transaction,
    User,
    UserSubscription,
    YogaQuery,
)


class AnalyticsRepository:
    """Repository for dashboard aggregates"""

    @staticmethod
    def count_since(db: Session, model, since: Optional[datetime] = None, until: Optional[datetime] = None) -> int:
        """Count rows of model, optionally bounded by created_at"""
        query = db.query(func.count(model.id))
        if since is not None:
            query = query.filter(model.created_at >= since)
        if until is not None:
            query = query.filter(model.created_at < until)
        return query.scalar() or 0

    @staticmethod
    def count_users(db: Session, since=None, until=None) -> int:
        return AnalyticsRepository.count_since(db, User, since, until)

    @staticmethod
    def count_bookings(db: Session, since=None) -> int:
        return AnalyticsRepository.count_since(db, Booking, since) + AnalyticsRepository.count_since(
            db, ClassBooking, since
        )

    @staticmethod
    def count_articles(db: Session, since=None) -> int:
        return AnalyticsRepository.count_since(db, Article, since)

    @staticmethod
    def count_queries(db: Session, since=None) -> int:
        return AnalyticsRepository.count_since(db, YogaQuery, since)

    @staticmethod
    def count_contacts(db: Session, since=None) -> int:
        return AnalyticsRepository.count_since(db, ContactMessage, since)

    @staticmethod
    def sum_completed_revenue(db: Session, since: Optional[datetime] = None) -> Decimal:
        query = db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(Transaction.status == "completed")
        if since is not None:
            query = query.filter(Transaction.created_at >= since)
        return Decimal(str(query.scalar() or 0))

    @staticmethod
    def count_subscriptions(db: Session, status: Optional[str] = None) -> int:
        query = db.query(func.count(UserSubscription.id))
        if status:
            query = query.filter(UserSubscription.status == status)
        return query.scalar() or 0

    # ========================================================================
    # ENGAGEMENT
    # ========================================================================

    @staticmethod
    def list_users_with_profiles(db: Session) -> list[tuple[User, Optional[Profile]]]:
        return db.query(User, Profile).outerjoin(Profile, Profile.user_id == User.id).all()

    @staticmethod
    def class_booking_totals(db: Session) -> dict[str, tuple[int, Optional[datetime]]]:
        """user_id -> (class bookings, latest booking time)"""
        rows = (
            db.query(ClassBooking.user_id, func.count(ClassBooking.id), func.max(ClassBooking.created_at))
            .filter(ClassBooking.user_id.isnot(None))
            .group_by(ClassBooking.user_id)
            .all()
        )
        return {user_id: (total, latest) for user_id, total, latest in rows}

    @staticmethod
    def attended_totals(db: Session) -> dict[str, int]:
        rows = (
            db.query(ClassBooking.user_id, func.count(ClassBooking.id))
            .filter(ClassBooking.user_id.isnot(None), ClassBooking.booking_status == "attended")
            .group_by(ClassBooking.user_id)
            .all()
        )
        return dict(rows)

    @staticmethod
    def simple_booking_totals(db: Session) -> dict[str, tuple[int, Optional[datetime]]]:
        rows = (
            db.query(Booking.user_id, func.count(Booking.id), func.max(Booking.created_at))
            .filter(Booking.user_id.isnot(None))
            .group_by(Booking.user_id)
            .all()
        )
        return {user_id: (total, latest) for user_id, total, latest in rows}

    @staticmethod
    def view_totals(db: Session) -> dict[str, tuple[int, Optional[datetime]]]:
        """fingerprint -> (views, latest view); signed-in readers use their user id as fingerprint"""
        rows = (
            db.query(ArticleView.fingerprint, func.count(ArticleView.id), func.max(ArticleView.viewed_at))
            .group_by(ArticleView.fingerprint)
            .all()
        )
        return {fingerprint: (total, latest) for fingerprint, total, latest in rows}
