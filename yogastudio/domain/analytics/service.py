"""
Analytics service - dashboard metrics and per-user engagement.

Metrics are computed on request; there is no materialized view to refresh.
Revenue only counts completed transactions. The growth rate compares
sign-ups in the current calendar month to the previous one.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import ENGAGEMENT_ACTIVE_DAYS, ENGAGEMENT_INACTIVE_DAYS
from ...shared.dates import start_of_month, start_of_previous_month, utcnow
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)


def growth_rate(current: int, previous: int) -> float:
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def engagement_status(last_activity: datetime, now: datetime) -> str:
    idle = now - last_activity
    if idle <= timedelta(days=ENGAGEMENT_ACTIVE_DAYS):
        return "active"
    if idle <= timedelta(days=ENGAGEMENT_INACTIVE_DAYS):
        return "inactive"
    return "dormant"


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AnalyticsRepository()

    def get_metrics(self, now: Optional[datetime] = None) -> list[dict]:
        now = now or utcnow()
        month_start = start_of_month(now)
        previous_month_start = start_of_previous_month(now)
        db = self.db

        this_month_users = self.repo.count_users(db, since=month_start)
        last_month_users = self.repo.count_users(db, since=previous_month_start, until=month_start)

        values = [
            ("total_users", self.repo.count_users(db), "count"),
            ("total_bookings", self.repo.count_bookings(db), "count"),
            ("monthly_bookings", self.repo.count_bookings(db, since=month_start), "count"),
            ("total_articles", self.repo.count_articles(db), "count"),
            ("monthly_articles", self.repo.count_articles(db, since=month_start), "count"),
            ("total_queries", self.repo.count_queries(db), "count"),
            ("monthly_queries", self.repo.count_queries(db, since=month_start), "count"),
            ("total_contacts", self.repo.count_contacts(db), "count"),
            ("monthly_contacts", self.repo.count_contacts(db, since=month_start), "count"),
            ("monthly_revenue", float(self.repo.sum_completed_revenue(db, since=month_start)), "currency"),
            ("total_revenue", float(self.repo.sum_completed_revenue(db)), "currency"),
            ("active_subscriptions", self.repo.count_subscriptions(db, status="active"), "count"),
            ("total_subscriptions", self.repo.count_subscriptions(db), "count"),
            ("user_growth_rate", growth_rate(this_month_users, last_month_users), "percentage"),
        ]
        logger.info(f"📊 Dashboard metrics computed ({len(values)} metrics)")
        return [{"metric": name, "value": value, "type": kind, "last_updated": now} for name, value, kind in values]

    def get_engagement(self, now: Optional[datetime] = None) -> list[dict]:
        now = now or utcnow()
        class_totals = self.repo.class_booking_totals(self.db)
        simple_totals = self.repo.simple_booking_totals(self.db)
        attended = self.repo.attended_totals(self.db)
        views = self.repo.view_totals(self.db)

        results = []
        for user, profile in self.repo.list_users_with_profiles(self.db):
            class_count, last_class = class_totals.get(user.id, (0, None))
            simple_count, last_simple = simple_totals.get(user.id, (0, None))
            view_count, last_view = views.get(user.id, (0, None))

            profile_updated = profile.updated_at if profile else None
            activity = [t for t in (last_class, last_simple, last_view, profile_updated) if t is not None]
            last_activity = max(activity) if activity else user.created_at

            results.append(
                {
                    "user_id": user.id,
                    "email": user.email,
                    "full_name": profile.full_name if profile else None,
                    "total_bookings": class_count + simple_count,
                    "attended_classes": attended.get(user.id, 0),
                    "articles_viewed": view_count,
                    "last_activity": last_activity,
                    "engagement_status": engagement_status(last_activity, now),
                }
            )

        results.sort(key=lambda row: row["total_bookings"], reverse=True)
        return results
