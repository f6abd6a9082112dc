"""Newsletter service - subscriptions and issue delivery"""

import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_newsletter_issue
from ...models import Newsletter, NewsletterSubscriber, User
from ...shared.dates import utcnow
from ...shared.db import commit_or_raise
from ...utils.sanitization import sanitize_html
from .repository import NewsletterRepository
from .schemas import NewsletterCreate, NewsletterUpdate

logger = logging.getLogger(__name__)

ACTIVE = "active"
UNSUBSCRIBED = "unsubscribed"


class NewsletterService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NewsletterRepository()

    # ========================================================================
    # SUBSCRIPTIONS
    # ========================================================================

    def subscribe(self, email: str, name: Optional[str] = None) -> dict:
        subscriber = self.repo.get_subscriber_by_email(self.db, email)
        if subscriber and subscriber.status == ACTIVE:
            raise HTTPException(status_code=409, detail="This email is already subscribed to our newsletter")

        if subscriber:
            subscriber.status = ACTIVE
            subscriber.subscribed_at = utcnow()
            subscriber.unsubscribed_at = None
            if name:
                subscriber.name = name
            message = "Welcome back! Your subscription has been reactivated."
        else:
            subscriber = NewsletterSubscriber(email=email, name=name, status=ACTIVE)
            self.db.add(subscriber)
            message = "Thanks for subscribing!"

        commit_or_raise(
            self.db, "subscribe", conflict_detail="This email is already subscribed to our newsletter"
        )
        self.db.refresh(subscriber)
        logger.info(f"📬 Newsletter subscription: {email}")
        return {"message": message, "subscriber": subscriber}

    def unsubscribe(self, email: str) -> dict:
        subscriber = self.repo.get_subscriber_by_email(self.db, email)
        if not subscriber:
            raise HTTPException(status_code=404, detail="Subscriber not found")
        if subscriber.status != UNSUBSCRIBED:
            subscriber.status = UNSUBSCRIBED
            subscriber.unsubscribed_at = utcnow()
            commit_or_raise(self.db, "unsubscribe")
            self.db.refresh(subscriber)
            logger.info(f"📭 Newsletter unsubscribe: {email}")
        return {"message": "You have been unsubscribed.", "subscriber": subscriber}

    def list_subscribers(self, status: Optional[str] = None):
        return self.repo.list_subscribers(self.db, status)

    # ========================================================================
    # ISSUES
    # ========================================================================

    def list_newsletters(self):
        return self.repo.list_newsletters(self.db)

    def get_newsletter(self, newsletter_id: str) -> Newsletter:
        newsletter = self.repo.get_newsletter(self.db, newsletter_id)
        if not newsletter:
            raise HTTPException(status_code=404, detail="Newsletter not found")
        return newsletter

    def create_newsletter(self, data: NewsletterCreate, user: User) -> Newsletter:
        newsletter = Newsletter(
            title=data.title,
            subject=data.subject,
            content=sanitize_html(data.content),
            status="draft",
            created_by=user.id,
        )
        self.db.add(newsletter)
        commit_or_raise(self.db, "create newsletter")
        self.db.refresh(newsletter)
        return newsletter

    def update_newsletter(self, newsletter_id: str, data: NewsletterUpdate) -> Newsletter:
        newsletter = self.get_newsletter(newsletter_id)
        if newsletter.status == "sent":
            raise HTTPException(status_code=409, detail="Sent newsletters cannot be edited")
        updates = data.model_dump(exclude_unset=True)
        if updates.get("content") is not None:
            updates["content"] = sanitize_html(updates["content"])
        for key, value in updates.items():
            if value is not None:
                setattr(newsletter, key, value)
        commit_or_raise(self.db, "update newsletter")
        self.db.refresh(newsletter)
        return newsletter

    def delete_newsletter(self, newsletter_id: str) -> dict:
        newsletter = self.get_newsletter(newsletter_id)
        self.db.delete(newsletter)
        commit_or_raise(self.db, "delete newsletter")
        return {"message": "Newsletter deleted"}

    def send_newsletter(self, newsletter_id: str, background_tasks: Optional[BackgroundTasks] = None) -> Newsletter:
        """Mark the issue sent to every active subscriber; delivery runs after the response"""
        newsletter = self.get_newsletter(newsletter_id)
        if newsletter.status == "sent":
            raise HTTPException(status_code=409, detail="Newsletter has already been sent")

        recipients = [s.email for s in self.repo.list_subscribers(self.db, ACTIVE)]
        if not recipients:
            raise HTTPException(status_code=400, detail="There are no active subscribers")

        newsletter.status = "sent"
        newsletter.sent_at = utcnow()
        newsletter.recipient_count = len(recipients)
        commit_or_raise(self.db, "send newsletter")
        self.db.refresh(newsletter)
        logger.info(f"📨 Newsletter '{newsletter.subject}' queued for {len(recipients)} subscribers")

        if background_tasks is not None:
            background_tasks.add_task(
                send_newsletter_issue, recipients, newsletter.subject, newsletter.title, newsletter.content
            )
        return newsletter
