"""Newsletter repository - subscribers and newsletter issues"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Newsletter, NewsletterSubscriber


class NewsletterRepository:
    @staticmethod
    def get_subscriber_by_email(db: Session, email: str) -> Optional[NewsletterSubscriber]:
        return (
            db.query(NewsletterSubscriber)
            .filter(func.lower(NewsletterSubscriber.email) == email.lower())
            .first()
        )

    @staticmethod
    def list_subscribers(db: Session, status: Optional[str] = None) -> list[NewsletterSubscriber]:
        query = db.query(NewsletterSubscriber)
        if status and status != "all":
            query = query.filter(NewsletterSubscriber.status == status)
        return query.order_by(NewsletterSubscriber.subscribed_at.desc()).all()

    @staticmethod
    def list_newsletters(db: Session) -> list[Newsletter]:
        return db.query(Newsletter).order_by(Newsletter.created_at.desc()).all()

    @staticmethod
    def get_newsletter(db: Session, newsletter_id: str) -> Optional[Newsletter]:
        return db.query(Newsletter).filter(Newsletter.id == newsletter_id).first()
