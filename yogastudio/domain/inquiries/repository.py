"""Inquiry repository - yoga questions, contact messages and the form submission inbox"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ContactMessage, FormSubmission, YogaQuery


class InquiryRepository:
    @staticmethod
    def add(db: Session, record):
        db.add(record)
        return record

    # Form submissions

    @staticmethod
    def list_submissions(db: Session, submission_type: Optional[str] = None, status: Optional[str] = None) -> list[FormSubmission]:
        query = db.query(FormSubmission)
        if submission_type and submission_type != "all":
            query = query.filter(FormSubmission.type == submission_type)
        if status and status != "all":
            query = query.filter(FormSubmission.status == status)
        return query.order_by(FormSubmission.created_at.desc()).all()

    @staticmethod
    def get_submission(db: Session, submission_id: str) -> Optional[FormSubmission]:
        return db.query(FormSubmission).filter(FormSubmission.id == submission_id).first()

    # Contact messages

    @staticmethod
    def list_contact_messages(db: Session, status: Optional[str] = None) -> list[ContactMessage]:
        query = db.query(ContactMessage)
        if status and status != "all":
            query = query.filter(ContactMessage.status == status)
        return query.order_by(ContactMessage.created_at.desc()).all()

    @staticmethod
    def get_contact_message(db: Session, message_id: str) -> Optional[ContactMessage]:
        return db.query(ContactMessage).filter(ContactMessage.id == message_id).first()

    # Yoga queries

    @staticmethod
    def list_queries(db: Session, status: Optional[str] = None) -> list[YogaQuery]:
        query = db.query(YogaQuery)
        if status and status != "all":
            query = query.filter(YogaQuery.status == status)
        return query.order_by(YogaQuery.created_at.desc()).all()

    @staticmethod
    def get_query(db: Session, query_id: str) -> Optional[YogaQuery]:
        return db.query(YogaQuery).filter(YogaQuery.id == query_id).first()
