"""Inquiry service - intake of public forms and the admin inbox"""

import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from sqlalchemy.orm import Session

from ...email_service import notify_query_received, notify_query_response
from ...models import ContactMessage, FormSubmission, User, YogaQuery
from ...shared.dates import utcnow
from ...shared.db import commit_or_raise
from ...utils.sanitization import sanitize_dict
from .repository import InquiryRepository
from .schemas import (
    ContactMessageCreate,
    CorporateInquiryCreate,
    SubmissionStatusUpdate,
    YogaQueryCreate,
)

logger = logging.getLogger(__name__)


class InquiryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = InquiryRepository()

    def _record_submission(self, submission_type: str, data: dict, email: str, name: str, phone: Optional[str]):
        # Submission payloads are rendered in the admin inbox
        self.repo.add(
            self.db,
            FormSubmission(
                type=submission_type,
                data=sanitize_dict(data),
                user_email=email,
                user_name=name,
                user_phone=phone or None,
            ),
        )

    # ========================================================================
    # PUBLIC FORMS
    # ========================================================================

    def create_query(self, data: YogaQueryCreate, background_tasks: Optional[BackgroundTasks] = None) -> YogaQuery:
        query = self.repo.add(self.db, YogaQuery(**data.model_dump(), status="pending"))
        self._record_submission("query", data.model_dump(mode="json"), data.email, data.name, None)
        commit_or_raise(self.db, "submit question")
        self.db.refresh(query)
        logger.info(f"❓ Yoga question received from {data.email}: {data.subject}")

        if background_tasks is not None:
            background_tasks.add_task(notify_query_received, query.email, query.name, query.subject)
        return query

    def create_contact_message(self, data: ContactMessageCreate) -> ContactMessage:
        message = self.repo.add(self.db, ContactMessage(**data.model_dump(), status="new"))
        self._record_submission("contact", data.model_dump(mode="json"), data.email, data.name, data.phone)
        commit_or_raise(self.db, "send contact message")
        self.db.refresh(message)
        logger.info(f"✉️ Contact message received from {data.email}")
        return message

    def create_corporate_inquiry(self, data: CorporateInquiryCreate) -> FormSubmission:
        submission = FormSubmission(
            type="corporate",
            data=sanitize_dict(data.model_dump(mode="json")),
            user_email=data.email,
            user_name=data.contact_name,
            user_phone=data.phone,
        )
        self.repo.add(self.db, submission)
        commit_or_raise(self.db, "submit corporate inquiry")
        self.db.refresh(submission)
        logger.info(f"🏢 Corporate inquiry from {data.company_name} ({data.email})")
        return submission

    # ========================================================================
    # ADMIN INBOX
    # ========================================================================

    def list_submissions(self, submission_type: Optional[str] = None, status: Optional[str] = None):
        return self.repo.list_submissions(self.db, submission_type, status)

    def update_submission(self, submission_id: str, data: SubmissionStatusUpdate, admin: User) -> FormSubmission:
        submission = self.repo.get_submission(self.db, submission_id)
        if not submission:
            raise HTTPException(status_code=404, detail="Submission not found")
        submission.status = data.status
        if data.notes is not None:
            submission.notes = data.notes
        submission.processed_by = admin.id
        submission.processed_at = utcnow()
        commit_or_raise(self.db, "update submission")
        self.db.refresh(submission)
        logger.info(f"📋 Submission {submission_id} marked {data.status} by {admin.email}")
        return submission

    def list_contact_messages(self, status: Optional[str] = None):
        return self.repo.list_contact_messages(self.db, status)

    def update_contact_status(self, message_id: str, status: str) -> ContactMessage:
        message = self.repo.get_contact_message(self.db, message_id)
        if not message:
            raise HTTPException(status_code=404, detail="Contact message not found")
        message.status = status
        commit_or_raise(self.db, "update contact message")
        self.db.refresh(message)
        return message

    def list_queries(self, status: Optional[str] = None):
        return self.repo.list_queries(self.db, status)

    def _get_query(self, query_id: str) -> YogaQuery:
        query = self.repo.get_query(self.db, query_id)
        if not query:
            raise HTTPException(status_code=404, detail="Question not found")
        return query

    def respond_to_query(self, query_id: str, response: str, background_tasks: Optional[BackgroundTasks] = None) -> YogaQuery:
        query = self._get_query(query_id)
        if query.status == "closed":
            raise HTTPException(status_code=409, detail="Question is closed")
        query.response = response
        query.status = "responded"
        query.responded_at = utcnow()
        commit_or_raise(self.db, "respond to question")
        self.db.refresh(query)
        logger.info(f"💬 Responded to question {query_id}")

        if background_tasks is not None:
            background_tasks.add_task(notify_query_response, query.email, query.name, query.subject, response)
        return query

    def update_query_status(self, query_id: str, status: str) -> YogaQuery:
        query = self._get_query(query_id)
        query.status = status
        commit_or_raise(self.db, "update question status")
        self.db.refresh(query)
        return query
