"""Inquiry router - public forms and the admin inbox"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from ...rate_limiter import rate_limit_public_forms
from .schemas import (
    ContactMessageCreate,
    ContactMessageResponse,
    ContactStatusUpdate,
    CorporateInquiryCreate,
    FormSubmissionResponse,
    QueryRespondRequest,
    QueryStatusUpdate,
    SubmissionStatusUpdate,
    YogaQueryCreate,
    YogaQueryResponse,
)
from .service import InquiryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Inquiries"])
admin_router = APIRouter(prefix="/admin", tags=["Inquiries Admin"])


def get_inquiry_service(db: Session = Depends(get_db)) -> InquiryService:
    """Dependency injection for InquiryService"""
    return InquiryService(db)


# ============================================================================
# PUBLIC FORMS
# ============================================================================


@router.post("/queries", response_model=YogaQueryResponse, status_code=201)
async def submit_query(
    data: YogaQueryCreate,
    background_tasks: BackgroundTasks,
    service: InquiryService = Depends(get_inquiry_service),
    _: None = Depends(rate_limit_public_forms),
):
    return service.create_query(data, background_tasks)


@router.post("/contact", response_model=ContactMessageResponse, status_code=201)
async def submit_contact_message(
    data: ContactMessageCreate,
    service: InquiryService = Depends(get_inquiry_service),
    _: None = Depends(rate_limit_public_forms),
):
    return service.create_contact_message(data)


@router.post("/corporate-inquiries", response_model=FormSubmissionResponse, status_code=201)
async def submit_corporate_inquiry(
    data: CorporateInquiryCreate,
    service: InquiryService = Depends(get_inquiry_service),
    _: None = Depends(rate_limit_public_forms),
):
    return service.create_corporate_inquiry(data)


# ============================================================================
# ADMIN INBOX
# ============================================================================


@admin_router.get("/submissions", response_model=list[FormSubmissionResponse])
async def list_submissions(
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.list_submissions(type, status)


@admin_router.patch("/submissions/{submission_id}", response_model=FormSubmissionResponse)
async def update_submission(
    submission_id: str,
    data: SubmissionStatusUpdate,
    admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.update_submission(submission_id, data, admin)


@admin_router.get("/contact-messages", response_model=list[ContactMessageResponse])
async def list_contact_messages(
    status: Optional[str] = Query(None),
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.list_contact_messages(status)


@admin_router.patch("/contact-messages/{message_id}", response_model=ContactMessageResponse)
async def update_contact_message(
    message_id: str,
    data: ContactStatusUpdate,
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.update_contact_status(message_id, data.status)


@admin_router.get("/queries", response_model=list[YogaQueryResponse])
async def list_queries(
    status: Optional[str] = Query(None),
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.list_queries(status)


@admin_router.post("/queries/{query_id}/respond", response_model=YogaQueryResponse)
async def respond_to_query(
    query_id: str,
    data: QueryRespondRequest,
    background_tasks: BackgroundTasks,
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.respond_to_query(query_id, data.response, background_tasks)


@admin_router.patch("/queries/{query_id}", response_model=YogaQueryResponse)
async def update_query_status(
    query_id: str,
    data: QueryStatusUpdate,
    _admin: User = Depends(require_admin),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.update_query_status(query_id, data.status)
