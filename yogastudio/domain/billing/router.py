"""Billing router - public plans and admin billing records"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import (
    PlanResponse,
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionStatusUpdate,
    TransactionCreate,
    TransactionResponse,
    TransactionStatusUpdate,
)
from .service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])
admin_router = APIRouter(prefix="/admin", tags=["Billing Admin"], dependencies=[Depends(require_admin)])


def get_billing_service(db: Session = Depends(get_db)) -> BillingService:
    """Dependency injection for BillingService"""
    return BillingService(db)


@router.get("/plans", response_model=list[PlanResponse])
async def list_plans(service: BillingService = Depends(get_billing_service)):
    return service.list_plans()


# ============================================================================
# SUBSCRIPTIONS
# ============================================================================


@admin_router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def list_subscriptions(
    status: Optional[str] = Query(None),
    service: BillingService = Depends(get_billing_service),
):
    return service.list_subscriptions(status)


@admin_router.post("/subscriptions", response_model=SubscriptionResponse, status_code=201)
async def create_subscription(data: SubscriptionCreate, service: BillingService = Depends(get_billing_service)):
    return service.create_subscription(data)


@admin_router.patch("/subscriptions/{subscription_id}/status", response_model=SubscriptionResponse)
async def update_subscription_status(
    subscription_id: str,
    data: SubscriptionStatusUpdate,
    service: BillingService = Depends(get_billing_service),
):
    return service.update_subscription_status(subscription_id, data.status)


# ============================================================================
# TRANSACTIONS
# ============================================================================


@admin_router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    service: BillingService = Depends(get_billing_service),
):
    return service.list_transactions(status, user_id)


@admin_router.post("/transactions", response_model=TransactionResponse, status_code=201)
async def record_transaction(data: TransactionCreate, service: BillingService = Depends(get_billing_service)):
    return service.record_transaction(data)


@admin_router.patch("/transactions/{transaction_id}/status", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: str,
    data: TransactionStatusUpdate,
    service: BillingService = Depends(get_billing_service),
):
    return service.update_transaction_status(transaction_id, data.status)
