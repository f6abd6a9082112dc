"""Billing service - plans, recorded subscriptions and transactions"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Transaction, UserSubscription
from ...shared.dates import to_naive_utc, utcnow
from ...shared.db import commit_or_raise
from .repository import BillingRepository
from .schemas import SubscriptionCreate, TransactionCreate

logger = logging.getLogger(__name__)


def serialize_subscription(subscription: UserSubscription) -> dict:
    plan = subscription.plan
    return {
        "id": subscription.id,
        "user_id": subscription.user_id,
        "plan_id": subscription.plan_id,
        "plan_name": plan.name if plan else None,
        "plan_price": plan.price if plan else None,
        "status": subscription.status,
        "started_at": subscription.started_at,
        "expires_at": subscription.expires_at,
        "cancelled_at": subscription.cancelled_at,
        "created_at": subscription.created_at,
    }


class BillingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def list_plans(self):
        return self.repo.list_plans(self.db)

    # ========================================================================
    # SUBSCRIPTIONS
    # ========================================================================

    def list_subscriptions(self, status: Optional[str] = None) -> list[dict]:
        return [serialize_subscription(s) for s in self.repo.list_subscriptions(self.db, status)]

    def create_subscription(self, data: SubscriptionCreate) -> dict:
        if not self.repo.get_user_by_id(self.db, data.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        plan = self.repo.get_plan(self.db, data.plan_id)
        if not plan:
            raise HTTPException(status_code=404, detail="Plan not found")

        subscription = UserSubscription(
            user_id=data.user_id,
            plan_id=plan.id,
            status="active",
            expires_at=to_naive_utc(data.expires_at),
        )
        self.db.add(subscription)
        commit_or_raise(self.db, "record subscription")
        self.db.refresh(subscription)
        logger.info(f"💳 Subscription to {plan.name} recorded for user {data.user_id}")
        return serialize_subscription(subscription)

    def update_subscription_status(self, subscription_id: str, status: str) -> dict:
        subscription = self.repo.get_subscription(self.db, subscription_id)
        if not subscription:
            raise HTTPException(status_code=404, detail="Subscription not found")
        subscription.status = status
        subscription.cancelled_at = utcnow() if status == "cancelled" else None
        commit_or_raise(self.db, "update subscription")
        self.db.refresh(subscription)
        return serialize_subscription(subscription)

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    def list_transactions(self, status: Optional[str] = None, user_id: Optional[str] = None):
        return self.repo.list_transactions(self.db, status, user_id)

    def record_transaction(self, data: TransactionCreate) -> Transaction:
        if data.user_id and not self.repo.get_user_by_id(self.db, data.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        if data.subscription_id and not self.repo.get_subscription(self.db, data.subscription_id):
            raise HTTPException(status_code=404, detail="Subscription not found")

        transaction = Transaction(**data.model_dump())
        self.db.add(transaction)
        commit_or_raise(self.db, "record transaction")
        self.db.refresh(transaction)
        logger.info(f"💰 Transaction {transaction.id} recorded: {transaction.amount} {transaction.currency}")
        return transaction

    def update_transaction_status(self, transaction_id: str, status: str) -> Transaction:
        transaction = self.repo.get_transaction(self.db, transaction_id)
        if not transaction:
            raise HTTPException(status_code=404, detail="Transaction not found")
        transaction.status = status
        commit_or_raise(self.db, "update transaction")
        self.db.refresh(transaction)
        return transaction
