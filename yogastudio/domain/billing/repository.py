"""Billing repository - Database operations for plans, subscriptions and transactions"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import SubscriptionPlan, Transaction, User, UserSubscription


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def list_plans(db: Session, active_only: bool = True) -> list[SubscriptionPlan]:
        query = db.query(SubscriptionPlan)
        if active_only:
            query = query.filter(SubscriptionPlan.is_active.is_(True))
        return query.order_by(SubscriptionPlan.price).all()

    @staticmethod
    def get_plan(db: Session, plan_id: str) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def list_subscriptions(db: Session, status: Optional[str] = None) -> list[UserSubscription]:
        query = db.query(UserSubscription).options(joinedload(UserSubscription.plan))
        if status and status != "all":
            query = query.filter(UserSubscription.status == status)
        return query.order_by(UserSubscription.created_at.desc()).all()

    @staticmethod
    def get_subscription(db: Session, subscription_id: str) -> Optional[UserSubscription]:
        return db.query(UserSubscription).filter(UserSubscription.id == subscription_id).first()

    @staticmethod
    def list_transactions(db: Session, status: Optional[str] = None, user_id: Optional[str] = None) -> list[Transaction]:
        query = db.query(Transaction)
        if status and status != "all":
            query = query.filter(Transaction.status == status)
        if user_id:
            query = query.filter(Transaction.user_id == user_id)
        return query.order_by(Transaction.created_at.desc()).all()

    @staticmethod
    def get_transaction(db: Session, transaction_id: str) -> Optional[Transaction]:
        return db.query(Transaction).filter(Transaction.id == transaction_id).first()
