"""Account repository - profiles, roles and role assignments"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import (
    Booking,
    ClassBooking,
    Profile,
    Role,
    RoleChange,
    User,
    UserRole,
    YogaQuery,
)


class AccountRepository:
    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.user_id == user_id).first()

    @staticmethod
    def create_profile(db: Session, user: User) -> Profile:
        profile = Profile(user_id=user.id, email=user.email, full_name=user.email)
        db.add(profile)
        db.flush()
        return profile

    @staticmethod
    def list_users_with_profiles(db: Session) -> list[tuple[User, Optional[Profile]]]:
        """Every user with their profile, newest first"""
        return (
            db.query(User, Profile)
            .outerjoin(Profile, Profile.user_id == User.id)
            .order_by(User.created_at.desc())
            .all()
        )

    @staticmethod
    def list_roles(db: Session) -> list[Role]:
        return db.query(Role).order_by(Role.name).all()

    @staticmethod
    def get_roles_by_names(db: Session, names: list[str]) -> list[Role]:
        return db.query(Role).filter(Role.name.in_(names)).all()

    @staticmethod
    def get_user_roles(db: Session, user_id: str) -> list[UserRole]:
        return db.query(UserRole).filter(UserRole.user_id == user_id).all()

    @staticmethod
    def add_user_role(db: Session, user_id: str, role: Role, assigned_by: str) -> UserRole:
        user_role = UserRole(user_id=user_id, role_id=role.id, assigned_by=assigned_by)
        db.add(user_role)
        return user_role

    @staticmethod
    def add_role_change(db: Session, user_id: str, changed_by: str, old_roles: list[str], new_roles: list[str]) -> RoleChange:
        change = RoleChange(user_id=user_id, changed_by=changed_by, old_roles=old_roles, new_roles=new_roles)
        db.add(change)
        return change

    @staticmethod
    def list_role_changes(db: Session, user_id: str) -> list[RoleChange]:
        return (
            db.query(RoleChange)
            .filter(RoleChange.user_id == user_id)
            .order_by(RoleChange.created_at.desc())
            .all()
        )

    # Activity

    @staticmethod
    def get_bookings_for(db: Session, user: User) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(or_(Booking.user_id == user.id, Booking.email == user.email))
            .order_by(Booking.created_at.desc())
            .all()
        )

    @staticmethod
    def get_class_bookings_for(db: Session, user: User) -> list[ClassBooking]:
        return (
            db.query(ClassBooking)
            .filter(or_(ClassBooking.user_id == user.id, ClassBooking.email == user.email))
            .order_by(ClassBooking.created_at.desc())
            .all()
        )

    @staticmethod
    def get_queries_for(db: Session, user: User) -> list[YogaQuery]:
        return (
            db.query(YogaQuery)
            .filter(YogaQuery.email == user.email)
            .order_by(YogaQuery.created_at.desc())
            .all()
        )
