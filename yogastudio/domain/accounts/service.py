"""Account service - profiles, activity and role administration"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import permissions
from ...models import Profile, User
from ...shared.db import commit_or_raise
from .repository import AccountRepository
from .schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def get_profile(self, user: User) -> Profile:
        """Own profile; accounts created before profiles existed get one now"""
        profile = self.repo.get_profile(self.db, user.id)
        if profile is None:
            logger.info(f"🆕 Creating missing profile for {user.email}")
            profile = self.repo.create_profile(self.db, user)
            commit_or_raise(self.db, "create profile")
            self.db.refresh(profile)
        return profile

    def get_me(self, user: User) -> dict:
        summary = permissions.describe(self.db, user)
        return {
            "user": user,
            "profile": self.get_profile(user),
            **summary,
        }

    def update_profile(self, user: User, data: ProfileUpdate) -> Profile:
        profile = self.get_profile(user)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, key, value)
        commit_or_raise(self.db, "update profile")
        self.db.refresh(profile)
        logger.info(f"✅ Profile updated for {user.email}")
        return profile

    def get_activity(self, user: User) -> dict:
        class_bookings = [
            {
                "id": b.id,
                "scheduled_class_id": b.scheduled_class_id,
                "class_name": b.scheduled_class.class_type.name if b.scheduled_class and b.scheduled_class.class_type else None,
                "start_time": b.scheduled_class.start_time if b.scheduled_class else None,
                "booking_status": b.booking_status,
                "payment_status": b.payment_status,
                "created_at": b.created_at,
            }
            for b in self.repo.get_class_bookings_for(self.db, user)
        ]
        return {
            "bookings": self.repo.get_bookings_for(self.db, user),
            "class_bookings": class_bookings,
            "queries": self.repo.get_queries_for(self.db, user),
        }

    # ========================================================================
    # ADMIN
    # ========================================================================

    def list_users(self) -> list[dict]:
        users = []
        for user, profile in self.repo.list_users_with_profiles(self.db):
            roles = permissions.get_role_names(self.db, user.id)
            users.append(
                {
                    "user_id": user.id,
                    "email": user.email,
                    "full_name": profile.full_name if profile else None,
                    "phone": profile.phone if profile else None,
                    "created_at": user.created_at,
                    "roles": roles,
                    "highest_role": permissions.highest_role(roles),
                }
            )
        return users

    def list_roles(self):
        return self.repo.list_roles(self.db)

    def update_user_roles(self, user_id: str, role_names: list[str], actor: User) -> dict:
        """Replace a user's role set with exactly `role_names`"""
        if not role_names:
            raise HTTPException(status_code=400, detail="At least one role must be selected")

        target = self.repo.get_user(self.db, user_id)
        if not target:
            raise HTTPException(status_code=404, detail="User not found")

        roles = self.repo.get_roles_by_names(self.db, role_names)
        unknown = sorted(set(role_names) - {r.name for r in roles})
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown roles: {', '.join(unknown)}")

        current = self.repo.get_user_roles(self.db, user_id)
        old_names = sorted(ur.role.name for ur in current)
        wanted_ids = {r.id for r in roles}
        current_ids = {ur.role_id for ur in current}

        for user_role in current:
            if user_role.role_id not in wanted_ids:
                self.db.delete(user_role)
        for role in roles:
            if role.id not in current_ids:
                self.repo.add_user_role(self.db, user_id, role, assigned_by=actor.id)

        new_names = sorted(r.name for r in roles)
        self.repo.add_role_change(self.db, user_id, actor.id, old_names, new_names)
        commit_or_raise(self.db, "update user roles")

        logger.info(f"🔐 Roles for {target.email} changed by {actor.email}: {old_names} -> {new_names}")
        return {
            "user_id": user_id,
            "roles": new_names,
            "highest_role": permissions.highest_role(new_names),
        }

    def list_role_changes(self, user_id: str):
        if not self.repo.get_user(self.db, user_id):
            raise HTTPException(status_code=404, detail="User not found")
        return self.repo.list_role_changes(self.db, user_id)
