"""
Role and permission resolution.

Every access decision in the API goes through this module. Role lookups that
fail are logged and treated as "no permission".
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import AdminUser, Article, Role, User, UserRole

logger = logging.getLogger(__name__)

USER = "user"
MANTRA_CURATOR = "mantra_curator"
INSTRUCTOR = "instructor"
ADMIN = "admin"
SUPER_ADMIN = "super_admin"

# Highest first
ROLE_PRIORITY = [SUPER_ADMIN, ADMIN, INSTRUCTOR, MANTRA_CURATOR, USER]
ADMIN_ROLES = {ADMIN, SUPER_ADMIN}


def highest_role(role_names: Iterable[str]) -> str:
    """Pick the most privileged role; a user with no roles is a plain user"""
    names = set(role_names or [])
    for role in ROLE_PRIORITY:
        if role in names:
            return role
    return USER


def get_role_names(db: Session, user_id: str) -> list[str]:
    rows = (
        db.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .order_by(Role.name)
        .all()
    )
    return [row[0] for row in rows]


def is_listed_admin(db: Session, email: Optional[str]) -> bool:
    if not email:
        return False
    return (
        db.query(AdminUser.id).filter(func.lower(AdminUser.email) == email.lower()).first()
        is not None
    )


def is_admin(db: Session, user: Optional[User]) -> bool:
    if user is None:
        return False
    try:
        if is_listed_admin(db, user.email):
            return True
        return bool(ADMIN_ROLES.intersection(get_role_names(db, user.id)))
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to resolve admin status for {user.id}: {e}")
        return False


def is_curator(role_names: Iterable[str]) -> bool:
    return MANTRA_CURATOR in set(role_names or [])


def can_manage_roles(db: Session, user: Optional[User]) -> bool:
    return is_admin(db, user)


def can_manage_articles(db: Session, user: Optional[User]) -> bool:
    """Admins and curators may open the article management area"""
    if user is None:
        return False
    if is_admin(db, user):
        return True
    try:
        return is_curator(get_role_names(db, user.id))
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to resolve curator status for {user.id}: {e}")
        return False


def can_manage_article(db: Session, user: Optional[User], article: Article) -> bool:
    """Admins manage every article; curators only the ones they authored"""
    if user is None:
        return False
    if is_admin(db, user):
        return True
    return can_manage_articles(db, user) and article.author_id == user.id


def describe(db: Session, user: User) -> dict:
    """Role summary used by /auth/me and the admin user list"""
    try:
        roles = get_role_names(db, user.id)
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to load roles for {user.id}: {e}")
        roles = []
    return {
        "roles": roles,
        "highest_role": highest_role(roles),
        "is_admin": is_admin(db, user),
        "is_curator": is_curator(roles),
    }
