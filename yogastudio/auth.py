import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import permissions
from .config import JWT_ALGORITHM, JWT_AUDIENCE, JWT_SECRET
from .database import get_db
from .models import Profile, User, UserRole
from .seed import ensure_role

logger = logging.getLogger(__name__)

# auto_error disabled so a missing header is a 401, not Starlette's 403
security = HTTPBearer(auto_error=False)


def verify_access_token(token: str) -> dict:
    """Verify an HS256 access token issued by the identity provider"""
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(status_code=401, detail="Invalid token format. Expected a valid JWT token.")

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    if not payload.get("sub"):
        logger.error(f"❌ Token missing sub claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


def _create_user(db: Session, payload: dict) -> User:
    """First sight of an account: user row, profile and the default role"""
    user_id = payload["sub"]
    email = (payload.get("email") or "").strip().lower()
    metadata = payload.get("user_metadata") or {}
    full_name = metadata.get("full_name") or email
    if not email:
        raise HTTPException(status_code=401, detail="Token is missing an email claim")

    logger.info(f"🆕 Creating new user: {email}")
    user = User(id=user_id, email=email)
    try:
        role = ensure_role(db, permissions.USER)
        db.add(user)
        db.add(Profile(user_id=user_id, email=email, full_name=full_name))
        db.add(UserRole(user_id=user_id, role_id=role.id))
        db.commit()
        db.refresh(user)
        logger.info(f"✅ New user created: {user.email}")
    except IntegrityError as e:
        db.rollback()
        logger.error(f"❌ Email {email} is already registered to another account")
        raise HTTPException(
            status_code=409,
            detail="This email is already registered. Please sign in with your existing account.",
        ) from e
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create user {email}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create user account") from e
    return user


def resolve_user(db: Session, token: str) -> User:
    payload = verify_access_token(token)
    user = db.query(User).filter(User.id == payload["sub"]).first()
    if user is None:
        user = _create_user(db, payload)
    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )
    return resolve_user(db, credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Anonymous requests are allowed; a presented token must still be valid"""
    if not credentials:
        return None
    return resolve_user(db, credentials.credentials)


async def require_admin(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    if not permissions.is_admin(db, user):
        logger.warning(f"⚠️ User {user.email} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_role_manager(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    if not permissions.can_manage_roles(db, user):
        logger.warning(f"⚠️ User {user.email} attempted to change roles")
        raise HTTPException(status_code=403, detail="You are not allowed to manage roles")
    return user


async def require_article_manager(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    if not permissions.can_manage_articles(db, user):
        logger.warning(f"⚠️ User {user.email} attempted to manage articles")
        raise HTTPException(status_code=403, detail="Admin or curator access required")
    return user
