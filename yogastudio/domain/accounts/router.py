"""Account router - identity, own profile and role administration"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin, require_role_manager
from ...database import get_db
from ...models import User
from .schemas import (
    ActivityResponse,
    AdminUserResponse,
    MeResponse,
    ProfileResponse,
    ProfileUpdate,
    RoleChangeResponse,
    RoleResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
)
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db)


# ============================================================================
# SELF SERVICE
# ============================================================================


@router.get("/auth/me", response_model=MeResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Current user with profile, roles and permission flags"""
    return service.get_me(current_user)


@router.get("/profiles/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    return service.get_profile(current_user)


@router.patch("/profiles/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    return service.update_profile(current_user, data)


@router.get("/profiles/me/activity", response_model=ActivityResponse)
async def get_my_activity(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Own bookings, class bookings and questions, newest first"""
    return service.get_activity(current_user)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("/admin/users", response_model=list[AdminUserResponse])
async def list_users(
    _admin: User = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
):
    return service.list_users()


@router.get("/admin/roles", response_model=list[RoleResponse])
async def list_roles(
    _admin: User = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
):
    return service.list_roles()


@router.put("/admin/users/{user_id}/roles", response_model=RoleUpdateResponse)
async def update_user_roles(
    user_id: str,
    data: RoleUpdateRequest,
    manager: User = Depends(require_role_manager),
    service: AccountService = Depends(get_account_service),
):
    return service.update_user_roles(user_id, data.roles, manager)


@router.get("/admin/users/{user_id}/role-changes", response_model=list[RoleChangeResponse])
async def list_role_changes(
    user_id: str,
    _admin: User = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
):
    return service.list_role_changes(user_id)
