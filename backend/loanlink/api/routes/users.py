"""User Routes — registration (upsert-by-email), profile and admin role management."""

import logging

from fastapi import APIRouter, Depends

from loanlink.api.dependencies import get_user_directory
from loanlink.api.session_guard import get_caller
from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import Caller, Operation, Role
from loanlink.schemas.user import RoleUpdate, UserCreate
from loanlink.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("")
async def register_user(
    body: UserCreate, users: UserDirectory = Depends(get_user_directory),
):
    """Create the user if the email is new; otherwise report it already exists."""
    return await users.register(
        body.email, name=body.name, photo_url=body.photo_url, role=Role(body.role),
    )


@router.get("/me")
async def get_me(
    caller: Caller = Depends(get_caller),
    users: UserDirectory = Depends(get_user_directory),
):
    user = await users.get(caller.email)
    return {"email": caller.email, "role": caller.role.value, "user": user}


@router.get("")
async def list_users(
    caller: Caller = Depends(get_caller),
    users: UserDirectory = Depends(get_user_directory),
):
    authorize(Operation.LIST_USERS, caller)
    return {"users": await users.list_users()}


@router.patch("/{email}/role")
async def change_role(
    email: str,
    body: RoleUpdate,
    caller: Caller = Depends(get_caller),
    users: UserDirectory = Depends(get_user_directory),
):
    authorize(Operation.CHANGE_USER_ROLE, caller)
    result = await users.set_role(email, body.role)
    logger.info(
        f"Role set to {body.role.value}",
        extra={"user_email": email},
    )
    return result.to_response()
