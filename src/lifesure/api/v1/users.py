# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""User registration and role endpoints."""

from beartype import beartype
from fastapi import APIRouter, Depends, Response

from ...core.result_types import Ok
from ...models.user import RoleUpdate, UserRegistration, UserRole
from ...services.user_service import UserService
from ..dependencies import get_user_service
from ..response_patterns import ErrorResponse, SuccessResponse, handle_result

router = APIRouter()


@router.post("/users")
@beartype
async def register_user(
    registration: UserRegistration,
    response: Response,
    users: UserService = Depends(get_user_service),
) -> SuccessResponse | ErrorResponse:
    """Register on first sign-in; known emails return the stored user."""
    result = await users.register(registration)
    return handle_result(result, response)


@router.get("/users")
@beartype
async def list_users(
    response: Response,
    role: UserRole | None = None,
    users: UserService = Depends(get_user_service),
) -> SuccessResponse | ErrorResponse:
    result = await users.list_users(role)
    return handle_result(result, response)


@router.get("/users/{email}/role")
@beartype
async def get_user_role(
    email: str,
    response: Response,
    users: UserService = Depends(get_user_service),
) -> SuccessResponse | ErrorResponse:
    result = await users.get_role(email)
    if isinstance(result, Ok):
        result = Ok({"role": result.value.value})
    return handle_result(result, response)


@router.patch("/users/{email}/role")
@beartype
async def set_user_role(
    email: str,
    update: RoleUpdate,
    response: Response,
    users: UserService = Depends(get_user_service),
) -> SuccessResponse | ErrorResponse:
    """Promote or demote a user."""
    result = await users.set_role(email, update.role)
    return handle_result(result, response)
