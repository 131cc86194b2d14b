import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.dependencies.auth import get_current_user, require_admin
from app.api.db.database import get_db
from app.api.modules.v1.users.models.users_model import User
from app.api.modules.v1.users.schemas.user_schema import CreateUserRequest, UserResponse
from app.api.modules.v1.users.service.user import UserService
from app.api.utils.response_payloads import success_response

router = APIRouter(prefix="/users", tags=["Users"])

logger = logging.getLogger("app")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an agent or admin account.

    Requirements:
    - Caller must be an admin

    Args:
        payload: Name, email, password and user_type (agent or admin)
        current_user: Authenticated admin
        db: Database session dependency

    Returns:
        Success response with the created user

    Raises:
        ValidationError: 400 if user_type is not a staff role
        ConflictError: 409 if the email is already in use
        ForbiddenError: 403 if the caller is not an admin
    """
    user = await UserService(db).create_staff_user(payload, payload.user_type)
    logger.info(f"Admin {current_user.id} created {user.role.value} account {user.id}")

    return success_response(
        status_code=status.HTTP_201_CREATED,
        message="User created",
        data=UserResponse.model_validate(user),
    )


@router.get("/{user_id}", status_code=status.HTTP_200_OK)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Fetch a user by id."""
    user = await UserService(db).get_user(user_id)

    return success_response(
        status_code=status.HTTP_200_OK,
        message="User retrieved",
        data=UserResponse.model_validate(user),
    )
