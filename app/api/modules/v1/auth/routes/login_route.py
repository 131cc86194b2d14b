import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.dependencies.auth import get_current_user
from app.api.db.database import get_db
from app.api.modules.v1.auth.schemas.login import LoginRequest
from app.api.modules.v1.auth.service.login_service import LoginService
from app.api.modules.v1.users.models.users_model import User
from app.api.modules.v1.users.schemas.user_schema import RegisterRequest, UserResponse
from app.api.modules.v1.users.service.user import UserService
from app.api.utils.response_payloads import auth_response, success_response

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("app")


@router.post("/login", status_code=status.HTTP_200_OK)
async def login(login_data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate a user and issue a bearer access token.

    Args:
        login_data (LoginRequest): Email and password.
        db (AsyncSession, optional): Database session dependency.

    Returns:
        JSON response with access_token, token_type, expires_in and user.

    Raises:
        UnauthorizedError: 401 if the credentials are invalid or the account is inactive.
    """
    result = await LoginService(db).login(email=login_data.email, password=login_data.password)

    return auth_response(
        status_code=status.HTTP_200_OK,
        message="Login successful",
        access_token=result.access_token,
        data=result.model_dump(exclude={"access_token"}),
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_customer(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """
    Register a customer account.

    Staff accounts are created by admins through ``POST /users``.

    Raises:
        ConflictError: 409 if the email is already registered.
    """
    user = await UserService(db).register_customer(payload)

    return success_response(
        status_code=status.HTTP_201_CREATED,
        message="Account created",
        data=UserResponse.model_validate(user),
    )


@router.get("/me", status_code=status.HTTP_200_OK)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the profile of the authenticated caller."""
    return success_response(
        status_code=status.HTTP_200_OK,
        message="User retrieved",
        data=UserResponse.model_validate(current_user),
    )
