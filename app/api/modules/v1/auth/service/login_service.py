import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.exceptions import UnauthorizedError
from app.api.modules.v1.auth.schemas.login import LoginResponse
from app.api.modules.v1.users.schemas.user_schema import UserResponse
from app.api.modules.v1.users.service.user import UserCRUD
from app.api.utils.jwt import create_access_token, token_expires_in
from app.api.utils.password import verify_password

logger = logging.getLogger("app")

INVALID_CREDENTIALS = "Invalid email or password"


class LoginService:
    """
    Password login issuing bearer tokens with identity and role claims.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Authenticate user and return an access token.

        Unknown email, wrong password and inactive accounts all fail the
        same way so callers cannot probe which emails exist.

        Args:
            email: User email
            password: Plain text password

        Returns:
            LoginResponse with token and user data

        Raises:
            UnauthorizedError: If the credentials are not accepted
        """
        user = await UserCRUD.get_by_email(self.db, email)

        if not user:
            logger.warning(f"Login failed: user not found for email {email}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Login failed: invalid password for {email}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.warning(f"Login blocked: inactive account {email}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = create_access_token(user_id=user.id, email=user.email, role=user.role.value)
        logger.info(f"User {user.id} logged in")

        return LoginResponse(
            access_token=token,
            expires_in=token_expires_in(),
            user=UserResponse.model_validate(user),
        )
