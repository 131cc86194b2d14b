import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.exceptions import ForbiddenError, UnauthorizedError
from app.api.db.database import get_db
from app.api.modules.v1.users.models.users_model import User, UserRole
from app.api.utils.jwt import decode_token

logger = logging.getLogger("app")

# Missing credentials are reported as 401 by get_current_user, not 403.
security = HTTPBearer(auto_error=False)


async def authorize_token(db: AsyncSession, token: str) -> User:
    """
    Resolve a bearer token to an active user.

    Enforces:
    - Valid JWT signature
    - Token not expired
    - Subject claim present and numeric
    - User exists and is active

    Raises:
        UnauthorizedError: If any check fails
    """
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise UnauthorizedError("Invalid token payload")

    user = await db.get(User, int(subject))

    if not user:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("User account is inactive")

    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the bearer token, return the authenticated user.

    Raises:
        UnauthorizedError: 401 if the header is missing or authentication fails
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authenticated")

    user = await authorize_token(db, credentials.credentials)
    logger.info(f"Authenticated user: {user.email}")
    return user


def require_roles(*roles: UserRole):
    """
    Build a dependency that only lets users with one of ``roles`` through.

    Example:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """

    async def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"Forbidden: user {current_user.id} with role {current_user.role.value} "
                f"requires one of {[role.value for role in roles]}"
            )
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return _check_role


require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.ADMIN, UserRole.AGENT)
