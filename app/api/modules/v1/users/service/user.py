import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.api.modules.v1.users.models.users_model import User, UserRole
from app.api.modules.v1.users.schemas.user_schema import UserBase
from app.api.utils.password import hash_password

logger = logging.getLogger("app")

STAFF_ROLES = (UserRole.ADMIN, UserRole.AGENT)


class UserCRUD:
    """CRUD operations for User model."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        return await db.scalar(select(User).where(User.email == email.strip().lower()))

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        first_name: str,
        last_name: str,
        hashed_password: str,
        role: UserRole,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user.

        Args:
            db: Async database session
            email: User email address
            first_name: User's first name
            last_name: User's last name
            hashed_password: Hashed password
            role: Account role
            is_active: Whether the user account is active (default: True)

        Returns:
            User: Created user object
        """
        user = User(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            hashed_password=hashed_password,
            role=role,
            is_active=is_active,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: id={user.id}, email={user.email}, role={role.value}")

        return user


class UserService:
    """Account creation rules on top of UserCRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _create(self, data: UserBase, role: UserRole) -> User:
        if await UserCRUD.get_by_email(self.db, data.email):
            logger.warning(f"Rejected account creation: email {data.email} already in use")
            raise ConflictError("Email already in use")

        user = await UserCRUD.create_user(
            db=self.db,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            hashed_password=hash_password(data.password),
            role=role,
        )
        await self.db.commit()
        return user

    async def create_staff_user(self, data, role: UserRole) -> User:
        """
        Create an agent or admin account.

        Raises:
            ValidationError: If the role is not a staff role
            ConflictError: If the email is already registered
        """
        if role not in STAFF_ROLES:
            raise ValidationError("Invalid user type for this endpoint")
        return await self._create(data, role)

    async def register_customer(self, data) -> User:
        """
        Create a customer account.

        Raises:
            ConflictError: If the email is already registered
        """
        return await self._create(data, UserRole.CUSTOMER)

    async def get_user(self, user_id: int) -> User:
        user = await UserCRUD.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def ensure_admin(self, email: str, password: str) -> Optional[User]:
        """
        Seed an admin account when none exists.

        Returns:
            The created admin, or None if an admin was already present
        """
        existing = await self.db.scalar(select(User).where(User.role == UserRole.ADMIN).limit(1))
        if existing:
            return None

        admin = await UserCRUD.create_user(
            db=self.db,
            email=email,
            first_name="Administrator",
            last_name="",
            hashed_password=hash_password(password),
            role=UserRole.ADMIN,
        )
        await self.db.commit()
        logger.info(f"Seeded default admin account {admin.email}")
        return admin
