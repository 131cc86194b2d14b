from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.api.modules.v1.users.models.users_model import UserRole


class UserBase(BaseModel):
    """Fields shared by every account-creation request."""

    first_name: str = Field(
        ..., min_length=1, max_length=100, validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: str = Field(
        "", max_length=100, validation_alias=AliasChoices("last_name", "lastName")
    )
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("first_name", mode="before")
    @classmethod
    def validate_first_name(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("First name cannot be empty")
        return str(v).strip()

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if not v or not str(v).strip():
            raise ValueError("Email cannot be empty")
        return str(v).strip().lower()


class CreateUserRequest(UserBase):
    """Admin request to create a staff account (agent or admin)."""

    user_type: UserRole = Field(
        UserRole.AGENT, validation_alias=AliasChoices("user_type", "userType")
    )

    @field_validator("user_type", mode="before")
    @classmethod
    def parse_user_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RegisterRequest(UserBase):
    """Customer self-registration."""


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
