from pydantic import BaseModel, EmailStr, Field, field_validator

from app.api.modules.v1.users.schemas.user_schema import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        if not v or not str(v).strip():
            raise ValueError("Email cannot be empty")
        return str(v).strip().lower()

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        if not v or not str(v).strip():
            raise ValueError("Password cannot be empty")
        return v


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
