"""
Authentication schemas module.
"""
from app.api.modules.v1.auth.schemas.login import LoginRequest, LoginResponse

__all__ = [
    "LoginRequest",
    "LoginResponse",
]
