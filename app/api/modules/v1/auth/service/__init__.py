"""
Authentication service module.
"""
from app.api.modules.v1.auth.service.login_service import LoginService

__all__ = [
    "LoginService",
]
