"""
Core dependencies module.
"""
from app.api.core.dependencies.auth import (
    get_current_user,
    require_admin,
    require_roles,
    require_staff,
)

__all__ = [
    "get_current_user",
    "require_admin",
    "require_roles",
    "require_staff",
]
