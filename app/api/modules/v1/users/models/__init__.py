from app.api.modules.v1.users.models.users_model import User, UserRole

__all__ = ["User", "UserRole"]
