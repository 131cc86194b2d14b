from app.api.modules.v1.departments.models.department_model import Department

__all__ = ["Department"]
