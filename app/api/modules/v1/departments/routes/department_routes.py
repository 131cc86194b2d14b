from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.dependencies.auth import get_current_user
from app.api.db.database import get_db
from app.api.modules.v1.departments.schemas.department_schema import DepartmentResponse
from app.api.modules.v1.departments.service.department_service import DepartmentService
from app.api.modules.v1.users.models.users_model import User
from app.api.utils.response_payloads import success_response

router = APIRouter(prefix="/departments", tags=["Departments"])


@router.get("", status_code=status.HTTP_200_OK)
async def list_departments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List all departments ordered by name."""
    departments = await DepartmentService(db).list_departments()

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Departments retrieved",
        data=[DepartmentResponse.model_validate(d) for d in departments],
    )
