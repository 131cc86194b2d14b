from fastapi import APIRouter

from app.api.modules.v1.auth.routes.login_route import router as auth_router
from app.api.modules.v1.departments.routes.department_routes import router as departments_router
from app.api.modules.v1.tickets.routes import router as tickets_router
from app.api.modules.v1.users.routes.users_route import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(tickets_router)
router.include_router(departments_router)
