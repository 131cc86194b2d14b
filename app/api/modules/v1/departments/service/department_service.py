import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.modules.v1.departments.models.department_model import Department

logger = logging.getLogger("app")


class DepartmentService:
    """Lookup and seeding of ticket departments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, department_id: int) -> Optional[Department]:
        return await self.db.get(Department, department_id)

    async def list_departments(self) -> List[Department]:
        result = await self.db.execute(select(Department).order_by(Department.name))
        return list(result.scalars().all())

    async def ensure_departments(self, names: Iterable[str]) -> List[Department]:
        """
        Create any of ``names`` that do not exist yet.

        Returns:
            The departments that were created
        """
        result = await self.db.execute(select(Department.name))
        existing = set(result.scalars().all())

        created = []
        for name in names:
            if name in existing:
                continue
            department = Department(name=name)
            self.db.add(department)
            existing.add(name)
            created.append(department)

        if created:
            await self.db.commit()
            logger.info(f"Seeded departments: {', '.join(d.name for d in created)}")

        return created
