"""
Ticket Services
Business logic for ticket operations with proper database integration.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, or_, select

from app.api.core.config import settings
from app.api.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.api.modules.v1.departments.service.department_service import DepartmentService
from app.api.modules.v1.tickets.models.ticket_model import (
    Ticket,
    TicketPriority,
    TicketStatus,
)
from app.api.modules.v1.tickets.schemas.ticket_schema import (
    TicketCreate,
    TicketListResponse,
    TicketResponse,
    TicketSummaryResponse,
)
from app.api.modules.v1.tickets.utils.sla import SlaUrgency, as_utc, classify_urgency, compute_deadline
from app.api.modules.v1.tickets.utils.status_transitions import allowed_next, can_transition
from app.api.modules.v1.tickets.utils.ticket_number import generate_ticket_number
from app.api.modules.v1.users.models.users_model import User, UserRole
from app.api.utils.pagination import calculate_pagination, normalize_pagination

logger = logging.getLogger("app")

CLOSED_STATES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketService:
    """
    Service class for ticket-related business logic operations.

    Customers only see tickets they filed; staff see every ticket.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the TicketService with a database session.

        Args:
            db (AsyncSession): The database session for executing queries.
        """
        self.db = db

    @staticmethod
    def _visible_to(stmt, user: User):
        if not user.role.is_staff:
            return stmt.where(Ticket.customer_id == user.id)
        return stmt

    async def _generate_unique_number(self, now: datetime) -> str:
        for _ in range(settings.TICKET_NUMBER_MAX_ATTEMPTS):
            number = generate_ticket_number(now)
            taken = await self.db.scalar(select(Ticket.id).where(Ticket.number == number))
            if taken is None:
                return number
            logger.warning(f"Ticket number collision on {number}, retrying")

        raise ConflictError("Could not allocate a unique ticket number")

    async def _get_or_404(self, ticket_id: int) -> Ticket:
        ticket = await self.db.get(Ticket, ticket_id)
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    async def create_ticket(self, data: TicketCreate, current_user: User) -> Ticket:
        """
        File a new ticket.

        Args:
            data: Ticket creation data (subject, description, category,
                subcategory, priority, department_id, customer_id)
            current_user: Authenticated caller

        Returns:
            Created Ticket with status open and its SLA deadline set

        Raises:
            ForbiddenError: If a customer files on behalf of someone else
            ValidationError: If the department or customer is not valid
            ConflictError: If no unique ticket number could be allocated
        """
        if not current_user.role.is_staff and data.customer_id != current_user.id:
            logger.warning(
                f"User {current_user.id} tried to file a ticket for customer {data.customer_id}"
            )
            raise ForbiddenError("Customers can only file tickets for themselves")

        department = await DepartmentService(self.db).get_by_id(data.department_id)
        if not department:
            raise ValidationError(
                "Department not found", errors={"department_id": ["Department does not exist"]}
            )

        customer = await self.db.get(User, data.customer_id)
        if not customer or customer.role != UserRole.CUSTOMER or not customer.is_active:
            raise ValidationError(
                "Customer not found", errors={"customer_id": ["Must be an active customer"]}
            )

        now = datetime.now(timezone.utc)
        ticket = Ticket(
            number=await self._generate_unique_number(now),
            subject=data.subject,
            description=data.description,
            category=data.category,
            subcategory=data.subcategory,
            priority=data.priority,
            status=TicketStatus.OPEN,
            department_id=department.id,
            customer_id=customer.id,
            created_at=now,
            updated_at=now,
            sla_deadline=compute_deadline(data.priority, now),
        )

        self.db.add(ticket)
        await self.db.commit()
        await self.db.refresh(ticket)

        logger.info(
            f"Created ticket {ticket.number} (id={ticket.id}, priority={ticket.priority.value}) "
            f"for customer {customer.id}"
        )
        return ticket

    async def get_ticket_by_id(self, ticket_id: int, current_user: User) -> Ticket:
        """
        Fetch a ticket by id.

        Raises:
            NotFoundError: If the ticket does not exist or is not visible to the caller
        """
        stmt = self._visible_to(select(Ticket).where(Ticket.id == ticket_id), current_user)
        ticket = await self.db.scalar(stmt)
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    async def get_ticket_by_number(self, number: str, current_user: User) -> Ticket:
        """
        Fetch a ticket by its human-readable number.

        Raises:
            NotFoundError: If the ticket does not exist or is not visible to the caller
        """
        stmt = self._visible_to(
            select(Ticket).where(Ticket.number == number.strip().upper()), current_user
        )
        ticket = await self.db.scalar(stmt)
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    async def list_tickets(
        self,
        current_user: User,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        q: Optional[str] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
        assigned_agent_id: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> TicketListResponse:
        """
        List tickets with optional filters and pagination.

        Filters are AND-combined. ``q`` matches subject or description
        case-insensitively. Results are ordered newest first, ties by id.

        Args:
            current_user: Authenticated caller
            status: Exact status filter
            priority: Exact priority filter
            q: Free-text search term
            page: 1-indexed page, clamped to at least 1
            page_size: Items per page, clamped to [1, MAX_PAGE_SIZE]
            assigned_agent_id: Only tickets assigned to this agent
            department_id: Only tickets in this department

        Returns:
            TicketListResponse with items and pagination metadata
        """
        page, page_size = normalize_pagination(page, page_size)

        stmt = self._visible_to(select(Ticket), current_user)

        if status is not None:
            stmt = stmt.where(Ticket.status == status)
        if priority is not None:
            stmt = stmt.where(Ticket.priority == priority)
        if assigned_agent_id is not None:
            stmt = stmt.where(Ticket.assigned_agent_id == assigned_agent_id)
        if department_id is not None:
            stmt = stmt.where(Ticket.department_id == department_id)
        if q and q.strip():
            term = q.strip()
            stmt = stmt.where(
                or_(
                    Ticket.subject.icontains(term, autoescape=True),
                    Ticket.description.icontains(term, autoescape=True),
                )
            )

        total = await self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0

        offset = (page - 1) * page_size
        tickets = []
        # Pages past the end never reach the database, so huge offsets cannot overflow it.
        if offset < total:
            stmt = (
                stmt.order_by(Ticket.created_at.desc(), Ticket.id.asc())
                .offset(offset)
                .limit(page_size)
            )
            result = await self.db.execute(stmt)
            tickets = result.scalars().all()

        meta = calculate_pagination(total=total, page=page, limit=page_size)
        now = datetime.now(timezone.utc)

        return TicketListResponse(
            items=[TicketResponse.from_ticket(ticket, now) for ticket in tickets],
            total=meta["total"],
            page=meta["page"],
            pageSize=meta["pageSize"],
            totalPages=meta["totalPages"],
        )

    async def assign_ticket(self, ticket_id: int, agent_id: int) -> Ticket:
        """
        Assign a ticket to an agent.

        The ticket is looked up before the agent, so a missing ticket is
        reported even when the agent is also invalid.

        Raises:
            NotFoundError: If the ticket is missing or the agent is missing,
                inactive or not an agent
        """
        ticket = await self._get_or_404(ticket_id)

        agent = await self.db.get(User, agent_id)
        if not agent or agent.role != UserRole.AGENT or not agent.is_active:
            raise NotFoundError("Agent not found")

        ticket.assigned_agent_id = agent.id
        ticket.touch()
        self.db.add(ticket)
        await self.db.commit()
        await self.db.refresh(ticket)

        logger.info(f"Assigned ticket {ticket.number} to agent {agent.id}")
        return ticket

    async def update_status(self, ticket_id: int, requested: TicketStatus) -> Ticket:
        """
        Move a ticket to ``requested`` if the workflow allows it.

        Raises:
            NotFoundError: If the ticket does not exist
            InvalidTransitionError: If the transition is not permitted
        """
        ticket = await self._get_or_404(ticket_id)

        if not can_transition(ticket.status, requested):
            allowed = [s.value for s in allowed_next(ticket.status)]
            logger.warning(
                f"Rejected transition {ticket.status.value} -> {requested.value} "
                f"on ticket {ticket.number}"
            )
            raise InvalidTransitionError(
                f"Cannot move ticket from {ticket.status.value} to {requested.value}",
                errors={"allowed": allowed},
            )

        previous = ticket.status
        ticket.status = requested
        ticket.touch()
        self.db.add(ticket)
        await self.db.commit()
        await self.db.refresh(ticket)

        logger.info(f"Ticket {ticket.number} moved {previous.value} -> {requested.value}")
        return ticket

    async def get_summary(self, current_user: User) -> TicketSummaryResponse:
        """
        Aggregate dashboard metrics over the tickets visible to the caller.

        ``avg_resolution_hours`` is the mean of ``updated_at - created_at``
        over resolved tickets, rounded to one decimal.
        """
        stmt = self._visible_to(
            select(
                Ticket.status,
                Ticket.priority,
                Ticket.created_at,
                Ticket.updated_at,
                Ticket.sla_deadline,
            ),
            current_user,
        )
        rows = (await self.db.execute(stmt)).all()

        now = datetime.now(timezone.utc)
        open_rows = [row for row in rows if row.status not in CLOSED_STATES]
        resolved_rows = [row for row in rows if row.status == TicketStatus.RESOLVED]

        avg_resolution_hours = None
        if resolved_rows:
            total_hours = sum(
                (as_utc(row.updated_at) - as_utc(row.created_at)).total_seconds() / 3600
                for row in resolved_rows
            )
            avg_resolution_hours = round(total_hours / len(resolved_rows), 1)

        urgencies = [classify_urgency(row.sla_deadline, now) for row in open_rows]

        return TicketSummaryResponse(
            total=len(rows),
            open=len(open_rows),
            open_critical=sum(1 for row in open_rows if row.priority == TicketPriority.CRITICAL),
            open_high=sum(1 for row in open_rows if row.priority == TicketPriority.HIGH),
            resolved=len(resolved_rows),
            avg_resolution_hours=avg_resolution_hours,
            sla_overdue=urgencies.count(SlaUrgency.OVERDUE),
            sla_critical=urgencies.count(SlaUrgency.CRITICAL),
        )
