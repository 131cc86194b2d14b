"""
Ticket Routes
API endpoints for filing, browsing and working support tickets.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.dependencies.auth import get_current_user, require_staff
from app.api.core.exceptions import ValidationError
from app.api.db.database import get_db
from app.api.modules.v1.tickets.models.ticket_model import TicketPriority, TicketStatus
from app.api.modules.v1.tickets.schemas.ticket_schema import (
    TicketAssignRequest,
    TicketCreate,
    TicketResponse,
    TicketStatusUpdateRequest,
)
from app.api.modules.v1.tickets.service.ticket_service import TicketService
from app.api.modules.v1.users.models.users_model import User
from app.api.utils.response_payloads import success_response

router = APIRouter(prefix="/tickets", tags=["Tickets"])

logger = logging.getLogger("app")


def _parse_filter(enum_cls, value: Optional[str], field: str):
    if value is None or not value.strip():
        return None
    try:
        return enum_cls.parse(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field} filter", errors={field: [str(e)]})


@router.get("", status_code=status.HTTP_200_OK)
async def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status", description="Ticket status"),
    priority: Optional[str] = Query(None, description="Ticket priority"),
    q: Optional[str] = Query(None, description="Search subject and description"),
    page: int = Query(1, description="Page number, 1-indexed"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="Items per page"),
    assigned_agent_id: Optional[int] = Query(None, description="Assigned agent id"),
    department_id: Optional[int] = Query(None, description="Department id"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List tickets visible to the caller.

    Filters are optional and combined with AND. Out-of-range ``page`` and
    ``pageSize`` values are clamped rather than rejected.

    Returns:
        Success response with items, total, page, pageSize and totalPages
    """
    result = await TicketService(db).list_tickets(
        current_user=current_user,
        status=_parse_filter(TicketStatus, status_filter, "status"),
        priority=_parse_filter(TicketPriority, priority, "priority"),
        q=q,
        page=page,
        page_size=page_size,
        assigned_agent_id=assigned_agent_id,
        department_id=department_id,
    )

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Tickets retrieved",
        data=result,
    )


@router.get("/summary", status_code=status.HTTP_200_OK)
async def get_ticket_summary(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard metrics over the tickets visible to the caller."""
    summary = await TicketService(db).get_summary(current_user)

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Ticket summary retrieved",
        data=summary,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    File a new ticket.

    The ticket starts in ``open`` with a generated number and an SLA
    deadline derived from its priority.

    Raises:
        ValidationError: 400 if the subject is blank or a reference does not resolve
        ForbiddenError: 403 if a customer files for another customer
    """
    ticket = await TicketService(db).create_ticket(payload, current_user)

    return success_response(
        status_code=status.HTTP_201_CREATED,
        message="Ticket created",
        data=TicketResponse.from_ticket(ticket),
    )


@router.get("/number/{ticket_number}", status_code=status.HTTP_200_OK)
async def get_ticket_by_number(
    ticket_number: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Fetch a ticket by its number, e.g. ``HD-2025-0042``."""
    ticket = await TicketService(db).get_ticket_by_number(ticket_number, current_user)

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Ticket retrieved",
        data=TicketResponse.from_ticket(ticket),
    )


@router.get("/{ticket_id}", status_code=status.HTTP_200_OK)
async def get_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ticket = await TicketService(db).get_ticket_by_id(ticket_id, current_user)

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Ticket retrieved",
        data=TicketResponse.from_ticket(ticket),
    )


@router.put("/{ticket_id}/assign", status_code=status.HTTP_200_OK)
async def assign_ticket(
    ticket_id: int,
    payload: TicketAssignRequest,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """
    Assign a ticket to an agent.

    Requirements:
    - Caller must be an admin or agent

    Raises:
        NotFoundError: 404 if the ticket or agent does not exist
    """
    ticket = await TicketService(db).assign_ticket(ticket_id, payload.agent_id)
    logger.info(f"User {current_user.id} assigned ticket {ticket.id}")

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Ticket assigned",
        data=TicketResponse.from_ticket(ticket),
    )


@router.put("/{ticket_id}/status", status_code=status.HTTP_200_OK)
async def update_ticket_status(
    ticket_id: int,
    payload: TicketStatusUpdateRequest,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """
    Move a ticket along the workflow.

    Allowed moves: open -> in_progress -> resolved -> closed.

    Raises:
        InvalidTransitionError: 400 if the move is not allowed
        NotFoundError: 404 if the ticket does not exist
    """
    ticket = await TicketService(db).update_status(ticket_id, payload.new_status)

    return success_response(
        status_code=status.HTTP_200_OK,
        message="Ticket status updated",
        data=TicketResponse.from_ticket(ticket),
    )
