"""
Ticket Schemas
Pydantic schemas for ticket-related API operations.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.api.modules.v1.tickets.models.ticket_model import (
    Ticket,
    TicketPriority,
    TicketStatus,
)
from app.api.modules.v1.tickets.utils.sla import SlaUrgency, classify_urgency, hours_until


class TicketCreate(BaseModel):
    """Schema for creating a new ticket."""

    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(..., max_length=255, description="Short summary (required)")
    description: str = Field("", description="Free-text details")
    category: str = Field(..., max_length=100, description="Ticket category (required)")
    subcategory: Optional[str] = Field(
        None, max_length=100, description="Optional refinement of the category"
    )
    priority: TicketPriority = Field(
        TicketPriority.MEDIUM,
        description="low, medium (normal), high or critical (urgent); ordinals 0-3 accepted",
    )
    department_id: int = Field(
        ..., validation_alias=AliasChoices("department_id", "departmentId")
    )
    customer_id: int = Field(..., validation_alias=AliasChoices("customer_id", "customerId"))

    @field_validator("subject", mode="before")
    @classmethod
    def validate_subject(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Subject cannot be empty")
        return str(v).strip()

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Category cannot be empty")
        return str(v).strip()

    @field_validator("subcategory", mode="before")
    @classmethod
    def normalize_subcategory(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v):
        return "" if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v):
        if v is None:
            return TicketPriority.MEDIUM
        return TicketPriority.parse(v)


class TicketAssignRequest(BaseModel):
    """Schema for assigning a ticket to an agent."""

    agent_id: int = Field(..., validation_alias=AliasChoices("agent_id", "agentId"))


class TicketStatusUpdateRequest(BaseModel):
    """Schema for moving a ticket to a new status."""

    new_status: TicketStatus = Field(
        ..., validation_alias=AliasChoices("new_status", "newStatus", "status")
    )

    @field_validator("new_status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return TicketStatus.parse(v)


class SlaInfo(BaseModel):
    """SLA state of a ticket at response time."""

    deadline: datetime
    status: SlaUrgency
    hours_remaining: float


class TicketResponse(BaseModel):
    """Schema for ticket response."""

    id: int
    number: str
    subject: str
    description: str
    category: str
    subcategory: Optional[str] = None
    status: TicketStatus
    priority: TicketPriority
    department_id: int
    customer_id: int
    assigned_agent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    sla_deadline: datetime
    sla: Optional[SlaInfo] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_ticket(cls, ticket: Ticket, now: Optional[datetime] = None) -> "TicketResponse":
        """Build the response and attach the SLA state as of ``now``."""
        response = cls.model_validate(ticket)
        response.sla = SlaInfo(
            deadline=ticket.sla_deadline,
            status=classify_urgency(ticket.sla_deadline, now),
            hours_remaining=round(hours_until(ticket.sla_deadline, now), 2),
        )
        return response


class TicketListResponse(BaseModel):
    """Paginated ticket listing."""

    model_config = ConfigDict(populate_by_name=True)

    items: List[TicketResponse]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")


class TicketSummaryResponse(BaseModel):
    """Dashboard metrics over the tickets visible to the caller."""

    total: int
    open: int
    open_critical: int
    open_high: int
    resolved: int
    avg_resolution_hours: Optional[float] = None
    sla_overdue: int
    sla_critical: int
