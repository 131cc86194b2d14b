from app.api.modules.v1.tickets.schemas.ticket_schema import (
    SlaInfo,
    TicketAssignRequest,
    TicketCreate,
    TicketListResponse,
    TicketResponse,
    TicketStatusUpdateRequest,
    TicketSummaryResponse,
)

__all__ = [
    "SlaInfo",
    "TicketAssignRequest",
    "TicketCreate",
    "TicketListResponse",
    "TicketResponse",
    "TicketStatusUpdateRequest",
    "TicketSummaryResponse",
]
