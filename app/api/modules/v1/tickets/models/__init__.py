"""
Ticket models package.
"""

from app.api.modules.v1.tickets.models.ticket_model import Ticket, TicketPriority, TicketStatus

__all__ = [
    "Ticket",
    "TicketStatus",
    "TicketPriority",
]
