"""
Ticket service exports
"""

from app.api.modules.v1.tickets.service.ticket_service import TicketService

__all__ = ["TicketService"]
