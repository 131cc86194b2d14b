"""
SLA calculation for tickets.

The deadline is a fixed offset from creation time, looked up from the
ticket priority. Urgency is derived from the remaining time only.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from app.api.modules.v1.tickets.models.ticket_model import TicketPriority

SLA_HOURS = {
    TicketPriority.CRITICAL: 2,
    TicketPriority.HIGH: 8,
    TicketPriority.MEDIUM: 24,
    TicketPriority.LOW: 72,
}

CRITICAL_WINDOW = timedelta(hours=2)


class SlaUrgency(str, Enum):
    OVERDUE = "overdue"
    CRITICAL = "critical"
    NORMAL = "normal"


def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_deadline(priority: TicketPriority, created_at: datetime) -> datetime:
    """
    Compute the SLA deadline for a ticket.

    Args:
        priority: Ticket priority
        created_at: Ticket creation time

    Returns:
        created_at shifted by the SLA hours for the priority

    Examples:
        >>> compute_deadline(TicketPriority.HIGH, datetime(2025, 1, 1, tzinfo=timezone.utc))
        datetime.datetime(2025, 1, 1, 8, 0, tzinfo=datetime.timezone.utc)
    """
    return created_at + timedelta(hours=SLA_HOURS[TicketPriority.parse(priority)])


def hours_until(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[float]:
    """Signed hours from ``now`` to ``deadline``; negative once overdue."""
    if deadline is None:
        return None
    now = as_utc(now or datetime.now(timezone.utc))
    return (as_utc(deadline) - now).total_seconds() / 3600


def classify_urgency(deadline: Optional[datetime], now: Optional[datetime] = None) -> SlaUrgency:
    """
    Bucket a deadline relative to ``now``.

    - OVERDUE if the deadline has passed
    - CRITICAL if less than two hours remain
    - NORMAL otherwise, or when there is no deadline
    """
    if deadline is None:
        return SlaUrgency.NORMAL

    now = as_utc(now or datetime.now(timezone.utc))
    remaining = as_utc(deadline) - now

    if remaining < timedelta(0):
        return SlaUrgency.OVERDUE
    if remaining < CRITICAL_WINDOW:
        return SlaUrgency.CRITICAL
    return SlaUrgency.NORMAL
