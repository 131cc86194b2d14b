from app.api.modules.v1.tickets.models.ticket_model import TicketStatus

# Every edge not listed here is rejected, including self-transitions.
ALLOWED_TRANSITIONS = {
    TicketStatus.OPEN: frozenset({TicketStatus.IN_PROGRESS}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.RESOLVED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.CLOSED}),
}


def can_transition(current: TicketStatus, requested: TicketStatus) -> bool:
    """
    Check whether a ticket may move from ``current`` to ``requested``.

    Examples:
        >>> can_transition(TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
        True
        >>> can_transition(TicketStatus.OPEN, TicketStatus.RESOLVED)
        False
    """
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def allowed_next(current: TicketStatus) -> list[TicketStatus]:
    """Statuses reachable from ``current`` in one step."""
    return sorted(ALLOWED_TRANSITIONS.get(current, frozenset()), key=list(TicketStatus).index)
