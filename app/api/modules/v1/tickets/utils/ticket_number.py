import secrets
from datetime import datetime, timezone
from typing import Optional

TICKET_NUMBER_PREFIX = "HD"


def generate_ticket_number(now: Optional[datetime] = None) -> str:
    """
    Generate a human-readable ticket number such as ``HD-2025-0042``.

    The year comes from ``now`` and the suffix is random in 1..9999, so
    numbers are not collision-free on their own; the store enforces
    uniqueness and retries.
    """
    now = now or datetime.now(timezone.utc)
    suffix = secrets.randbelow(9999) + 1
    return f"{TICKET_NUMBER_PREFIX}-{now.year}-{suffix:04d}"
