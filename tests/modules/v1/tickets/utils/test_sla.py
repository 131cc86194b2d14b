from datetime import datetime, timedelta, timezone

import pytest

from app.api.modules.v1.tickets.models.ticket_model import TicketPriority
from app.api.modules.v1.tickets.utils.sla import (
    SLA_HOURS,
    SlaUrgency,
    classify_urgency,
    compute_deadline,
    hours_until,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "priority, hours",
    [
        (TicketPriority.CRITICAL, 2),
        (TicketPriority.HIGH, 8),
        (TicketPriority.MEDIUM, 24),
        (TicketPriority.LOW, 72),
    ],
)
def test_compute_deadline_uses_priority_hours(priority, hours):
    assert compute_deadline(priority, NOW) - NOW == timedelta(hours=hours)
    assert SLA_HOURS[priority] == hours


def test_compute_deadline_accepts_priority_aliases():
    assert compute_deadline("urgent", NOW) == NOW + timedelta(hours=2)
    assert compute_deadline("normal", NOW) == NOW + timedelta(hours=24)


def test_classify_overdue():
    assert classify_urgency(NOW - timedelta(minutes=1), NOW) == SlaUrgency.OVERDUE


def test_classify_critical_inside_two_hours():
    assert classify_urgency(NOW + timedelta(minutes=90), NOW) == SlaUrgency.CRITICAL
    assert classify_urgency(NOW, NOW) == SlaUrgency.CRITICAL


def test_classify_normal_at_or_beyond_two_hours():
    assert classify_urgency(NOW + timedelta(hours=2), NOW) == SlaUrgency.NORMAL
    assert classify_urgency(NOW + timedelta(days=1), NOW) == SlaUrgency.NORMAL


def test_classify_missing_deadline_is_normal():
    assert classify_urgency(None, NOW) == SlaUrgency.NORMAL


def test_naive_datetimes_are_treated_as_utc():
    naive_deadline = datetime(2025, 3, 10, 11, 0)
    assert classify_urgency(naive_deadline, NOW) == SlaUrgency.OVERDUE
    assert hours_until(naive_deadline, NOW) == pytest.approx(-1.0)


def test_hours_until_is_signed():
    assert hours_until(NOW + timedelta(hours=3), NOW) == pytest.approx(3.0)
    assert hours_until(NOW - timedelta(minutes=30), NOW) == pytest.approx(-0.5)
    assert hours_until(None, NOW) is None
