from datetime import datetime, timedelta, timezone

import pytest

from app.api.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.api.modules.v1.tickets.models.ticket_model import Ticket, TicketPriority, TicketStatus
from app.api.modules.v1.tickets.schemas.ticket_schema import TicketCreate
from app.api.modules.v1.tickets.service.ticket_service import TicketService
from app.api.modules.v1.tickets.utils.sla import SLA_HOURS, as_utc
from app.api.modules.v1.users.models.users_model import UserRole


def _payload(customer, department, **overrides):
    data = {
        "subject": "Printer on fire",
        "description": "Third floor printer is smoking",
        "category": "Hardware",
        "priority": "high",
        "department_id": department.id,
        "customer_id": customer.id,
    }
    data.update(overrides)
    return TicketCreate(**data)


async def _insert_ticket(session, customer, department, **overrides):
    now = datetime.now(timezone.utc)
    fields = {
        "number": f"HD-2025-{overrides.pop('suffix', 1):04d}",
        "subject": "Seeded ticket",
        "description": "",
        "category": "General",
        "status": TicketStatus.OPEN,
        "priority": TicketPriority.MEDIUM,
        "department_id": department.id,
        "customer_id": customer.id,
        "created_at": now,
        "updated_at": now,
        "sla_deadline": now + timedelta(hours=24),
    }
    fields.update(overrides)
    ticket = Ticket(**fields)
    session.add(ticket)
    await session.commit()
    await session.refresh(ticket)
    return ticket


@pytest.mark.asyncio
async def test_create_ticket_sets_number_status_and_sla(test_session, customer, department):
    service = TicketService(test_session)

    ticket = await service.create_ticket(_payload(customer, department), customer)

    assert ticket.id is not None
    assert ticket.number.startswith(f"HD-{datetime.now(timezone.utc).year}-")
    assert ticket.status == TicketStatus.OPEN
    assert ticket.priority == TicketPriority.HIGH
    assert ticket.assigned_agent_id is None
    assert as_utc(ticket.sla_deadline) - as_utc(ticket.created_at) == timedelta(hours=8)


@pytest.mark.asyncio
async def test_create_ticket_rejects_unknown_department(test_session, customer, department):
    service = TicketService(test_session)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_ticket(_payload(customer, department, department_id=999), customer)

    assert "department_id" in exc_info.value.errors


@pytest.mark.asyncio
async def test_create_ticket_requires_active_customer(
    test_session, make_user, agent, admin, department
):
    service = TicketService(test_session)
    inactive = await make_user(UserRole.CUSTOMER, is_active=False)

    with pytest.raises(ValidationError):
        await service.create_ticket(_payload(inactive, department), admin)

    with pytest.raises(ValidationError):
        await service.create_ticket(_payload(agent, department), admin)


@pytest.mark.asyncio
async def test_customer_cannot_file_for_someone_else(test_session, make_user, customer, department):
    other = await make_user(UserRole.CUSTOMER)
    service = TicketService(test_session)

    with pytest.raises(ForbiddenError):
        await service.create_ticket(_payload(other, department), customer)


@pytest.mark.asyncio
async def test_staff_can_file_on_behalf_of_customer(test_session, agent, customer, department):
    ticket = await TicketService(test_session).create_ticket(_payload(customer, department), agent)
    assert ticket.customer_id == customer.id


@pytest.mark.asyncio
async def test_ticket_number_collision_exhausts_retries(
    test_session, customer, department, monkeypatch
):
    monkeypatch.setattr(
        "app.api.modules.v1.tickets.service.ticket_service.generate_ticket_number",
        lambda now=None: "HD-2025-0001",
    )
    service = TicketService(test_session)
    await service.create_ticket(_payload(customer, department), customer)

    with pytest.raises(ConflictError):
        await service.create_ticket(_payload(customer, department), customer)


@pytest.mark.asyncio
async def test_ticket_number_collision_retries_until_free(
    test_session, customer, department, monkeypatch
):
    numbers = iter(["HD-2025-0001", "HD-2025-0001", "HD-2025-0002"])
    monkeypatch.setattr(
        "app.api.modules.v1.tickets.service.ticket_service.generate_ticket_number",
        lambda now=None: next(numbers),
    )
    service = TicketService(test_session)

    first = await service.create_ticket(_payload(customer, department), customer)
    second = await service.create_ticket(_payload(customer, department), customer)

    assert first.number == "HD-2025-0001"
    assert second.number == "HD-2025-0002"


@pytest.mark.asyncio
async def test_get_ticket_by_id_and_number(test_session, customer, admin, department):
    service = TicketService(test_session)
    created = await service.create_ticket(_payload(customer, department), customer)

    by_id = await service.get_ticket_by_id(created.id, admin)
    by_number = await service.get_ticket_by_number(created.number.lower(), admin)

    assert by_id.id == created.id
    assert by_number.id == created.id


@pytest.mark.asyncio
async def test_get_ticket_missing_raises_not_found(test_session, admin):
    service = TicketService(test_session)

    with pytest.raises(NotFoundError):
        await service.get_ticket_by_id(999, admin)
    with pytest.raises(NotFoundError):
        await service.get_ticket_by_number("HD-1999-0001", admin)


@pytest.mark.asyncio
async def test_customer_cannot_see_other_customers_ticket(
    test_session, make_user, customer, department
):
    other = await make_user(UserRole.CUSTOMER)
    ticket = await _insert_ticket(test_session, other, department)

    with pytest.raises(NotFoundError):
        await TicketService(test_session).get_ticket_by_id(ticket.id, customer)


@pytest.mark.asyncio
async def test_list_filters_by_status_and_reports_filtered_total(
    test_session, admin, customer, department
):
    await _insert_ticket(test_session, customer, department, suffix=1)
    await _insert_ticket(test_session, customer, department, suffix=2)
    await _insert_ticket(
        test_session, customer, department, suffix=3, status=TicketStatus.RESOLVED
    )
    service = TicketService(test_session)

    everything = await service.list_tickets(admin)
    resolved = await service.list_tickets(admin, status=TicketStatus.RESOLVED)

    assert everything.total == 3
    assert resolved.total == 1
    assert all(item.status == TicketStatus.RESOLVED for item in resolved.items)


@pytest.mark.asyncio
async def test_list_combined_filters_are_anded(test_session, admin, customer, department):
    await _insert_ticket(
        test_session,
        customer,
        department,
        suffix=1,
        subject="VPN keeps dropping",
        status=TicketStatus.IN_PROGRESS,
    )
    await _insert_ticket(
        test_session,
        customer,
        department,
        suffix=2,
        subject="Expense report",
        status=TicketStatus.OPEN,
    )

    result = await TicketService(test_session).list_tickets(
        admin, status=TicketStatus.IN_PROGRESS, q="vpn"
    )

    assert result.total == 1
    assert result.items[0].subject == "VPN keeps dropping"


@pytest.mark.asyncio
async def test_list_search_matches_description_case_insensitively(
    test_session, admin, customer, department
):
    await _insert_ticket(
        test_session, customer, department, suffix=1, description="The LAPTOP will not boot"
    )
    await _insert_ticket(test_session, customer, department, suffix=2, description="Payroll")

    result = await TicketService(test_session).list_tickets(admin, q="laptop")

    assert result.total == 1


@pytest.mark.asyncio
async def test_list_search_treats_wildcards_literally(test_session, admin, customer, department):
    await _insert_ticket(test_session, customer, department, suffix=1, subject="100% disk usage")
    await _insert_ticket(test_session, customer, department, suffix=2, subject="1000 emails")

    result = await TicketService(test_session).list_tickets(admin, q="100%")

    assert result.total == 1


@pytest.mark.asyncio
async def test_list_orders_newest_first_then_by_id(test_session, admin, customer, department):
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    older = await _insert_ticket(test_session, customer, department, suffix=1, created_at=base)
    tie_a = await _insert_ticket(
        test_session, customer, department, suffix=2, created_at=base + timedelta(hours=1)
    )
    tie_b = await _insert_ticket(
        test_session, customer, department, suffix=3, created_at=base + timedelta(hours=1)
    )

    result = await TicketService(test_session).list_tickets(admin)

    assert [item.id for item in result.items] == [tie_a.id, tie_b.id, older.id]


@pytest.mark.asyncio
async def test_list_pagination_window(test_session, admin, customer, department):
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    for i in range(35):
        await _insert_ticket(
            test_session,
            customer,
            department,
            suffix=i + 1,
            created_at=base + timedelta(minutes=i),
        )
    service = TicketService(test_session)

    page_two = await service.list_tickets(admin, page=2, page_size=10)
    past_end = await service.list_tickets(admin, page=9, page_size=10)
    clamped = await service.list_tickets(admin, page=0, page_size=1000)

    assert page_two.page == 2
    assert page_two.page_size == 10
    assert page_two.total == 35
    assert page_two.total_pages == 4
    assert len(page_two.items) == 10
    assert past_end.items == []
    assert past_end.total == 35
    assert clamped.page == 1
    assert clamped.page_size == 100
    assert len(clamped.items) == 35


@pytest.mark.asyncio
async def test_list_customer_only_sees_own_tickets(
    test_session, make_user, admin, customer, department
):
    other = await make_user(UserRole.CUSTOMER)
    await _insert_ticket(test_session, customer, department, suffix=1)
    await _insert_ticket(test_session, other, department, suffix=2)
    service = TicketService(test_session)

    mine = await service.list_tickets(customer)
    everything = await service.list_tickets(admin)

    assert mine.total == 1
    assert mine.items[0].customer_id == customer.id
    assert everything.total == 2


@pytest.mark.asyncio
async def test_list_filters_by_agent_and_department(
    test_session, admin, agent, customer, department
):
    await _insert_ticket(
        test_session, customer, department, suffix=1, assigned_agent_id=agent.id
    )
    await _insert_ticket(test_session, customer, department, suffix=2)
    service = TicketService(test_session)

    assigned = await service.list_tickets(admin, assigned_agent_id=agent.id)
    in_department = await service.list_tickets(admin, department_id=department.id)
    elsewhere = await service.list_tickets(admin, department_id=department.id + 1)

    assert assigned.total == 1
    assert in_department.total == 2
    assert elsewhere.total == 0


@pytest.mark.asyncio
async def test_assign_ticket(test_session, agent, customer, department):
    ticket = await _insert_ticket(
        test_session,
        customer,
        department,
        updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )
    deadline = ticket.sla_deadline

    assigned = await TicketService(test_session).assign_ticket(ticket.id, agent.id)

    assert assigned.assigned_agent_id == agent.id
    assert as_utc(assigned.updated_at) > datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert as_utc(assigned.sla_deadline) == as_utc(deadline)


@pytest.mark.asyncio
async def test_assign_missing_ticket_is_not_found_regardless_of_agent(test_session, agent):
    service = TicketService(test_session)

    with pytest.raises(NotFoundError, match="Ticket not found"):
        await service.assign_ticket(999, agent.id)
    with pytest.raises(NotFoundError, match="Ticket not found"):
        await service.assign_ticket(999, 12345)


@pytest.mark.asyncio
async def test_assign_rejects_non_agents(test_session, make_user, admin, customer, department):
    ticket = await _insert_ticket(test_session, customer, department)
    inactive_agent = await make_user(UserRole.AGENT, is_active=False)
    service = TicketService(test_session)

    for candidate in (customer.id, admin.id, inactive_agent.id, 999):
        with pytest.raises(NotFoundError, match="Agent not found"):
            await service.assign_ticket(ticket.id, candidate)


@pytest.mark.asyncio
async def test_update_status_walks_the_workflow(test_session, customer, department):
    ticket = await _insert_ticket(test_session, customer, department)
    service = TicketService(test_session)

    for next_status in (TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED):
        ticket = await service.update_status(ticket.id, next_status)
        assert ticket.status == next_status
        assert as_utc(ticket.sla_deadline) - as_utc(ticket.created_at) == timedelta(
            hours=SLA_HOURS[ticket.priority]
        )


@pytest.mark.asyncio
async def test_update_status_rejects_invalid_transition(test_session, customer, department):
    ticket = await _insert_ticket(test_session, customer, department)
    service = TicketService(test_session)

    with pytest.raises(InvalidTransitionError) as exc_info:
        await service.update_status(ticket.id, TicketStatus.RESOLVED)

    assert exc_info.value.errors == {"allowed": ["in_progress"]}
    unchanged = await service.get_ticket_by_id(ticket.id, customer)
    assert unchanged.status == TicketStatus.OPEN


@pytest.mark.asyncio
async def test_update_status_missing_ticket(test_session):
    with pytest.raises(NotFoundError):
        await TicketService(test_session).update_status(999, TicketStatus.IN_PROGRESS)


@pytest.mark.asyncio
async def test_summary_counts(test_session, admin, customer, department):
    now = datetime.now(timezone.utc)
    await _insert_ticket(
        test_session,
        customer,
        department,
        suffix=1,
        priority=TicketPriority.CRITICAL,
        sla_deadline=now - timedelta(hours=1),
    )
    await _insert_ticket(
        test_session,
        customer,
        department,
        suffix=2,
        priority=TicketPriority.HIGH,
        sla_deadline=now + timedelta(hours=1),
    )
    await _insert_ticket(
        test_session,
        customer,
        department,
        suffix=3,
        status=TicketStatus.RESOLVED,
        created_at=now - timedelta(hours=10),
        updated_at=now - timedelta(hours=6),
        sla_deadline=now - timedelta(hours=5),
    )
    await _insert_ticket(
        test_session, customer, department, suffix=4, status=TicketStatus.CLOSED
    )

    summary = await TicketService(test_session).get_summary(admin)

    assert summary.total == 4
    assert summary.open == 2
    assert summary.open_critical == 1
    assert summary.open_high == 1
    assert summary.resolved == 1
    assert summary.avg_resolution_hours == 4.0
    assert summary.sla_overdue == 1
    assert summary.sla_critical == 1


@pytest.mark.asyncio
async def test_summary_without_resolved_tickets(test_session, customer):
    summary = await TicketService(test_session).get_summary(customer)

    assert summary.total == 0
    assert summary.avg_resolution_hours is None
