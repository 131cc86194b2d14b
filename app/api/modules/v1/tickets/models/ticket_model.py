import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

_LABEL_NOISE = re.compile(r"[\s_\-]+")


class _LabelledEnum(str, Enum):
    """
    String enum that also accepts alternate labels and ordinals.

    Subclasses list their members in ordinal order and may define
    ``_aliases`` mapping normalized labels to member values.
    """

    @classmethod
    def _aliases(cls) -> dict:
        return {}

    @classmethod
    def parse(cls, value: Union[str, int, "_LabelledEnum"]):
        """
        Resolve a member from its value, a case/spacing-insensitive label
        or its ordinal position.

        Raises:
            ValueError: If the value does not name a member
        """
        if isinstance(value, cls):
            return value

        members = list(cls)
        if isinstance(value, bool):
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        if isinstance(value, int):
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")

        raw = str(value).strip()
        if raw.isdigit():
            return cls.parse(int(raw))

        key = _LABEL_NOISE.sub("", raw).lower()
        for member in members:
            if _LABEL_NOISE.sub("", member.value) == key:
                return member
        alias = cls._aliases().get(key)
        if alias is not None:
            return cls(alias)

        allowed = ", ".join(member.value for member in members)
        raise ValueError(f"Invalid {cls.__name__} '{raw}'. Allowed: {allowed}")


class TicketStatus(_LabelledEnum):
    """Status of a ticket in the workflow."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(_LabelledEnum):
    """Priority level for a ticket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def _aliases(cls) -> dict:
        return {"normal": "medium", "urgent": "critical"}


class Ticket(SQLModel, table=True):
    """
    Support ticket filed by a customer and worked by an agent.

    ``sla_deadline`` is computed from ``priority`` when the ticket is
    created and is never recomputed afterwards.
    """

    __tablename__ = "tickets"

    id: Optional[int] = Field(default=None, primary_key=True)

    number: str = Field(max_length=32, nullable=False, unique=True, index=True)

    subject: str = Field(max_length=255, nullable=False, index=True)
    description: str = Field(default="", sa_column=Column(Text, nullable=False))

    category: str = Field(max_length=100, nullable=False, index=True)
    subcategory: Optional[str] = Field(default=None, max_length=100, nullable=True)

    status: TicketStatus = Field(
        default=TicketStatus.OPEN,
        nullable=False,
        index=True,
    )
    priority: TicketPriority = Field(
        default=TicketPriority.MEDIUM,
        nullable=False,
        index=True,
    )

    department_id: int = Field(foreign_key="departments.id", nullable=False, index=True)
    customer_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    assigned_agent_id: Optional[int] = Field(
        default=None,
        foreign_key="users.id",
        nullable=True,
        index=True,
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=lambda: datetime.now(timezone.utc),
    )
    sla_deadline: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
