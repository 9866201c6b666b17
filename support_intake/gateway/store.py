"""
Ticket store and role resolver contracts, plus an in-memory implementation.

In production the store is the support-ticket table of the marketplace
backend. The in-memory store backs the console demo and the tests.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from support_intake.schemas.conversation_schema import ConversationSummary
from support_intake.schemas.profile_schema import IssueType, UserRole

logger = logging.getLogger(__name__)


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TicketCategory(str, Enum):
    PAYMENT = "Payment"
    BOOKING = "Booking"
    PROPERTY = "Property"
    TECHNICAL = "Technical"
    OTHER = "Other"


CATEGORY_BY_ISSUE: dict[IssueType, TicketCategory] = {
    IssueType.BOOKING: TicketCategory.BOOKING,
    IssueType.PAYMENT: TicketCategory.PAYMENT,
    IssueType.PROPERTY: TicketCategory.PROPERTY,
    IssueType.ACCOUNT: TicketCategory.TECHNICAL,
}


class TicketRecord(BaseModel):
    """Support ticket as seen by the intake engine."""

    id: str
    subject: str = "Live Chat Session"
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    category: TicketCategory = TicketCategory.OTHER
    requester_role: UserRole = UserRole.CUSTOMER
    assigned_agent: Optional[str] = None
    escalated: bool = False
    escalation_reason: Optional[str] = None
    status_change_reason: Optional[str] = None
    summary: Optional[ConversationSummary] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TicketStore(Protocol):
    """Async access to support tickets."""

    async def get_ticket(self, ticket_id: str) -> Optional[TicketRecord]: ...

    async def update_ticket(self, ticket_id: str, **updates: object) -> TicketRecord: ...

    async def save_summary(self, ticket_id: str, summary: ConversationSummary) -> None: ...


class RoleResolver(Protocol):
    """Maps a conversation identifier to the requester's role."""

    async def resolve_role(self, conversation_id: str) -> UserRole: ...


class InMemoryTicketStore:
    """Dict-backed ticket store that also resolves roles from tickets."""

    def __init__(self, tickets: Optional[list[TicketRecord]] = None) -> None:
        self._tickets: dict[str, TicketRecord] = {t.id: t for t in tickets or []}

    def add(self, ticket: TicketRecord) -> TicketRecord:
        self._tickets[ticket.id] = ticket
        logger.debug("Ticket added: %s", ticket.id)
        return ticket

    async def get_ticket(self, ticket_id: str) -> Optional[TicketRecord]:
        return self._tickets.get(ticket_id)

    async def update_ticket(self, ticket_id: str, **updates: object) -> TicketRecord:
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise KeyError(f"Ticket not found: {ticket_id}")
        updates["updated_at"] = datetime.now(timezone.utc)
        updated = ticket.model_copy(update=updates)
        self._tickets[ticket_id] = updated
        return updated

    async def save_summary(self, ticket_id: str, summary: ConversationSummary) -> None:
        await self.update_ticket(ticket_id, summary=summary, subject=summary.subject)

    async def resolve_role(self, conversation_id: str) -> UserRole:
        ticket = self._tickets.get(conversation_id)
        if ticket is None:
            return UserRole.UNKNOWN
        return ticket.requester_role

    def assign_agent(self, ticket_id: str, agent_id: str) -> TicketRecord:
        """Simulate an operator claiming the ticket from the support dashboard."""
        ticket = self._tickets[ticket_id]
        updated = ticket.model_copy(
            update={"assigned_agent": agent_id, "status": TicketStatus.IN_PROGRESS}
        )
        self._tickets[ticket_id] = updated
        logger.info("Agent %s assigned to ticket %s", agent_id, ticket_id)
        return updated
