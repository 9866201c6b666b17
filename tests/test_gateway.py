"""Tests for the session gateway and the in-memory ticket store."""

import asyncio

import pytest

from support_intake.config import GatewayConfig
from support_intake.gateway.session_gateway import SessionGateway, build_subject
from support_intake.gateway.store import (
    InMemoryTicketStore,
    TicketCategory,
    TicketPriority,
    TicketRecord,
    TicketStatus,
)
from support_intake.schemas.conversation_schema import (
    EscalationReason,
    EscalationSeverity,
    EscalationSignal,
    Message,
    Speaker,
)
from support_intake.schemas.profile_schema import CustomerProfile, IssueType, UserRole
from tests.conftest import FailingTicketStore

URGENT = EscalationSignal(
    should_escalate=True,
    reason=EscalationReason.HIGH_URGENCY,
    severity=EscalationSeverity.HIGH,
)


class SlowTicketStore(InMemoryTicketStore):
    """Ticket store that never answers within the gateway timeout."""

    async def get_ticket(self, ticket_id):
        await asyncio.sleep(1)
        return None

    async def resolve_role(self, conversation_id):
        await asyncio.sleep(1)
        return UserRole.PROPERTY_OWNER


class TestBuildSubject:
    def test_uses_name(self):
        assert build_subject(CustomerProfile(name="Priya")) == "Live Chat - Priya"

    def test_generic_without_name(self):
        assert build_subject(CustomerProfile()) == "Live Chat Session"


class TestRoleResolution:
    @pytest.mark.asyncio
    async def test_customer_ticket(self, gateway):
        assert await gateway.resolve_role("TICKET-1") == UserRole.CUSTOMER

    @pytest.mark.asyncio
    async def test_owner_ticket(self, gateway):
        assert await gateway.resolve_role("OWNER-1") == UserRole.PROPERTY_OWNER

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, gateway):
        assert await gateway.resolve_role("TICKET-404") == UserRole.UNKNOWN

    @pytest.mark.asyncio
    async def test_guest_skips_lookup(self):
        gateway = SessionGateway(FailingTicketStore())
        assert await gateway.resolve_role("guest-42") == UserRole.CUSTOMER
        assert await gateway.resolve_role("anon-42") == UserRole.CUSTOMER

    @pytest.mark.asyncio
    async def test_failure_returns_none(self):
        gateway = SessionGateway(FailingTicketStore())
        assert await gateway.resolve_role("TICKET-1") is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        gateway = SessionGateway(SlowTicketStore(), config=GatewayConfig(request_timeout_sec=0.01))
        assert await gateway.resolve_role("TICKET-1") is None

    @pytest.mark.asyncio
    async def test_separate_role_resolver(self, ticket_store):
        class OwnerResolver:
            async def resolve_role(self, conversation_id):
                return UserRole.PROPERTY_OWNER

        gateway = SessionGateway(ticket_store, role_resolver=OwnerResolver())
        assert await gateway.resolve_role("TICKET-1") == UserRole.PROPERTY_OWNER


class TestOperatorState:
    @pytest.mark.asyncio
    async def test_no_operator_by_default(self, gateway):
        assert await gateway.is_operator_joined("TICKET-1") is False

    @pytest.mark.asyncio
    async def test_assigned_operator(self, gateway, ticket_store):
        ticket_store.assign_agent("TICKET-1", "agent-7")
        assert await gateway.is_operator_joined("TICKET-1") is True

    @pytest.mark.asyncio
    async def test_assigned_but_resolved(self, gateway, ticket_store):
        ticket_store.assign_agent("TICKET-1", "agent-7")
        await ticket_store.update_ticket("TICKET-1", status=TicketStatus.RESOLVED)
        assert await gateway.is_operator_joined("TICKET-1") is False

    @pytest.mark.asyncio
    async def test_missing_ticket(self, gateway):
        assert await gateway.is_operator_joined("TICKET-404") is False

    @pytest.mark.asyncio
    async def test_failure_assumes_no_operator(self):
        gateway = SessionGateway(FailingTicketStore())
        assert await gateway.is_operator_joined("TICKET-1") is False

    @pytest.mark.asyncio
    async def test_timeout_assumes_no_operator(self):
        gateway = SessionGateway(SlowTicketStore(), config=GatewayConfig(request_timeout_sec=0.01))
        assert await gateway.is_operator_joined("TICKET-1") is False


class TestPersistSummary:
    @pytest.mark.asyncio
    async def test_summary_written(self, gateway, ticket_store):
        profile = CustomerProfile(name="Priya", email="priya@test.com")
        messages = [Message(speaker=Speaker.USER, text="Hi, I'm Priya")]
        assert await gateway.persist_summary("TICKET-1", profile, messages, UserRole.CUSTOMER) is True

        ticket = await ticket_store.get_ticket("TICKET-1")
        assert ticket.subject == "Live Chat - Priya"
        assert ticket.summary.profile == profile
        assert ticket.summary.confidence == 40
        assert ticket.summary.role == UserRole.CUSTOMER

    @pytest.mark.asyncio
    async def test_summary_keeps_recent_messages(self, ticket_store):
        gateway = SessionGateway(ticket_store, config=GatewayConfig(summary_message_count=2))
        messages = [Message(speaker=Speaker.USER, text=f"m{i}") for i in range(5)]
        await gateway.persist_summary("TICKET-1", CustomerProfile(), messages, None)

        ticket = await ticket_store.get_ticket("TICKET-1")
        assert [m.text for m in ticket.summary.recent_messages] == ["m3", "m4"]
        assert ticket.summary.role == UserRole.UNKNOWN
        assert ticket.subject == "Live Chat Session"

    @pytest.mark.asyncio
    async def test_guest_not_persisted(self, gateway):
        assert await gateway.persist_summary("guest-1", CustomerProfile(), [], UserRole.CUSTOMER) is False

    @pytest.mark.asyncio
    async def test_missing_ticket_dropped(self, gateway):
        assert await gateway.persist_summary("TICKET-404", CustomerProfile(), [], None) is False

    @pytest.mark.asyncio
    async def test_failure_dropped(self):
        gateway = SessionGateway(FailingTicketStore())
        assert await gateway.persist_summary("TICKET-1", CustomerProfile(), [], None) is False


class TestTicketUpdates:
    @pytest.mark.asyncio
    async def test_escalate_ticket(self, gateway, ticket_store):
        profile = CustomerProfile(issue_type=IssueType.PAYMENT)
        assert await gateway.escalate_ticket("TICKET-1", profile, URGENT) is True

        ticket = await ticket_store.get_ticket("TICKET-1")
        assert ticket.priority == TicketPriority.HIGH
        assert ticket.category == TicketCategory.PAYMENT
        assert ticket.escalated is True
        assert ticket.escalation_reason == "high_urgency"

    @pytest.mark.asyncio
    async def test_escalate_without_issue_uses_other(self, gateway, ticket_store):
        await gateway.escalate_ticket("TICKET-1", CustomerProfile(), URGENT)
        ticket = await ticket_store.get_ticket("TICKET-1")
        assert ticket.category == TicketCategory.OTHER

    @pytest.mark.asyncio
    async def test_account_issue_maps_to_technical(self, gateway, ticket_store):
        await gateway.escalate_ticket("TICKET-1", CustomerProfile(issue_type=IssueType.ACCOUNT), URGENT)
        ticket = await ticket_store.get_ticket("TICKET-1")
        assert ticket.category == TicketCategory.TECHNICAL

    @pytest.mark.asyncio
    async def test_escalate_failure_dropped(self):
        gateway = SessionGateway(FailingTicketStore())
        assert await gateway.escalate_ticket("TICKET-1", CustomerProfile(), URGENT) is False

    @pytest.mark.asyncio
    async def test_close_ticket(self, gateway, ticket_store):
        assert await gateway.close_ticket("TICKET-1") is True
        ticket = await ticket_store.get_ticket("TICKET-1")
        assert ticket.status == TicketStatus.CLOSED
        assert ticket.status_change_reason == "User ended live chat session"

    @pytest.mark.asyncio
    async def test_close_guest_is_noop(self, gateway):
        assert await gateway.close_ticket("guest-1") is False


class TestInMemoryTicketStore:
    @pytest.mark.asyncio
    async def test_update_missing_raises(self):
        store = InMemoryTicketStore()
        with pytest.raises(KeyError, match="TICKET-404"):
            await store.update_ticket("TICKET-404", escalated=True)

    @pytest.mark.asyncio
    async def test_add_and_get(self):
        store = InMemoryTicketStore()
        store.add(TicketRecord(id="TICKET-9"))
        ticket = await store.get_ticket("TICKET-9")
        assert ticket.status == TicketStatus.OPEN

    def test_assign_agent(self, ticket_store):
        ticket = ticket_store.assign_agent("TICKET-2", "agent-1")
        assert ticket.assigned_agent == "agent-1"
        assert ticket.status == TicketStatus.IN_PROGRESS
