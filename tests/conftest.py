"""Shared test fixtures and helpers."""

from typing import Optional

import pytest

from support_intake.conversation.extractor import extract
from support_intake.conversation.policy import DialoguePolicy
from support_intake.conversation.profile import merge, newly_filled
from support_intake.conversation.session import ConversationSession, SessionRegistry
from support_intake.engine import IntakeEngine
from support_intake.gateway.session_gateway import SessionGateway
from support_intake.gateway.store import InMemoryTicketStore, TicketRecord
from support_intake.schemas.conversation_schema import DialogueState, Speaker
from support_intake.schemas.profile_schema import CustomerProfile, UserRole


@pytest.fixture
def ticket_store():
    return InMemoryTicketStore([
        TicketRecord(id="TICKET-1"),
        TicketRecord(id="TICKET-2"),
        TicketRecord(id="OWNER-1", requester_role=UserRole.PROPERTY_OWNER),
    ])


@pytest.fixture
def gateway(ticket_store):
    return SessionGateway(ticket_store)


@pytest.fixture
def engine(gateway):
    return IntakeEngine(gateway)


@pytest.fixture
def policy():
    return DialoguePolicy()


@pytest.fixture
def registry():
    return SessionRegistry()


def make_session(
    conversation_id: str = "TEST-001",
    role: Optional[UserRole] = UserRole.CUSTOMER,
    profile: Optional[CustomerProfile] = None,
    prior_turns: int = 0,
    last_state: Optional[DialogueState] = None,
) -> ConversationSession:
    """Helper to create a session with a given number of earlier exchanges."""
    session = ConversationSession(conversation_id=conversation_id, role=role)
    if profile is not None:
        session.profile = profile
    for i in range(prior_turns):
        session.append(Speaker.USER, f"message {i}")
        state = last_state if i == prior_turns - 1 else None
        session.append(Speaker.SYSTEM, f"reply {i}", state=state)
    return session


def start_turn(session: ConversationSession, utterance: str) -> set[str]:
    """Apply an utterance to a session the way the engine does before the policy runs."""
    before = session.profile
    session.append(Speaker.USER, utterance)
    session.profile = merge(before, extract(utterance))
    return newly_filled(before, session.profile)


class FailingTicketStore(InMemoryTicketStore):
    """Ticket store whose every call raises."""

    async def get_ticket(self, ticket_id):
        raise ConnectionError("ticket store down")

    async def update_ticket(self, ticket_id, **updates):
        raise ConnectionError("ticket store down")

    async def save_summary(self, ticket_id, summary):
        raise ConnectionError("ticket store down")

    async def resolve_role(self, conversation_id):
        raise ConnectionError("profile store down")
