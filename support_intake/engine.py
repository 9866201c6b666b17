"""
Intake engine: the single entry point for processing a chat turn.

One turn runs extract -> merge -> evaluate -> reply -> persist under the
conversation's lock, so turns for the same identifier are strictly
sequential while different identifiers proceed independently.

Usage:
    engine = IntakeEngine(SessionGateway(InMemoryTicketStore()))
    result = await engine.handle_turn("guest-1", "Hi, I'm Priya")
    print(result.reply, result.confidence)
"""

import re
from typing import Optional

from support_intake.config import AppConfig, settings
from support_intake.conversation.escalation import evaluate
from support_intake.conversation.extractor import extract
from support_intake.conversation.policy import DialoguePolicy, PolicyDecision
from support_intake.conversation.profile import confidence_score, merge, newly_filled
from support_intake.conversation.session import ConversationSession, SessionRegistry
from support_intake.errors import InvalidConversationIdError, InvalidUtteranceError
from support_intake.gateway.session_gateway import SessionGateway
from support_intake.logging_context import get_conversation_logger, set_conversation_id
from support_intake.prompts import responses
from support_intake.schemas.conversation_schema import (
    EscalationSignal,
    Message,
    Speaker,
    TurnResult,
)
from support_intake.schemas.profile_schema import CustomerProfile
from support_intake.utils import truncate

logger = get_conversation_logger(__name__)

CONVERSATION_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$")


def validate_conversation_id(conversation_id: str) -> str:
    """Reject empty or malformed identifiers before any state is touched."""
    if not isinstance(conversation_id, str) or not CONVERSATION_ID_PATTERN.match(conversation_id):
        raise InvalidConversationIdError(f"Invalid conversation id: {conversation_id!r}")
    return conversation_id


class IntakeEngine:
    """Stateful intake and escalation engine keyed by conversation id."""

    def __init__(
        self,
        gateway: SessionGateway,
        policy: Optional[DialoguePolicy] = None,
        registry: Optional[SessionRegistry] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or settings
        self.policy = policy or DialoguePolicy(self.config.dialogue)
        self.registry = registry or SessionRegistry()

    async def handle_turn(self, conversation_id: str, utterance: str) -> TurnResult:
        """Process one user utterance and return the next system reply."""
        validate_conversation_id(conversation_id)
        if not isinstance(utterance, str) or not utterance.strip():
            raise InvalidUtteranceError("Utterance must contain text")
        text = truncate(utterance.strip(), self.config.dialogue.max_utterance_length)

        set_conversation_id(conversation_id)
        async with self.registry.locked(conversation_id):
            session = self.registry.get_or_create(conversation_id)

            if session.role is None:
                # None means the lookup failed; it is retried on the next turn.
                session.role = await self.gateway.resolve_role(conversation_id)

            session.operator_joined = await self.gateway.is_operator_joined(conversation_id)
            session.append(Speaker.USER, text)

            if session.operator_joined:
                result = self._silent_turn(session, text)
            else:
                try:
                    result = await self._run_turn(session, text)
                except Exception:
                    logger.exception("Unexpected error while processing turn")
                    session.append(Speaker.SYSTEM, responses.INTERNAL_ERROR)
                    result = TurnResult(
                        reply=responses.INTERNAL_ERROR,
                        profile=session.profile,
                        confidence=confidence_score(session.profile),
                        escalation=EscalationSignal(should_escalate=False),
                    )

            await self.gateway.persist_summary(
                conversation_id, session.profile, session.messages, session.role
            )
            return result

    def _silent_turn(self, session: ConversationSession, text: str) -> TurnResult:
        """Keep accumulating the profile while a human operator owns the chat."""
        session.profile = merge(session.profile, extract(text))
        signal = evaluate(session.profile, session.turn_count, True, self.config.escalation)
        logger.info("Operator has joined; engine stays silent")
        return TurnResult(
            reply="",
            profile=session.profile,
            confidence=confidence_score(session.profile),
            escalation=signal,
            silent=True,
        )

    async def _run_turn(self, session: ConversationSession, text: str) -> TurnResult:
        before = session.profile
        session.profile = merge(before, extract(text))
        filled = newly_filled(before, session.profile)

        signal = evaluate(session.profile, session.turn_count, session.operator_joined,
                          self.config.escalation)
        decision: PolicyDecision = self.policy.decide(session, text, filled)
        reply = decision.reply
        actions = decision.suggested_actions

        if signal.should_escalate and not session.escalated:
            session.escalated = True
            reply = f"{reply} {responses.HANDOFF_NOTICE}"
            logger.info("Escalating conversation (reason: %s)", signal.reason.value)
            await self.gateway.escalate_ticket(session.conversation_id, session.profile, signal)

        session.append(Speaker.SYSTEM, reply, state=decision.state)
        return TurnResult(
            reply=reply,
            profile=session.profile,
            confidence=confidence_score(session.profile),
            escalation=signal,
            suggested_actions=actions,
            state=decision.state,
        )

    # ------------------------------------------------------------------ #
    # Administrative surface
    # ------------------------------------------------------------------ #

    def get_profile(self, conversation_id: str) -> Optional[CustomerProfile]:
        session = self.registry.get(validate_conversation_id(conversation_id))
        return session.profile if session else None

    def get_history(self, conversation_id: str) -> list[Message]:
        session = self.registry.get(validate_conversation_id(conversation_id))
        return list(session.messages) if session else []

    async def reset_conversation(self, conversation_id: str) -> None:
        """Clear the profile and message log of one conversation only."""
        validate_conversation_id(conversation_id)
        async with self.registry.locked(conversation_id):
            session = self.registry.get(conversation_id)
            if session is not None:
                session.reset()
                logger.info("Conversation reset: %s", conversation_id)

    async def end_conversation(self, conversation_id: str) -> bool:
        """Close the ticket and drop the in-memory session."""
        validate_conversation_id(conversation_id)
        async with self.registry.locked(conversation_id):
            await self.gateway.close_ticket(conversation_id)
            return self.registry.evict(conversation_id)

    def evict_idle_sessions(self) -> list[str]:
        return self.registry.evict_idle(self.config.session.idle_ttl_seconds)
