"""
Session gateway: the only component that talks to the ticket store.

Every collaborator call runs under a timeout. Failures never reach the
dialogue: a failed role lookup returns None so the caller can retry it,
operator checks fall back to False, and writes are logged and dropped.
Guest conversations have no ticket and skip the store entirely.
"""

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

from support_intake.config import GatewayConfig, settings
from support_intake.conversation.profile import confidence_score
from support_intake.errors import GatewayUnavailableError
from support_intake.gateway.store import (
    CATEGORY_BY_ISSUE,
    RoleResolver,
    TicketCategory,
    TicketPriority,
    TicketStatus,
    TicketStore,
)
from support_intake.logging_context import get_conversation_logger
from support_intake.schemas.conversation_schema import (
    ConversationSummary,
    EscalationSignal,
    Message,
)
from support_intake.schemas.profile_schema import CustomerProfile, UserRole

logger = get_conversation_logger(__name__)

T = TypeVar("T")

GENERIC_SUBJECT = "Live Chat Session"


def build_subject(profile: CustomerProfile) -> str:
    """Ticket subject from the customer's real name when known."""
    if profile.name:
        return f"Live Chat - {profile.name}"
    return GENERIC_SUBJECT


class SessionGateway:
    """Storage-facing boundary for role, operator state and summaries."""

    def __init__(
        self,
        store: TicketStore,
        role_resolver: Optional[RoleResolver] = None,
        config: Optional[GatewayConfig] = None,
    ) -> None:
        self.store = store
        self.role_resolver = role_resolver or store  # type: ignore[assignment]
        self.config = config or settings.gateway

    def is_guest(self, conversation_id: str) -> bool:
        return conversation_id.startswith(self.config.guest_prefixes)

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.config.request_timeout_sec)
        except Exception as exc:
            raise GatewayUnavailableError(operation, exc) from exc

    async def resolve_role(self, conversation_id: str) -> Optional[UserRole]:
        """Role of the requester, or None when the lookup failed."""
        if self.is_guest(conversation_id):
            return UserRole.CUSTOMER
        try:
            role = await self._call(
                "resolve_role", self.role_resolver.resolve_role(conversation_id)
            )
        except GatewayUnavailableError as exc:
            logger.warning("Role lookup unavailable, treating as unknown this turn: %s", exc)
            return None
        logger.info("Role resolved: %s", role.value)
        return role

    async def is_operator_joined(self, conversation_id: str) -> bool:
        if self.is_guest(conversation_id):
            return False
        try:
            ticket = await self._call("get_ticket", self.store.get_ticket(conversation_id))
        except GatewayUnavailableError as exc:
            logger.warning("Operator check unavailable, assuming no operator: %s", exc)
            return False
        if ticket is None:
            return False
        return ticket.assigned_agent is not None and ticket.status == TicketStatus.IN_PROGRESS

    async def persist_summary(
        self,
        conversation_id: str,
        profile: CustomerProfile,
        messages: list[Message],
        role: Optional[UserRole],
    ) -> bool:
        """Write a recap of the conversation. Returns False when skipped or failed."""
        if self.is_guest(conversation_id):
            return False
        summary = ConversationSummary(
            conversation_id=conversation_id,
            subject=build_subject(profile),
            role=role or UserRole.UNKNOWN,
            profile=profile,
            confidence=confidence_score(profile),
            recent_messages=messages[-self.config.summary_message_count:],
        )
        return await self._write(
            "save_summary", self.store.save_summary(conversation_id, summary)
        )

    async def escalate_ticket(
        self,
        conversation_id: str,
        profile: CustomerProfile,
        signal: EscalationSignal,
    ) -> bool:
        """Flag the ticket for a human operator."""
        if self.is_guest(conversation_id):
            return False
        category = (
            CATEGORY_BY_ISSUE.get(profile.issue_type, TicketCategory.OTHER)
            if profile.issue_type
            else TicketCategory.OTHER
        )
        updates: dict[str, Any] = {
            "priority": TicketPriority.HIGH,
            "category": category,
            "escalated": True,
            "escalation_reason": signal.reason.value if signal.reason else None,
        }
        return await self._write(
            "escalate_ticket", self.store.update_ticket(conversation_id, **updates)
        )

    async def close_ticket(self, conversation_id: str, reason: str = "User ended live chat session") -> bool:
        if self.is_guest(conversation_id):
            return False
        return await self._write(
            "close_ticket",
            self.store.update_ticket(
                conversation_id, status=TicketStatus.CLOSED, status_change_reason=reason
            ),
        )

    async def _write(self, operation: str, awaitable: Awaitable[Any]) -> bool:
        try:
            await self._call(operation, awaitable)
        except GatewayUnavailableError as exc:
            logger.warning("Ticket store write dropped: %s", exc)
            return False
        return True
