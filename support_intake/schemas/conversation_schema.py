"""Conversation log, escalation and turn result schemas."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from support_intake.schemas.profile_schema import CustomerProfile, UserRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Speaker(str, Enum):
    USER = "user"
    SYSTEM = "system"


class DialogueState(str, Enum):
    """Policy state derived from profile completeness on each turn."""

    GREETING = "greeting"
    COLLECT_NAME = "collect_name"
    COLLECT_EMAIL = "collect_email"
    CLASSIFY_ISSUE = "classify_issue"
    ISSUE_SPECIFIC_HELP = "issue_specific_help"
    ROLE_SPECIFIC_HELP = "role_specific_help"
    FALLBACK = "fallback"


class Message(BaseModel):
    """A single immutable entry in the conversation log."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str
    timestamp: datetime = Field(default_factory=_utcnow)
    state: Optional[DialogueState] = None


class EscalationReason(str, Enum):
    HIGH_URGENCY = "high_urgency"
    LONG_CONVERSATION = "long_conversation"
    UNRESOLVED_COMPLEX_CASE = "unresolved_complex_case"
    OPERATOR_TAKEOVER = "operator_takeover"


class EscalationSeverity(str, Enum):
    NONE = "none"
    MEDIUM = "medium"
    HIGH = "high"


class EscalationSignal(BaseModel):
    """Derived hand-off decision for the current turn."""

    model_config = ConfigDict(frozen=True)

    should_escalate: bool = False
    reason: Optional[EscalationReason] = None
    severity: EscalationSeverity = EscalationSeverity.NONE
    silent: bool = False


class TurnResult(BaseModel):
    """Everything the caller needs to render one engine turn."""

    reply: str
    profile: CustomerProfile
    confidence: int
    escalation: EscalationSignal
    suggested_actions: list[str] = Field(default_factory=list)
    silent: bool = False
    state: Optional[DialogueState] = None


class ConversationSummary(BaseModel):
    """Structured recap written to the ticket store after each turn."""

    conversation_id: str
    subject: str
    role: UserRole
    profile: CustomerProfile
    confidence: int
    recent_messages: list[Message] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_utcnow)
