"""
Escalation evaluator: decides when a human operator must take over.

A pure function of the profile, the turn count and the externally
observed operator state. Rules are checked in order; the first match
wins.
"""

import logging
from typing import Optional

from support_intake.config import EscalationConfig, settings
from support_intake.schemas.conversation_schema import (
    EscalationReason,
    EscalationSeverity,
    EscalationSignal,
)
from support_intake.schemas.profile_schema import CustomerProfile, IssueType, Urgency

logger = logging.getLogger(__name__)

NO_ESCALATION = EscalationSignal()
OPERATOR_TAKEOVER = EscalationSignal(
    should_escalate=False,
    reason=EscalationReason.OPERATOR_TAKEOVER,
    silent=True,
)


def evaluate(
    profile: CustomerProfile,
    turn_count: int,
    operator_joined: bool,
    config: Optional[EscalationConfig] = None,
) -> EscalationSignal:
    """Return the escalation signal for the current turn."""
    cfg = config or settings.escalation

    if operator_joined:
        return OPERATOR_TAKEOVER

    if profile.urgency == Urgency.HIGH:
        logger.info("Escalation: high urgency")
        return EscalationSignal(
            should_escalate=True,
            reason=EscalationReason.HIGH_URGENCY,
            severity=EscalationSeverity.HIGH,
        )

    if turn_count > cfg.long_conversation_turns:
        logger.info("Escalation: long conversation (%d turns)", turn_count)
        return EscalationSignal(
            should_escalate=True,
            reason=EscalationReason.LONG_CONVERSATION,
            severity=EscalationSeverity.MEDIUM,
        )

    if (
        profile.issue_type == IssueType.BOOKING
        and profile.booking_reference is not None
        and turn_count > cfg.complex_case_turns
    ):
        logger.info("Escalation: unresolved booking case %s", profile.booking_reference)
        return EscalationSignal(
            should_escalate=True,
            reason=EscalationReason.UNRESOLVED_COMPLEX_CASE,
            severity=EscalationSeverity.MEDIUM,
        )

    return NO_ESCALATION
