"""
Dialogue policy: picks the next reply from the session's derived state.

There is no stored state id. The state for a turn is derived from which
profile fields are populated, the resolved role and the previous system
message, so replaying the same log always walks the same path.

Derivation order (first match wins):
    GREETING            early turn, greeting/help words, name unknown
    COLLECT_NAME        name unset
    COLLECT_EMAIL       email unset
    ROLE_SPECIFIC_HELP  role is property owner
    CLASSIFY_ISSUE      issue type unset, not asked on the previous turn
    ISSUE_SPECIFIC_HELP issue type set
    FALLBACK            anything else
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from support_intake.config import DialogueConfig, settings
from support_intake.conversation.extractor import contains_any, extract_urgency
from support_intake.conversation.session import ConversationSession
from support_intake.prompts import responses as r
from support_intake.schemas.conversation_schema import DialogueState
from support_intake.schemas.profile_schema import (
    CustomerProfile,
    IssueType,
    Urgency,
    UserRole,
)

logger = logging.getLogger(__name__)

GREETING_KEYWORDS = (
    "hi", "hii", "hello", "hey", "namaste", "good morning", "good afternoon",
    "good evening", "help", "support", "assist", "assistance",
)

FRUSTRATION_KEYWORDS = (
    "frustrated", "frustrating", "angry", "annoyed", "upset", "unacceptable",
    "ridiculous", "useless", "terrible", "worst", "disappointed", "manager",
    "human", "real person", "speak to someone", "already told you",
)

OWNER_ROUTES: tuple[tuple[str, tuple[str, ...], str, list[str]], ...] = (
    (
        "property_management",
        ("property", "properties", "listing", "listings", "photos", "amenities",
         "pricing", "price", "calendar", "availability", "add"),
        r.OWNER_PROPERTY_MANAGEMENT,
        r.OWNER_PROPERTY_OPTIONS,
    ),
    (
        "booking_management",
        ("booking", "bookings", "reservation", "reservations", "guest", "guests",
         "check-in", "checkin", "cancel", "cancellation", "request", "requests"),
        r.OWNER_BOOKING_MANAGEMENT,
        r.OWNER_BOOKING_OPTIONS,
    ),
    (
        "earnings",
        ("earning", "earnings", "payout", "payouts", "payment", "payments",
         "revenue", "commission", "income", "money", "bank", "statement"),
        r.OWNER_EARNINGS,
        r.OWNER_EARNINGS_OPTIONS,
    ),
)

BOOKING_CANCEL_WORDS = ("cancel", "cancellation", "cancelled")
BOOKING_MODIFY_WORDS = ("change", "modify", "reschedule", "dates", "extend")
BOOKING_RESEND_WORDS = ("confirmation", "resend", "voucher", "invoice")

PAYMENT_REFUND_WORDS = ("refund", "refunds", "money back")
PAYMENT_FAILED_WORDS = ("failed", "declined", "deducted", "not processed", "stuck")
PAYMENT_CHARGE_WORDS = ("charge", "charged", "double", "twice", "extra", "overcharged")


@dataclass
class PolicyDecision:
    """Outcome of one policy step."""

    reply: str
    state: DialogueState
    suggested_actions: list[str] = field(default_factory=list)


def _name_suffix(profile: CustomerProfile) -> str:
    return f", {profile.name}" if profile.name else ""


def _join(*parts: Optional[str]) -> str:
    return " ".join(p for p in parts if p)


class DialoguePolicy:
    """Maps (session, utterance) to the next reply."""

    def __init__(self, config: Optional[DialogueConfig] = None) -> None:
        self.config = config or settings.dialogue

    # ------------------------------------------------------------------ #
    # State derivation
    # ------------------------------------------------------------------ #

    def derive_state(self, session: ConversationSession, utterance: str) -> DialogueState:
        """Derive this turn's state. ``session`` already holds the merged profile."""
        profile = session.profile

        if (
            session.turn_count <= self.config.greeting_turn_limit
            and profile.name is None
            and contains_any(utterance, GREETING_KEYWORDS)
        ):
            return DialogueState.GREETING
        if profile.name is None:
            return DialogueState.COLLECT_NAME
        if profile.email is None:
            return DialogueState.COLLECT_EMAIL
        if session.role == UserRole.PROPERTY_OWNER:
            return DialogueState.ROLE_SPECIFIC_HELP
        if profile.issue_type is None:
            if session.last_system_state != DialogueState.CLASSIFY_ISSUE:
                return DialogueState.CLASSIFY_ISSUE
            return DialogueState.FALLBACK
        return DialogueState.ISSUE_SPECIFIC_HELP

    def decide(
        self,
        session: ConversationSession,
        utterance: str,
        filled: Optional[set[str]] = None,
    ) -> PolicyDecision:
        """Produce the reply for this turn.

        Args:
            session: Session with this turn's fields already merged.
            utterance: The raw user text.
            filled: Profile fields newly set by this utterance, used to
                acknowledge them inline before moving on.
        """
        state = self.derive_state(session, utterance)
        logger.debug("Derived state: %s (turn %d)", state.value, session.turn_count)

        handlers = {
            DialogueState.GREETING: self._greeting,
            DialogueState.COLLECT_NAME: self._collect_name,
            DialogueState.COLLECT_EMAIL: self._collect_email,
            DialogueState.ROLE_SPECIFIC_HELP: self._role_specific_help,
            DialogueState.CLASSIFY_ISSUE: self._classify_issue,
            DialogueState.ISSUE_SPECIFIC_HELP: self._issue_specific_help,
            DialogueState.FALLBACK: self._fallback,
        }
        decision = handlers[state](session, utterance)

        ack = self._acknowledge(session.profile, filled or set())
        if ack and state != DialogueState.GREETING:
            decision.reply = _join(ack, decision.reply)
        return decision

    # ------------------------------------------------------------------ #
    # Handlers
    # ------------------------------------------------------------------ #

    def _acknowledge(self, profile: CustomerProfile, filled: set[str]) -> str:
        parts = []
        if "name" in filled and profile.name:
            parts.append(r.ACK_NAME.format(name=profile.name))
        if "email" in filled and profile.email:
            parts.append(r.ACK_EMAIL.format(email=profile.email))
        if "phone" in filled and profile.phone:
            parts.append(r.ACK_PHONE.format(phone=profile.phone))
        return _join(*parts)

    def _greeting(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        if session.role == UserRole.PROPERTY_OWNER:
            welcome, menu = r.OWNER_WELCOME, r.OWNER_MENU
        else:
            welcome, menu = r.CUSTOMER_WELCOME, r.CUSTOMER_MENU
        return PolicyDecision(_join(welcome, r.ASK_NAME), DialogueState.GREETING, list(menu))

    def _collect_name(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        return PolicyDecision(r.ASK_NAME_AGAIN, DialogueState.COLLECT_NAME)

    def _collect_email(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        return PolicyDecision(
            r.ASK_EMAIL.format(name=session.profile.name),
            DialogueState.COLLECT_EMAIL,
        )

    def _classify_issue(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        return PolicyDecision(
            r.CLASSIFY_ISSUE.format(name=session.profile.name),
            DialogueState.CLASSIFY_ISSUE,
            list(r.CLASSIFY_OPTIONS),
        )

    def _role_specific_help(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        for route, keywords, template, options in OWNER_ROUTES:
            if contains_any(utterance, keywords):
                logger.debug("Owner route: %s", route)
                return PolicyDecision(template, DialogueState.ROLE_SPECIFIC_HELP, list(options))
        return PolicyDecision(
            r.OWNER_GENERAL.format(name=session.profile.name),
            DialogueState.ROLE_SPECIFIC_HELP,
            list(r.OWNER_MENU),
        )

    def _issue_specific_help(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        profile = session.profile
        if profile.issue_type == IssueType.BOOKING:
            reply, actions = self._booking_help(profile, utterance)
        elif profile.issue_type == IssueType.PAYMENT:
            reply, actions = self._payment_help(profile, utterance)
        elif profile.issue_type == IssueType.PROPERTY:
            reply, actions = self._property_help(profile)
        else:
            reply, actions = self._default_help(profile)
        return PolicyDecision(reply, DialogueState.ISSUE_SPECIFIC_HELP, actions)

    def _booking_help(self, profile: CustomerProfile, utterance: str) -> tuple[str, list[str]]:
        reference = profile.booking_reference
        if reference is None:
            return r.BOOKING_ASK_REFERENCE, list(r.BOOKING_REFERENCE_OPTIONS)
        if contains_any(utterance, BOOKING_CANCEL_WORDS):
            return r.BOOKING_CANCEL.format(reference=reference), [r.TALK_TO_AGENT]
        if contains_any(utterance, BOOKING_MODIFY_WORDS):
            return r.BOOKING_MODIFY.format(reference=reference), [r.TALK_TO_AGENT]
        if contains_any(utterance, BOOKING_RESEND_WORDS):
            return (
                r.BOOKING_RESEND.format(reference=reference, email=profile.email),
                [r.TALK_TO_AGENT],
            )
        return r.BOOKING_ACTIONS.format(reference=reference), list(r.BOOKING_OPTIONS)

    def _payment_help(self, profile: CustomerProfile, utterance: str) -> tuple[str, list[str]]:
        if contains_any(utterance, PAYMENT_REFUND_WORDS):
            guidance = r.PAYMENT_REFUND
        elif contains_any(utterance, PAYMENT_FAILED_WORDS):
            guidance = r.PAYMENT_FAILED
        elif contains_any(utterance, PAYMENT_CHARGE_WORDS):
            guidance = r.PAYMENT_CHARGE
        else:
            guidance = None

        if profile.booking_reference is None:
            if guidance is None:
                return r.PAYMENT_ASK_TYPE, list(r.PAYMENT_TYPE_OPTIONS)
            return _join(guidance, r.PAYMENT_ASK_REFERENCE), [r.TALK_TO_AGENT]
        next_steps = r.PAYMENT_NEXT.format(reference=profile.booking_reference)
        return _join(guidance, next_steps), list(r.PAYMENT_OPTIONS)

    def _property_help(self, profile: CustomerProfile) -> tuple[str, list[str]]:
        if profile.location is None:
            return r.PROPERTY_ASK_LOCATION, []
        return r.PROPERTY_ACTIONS.format(location=profile.location), list(r.PROPERTY_OPTIONS)

    def _default_help(self, profile: CustomerProfile) -> tuple[str, list[str]]:
        if profile.issue_type == IssueType.ACCOUNT:
            return r.ACCOUNT_HELP, list(r.ACCOUNT_OPTIONS)
        return r.GENERAL_HELP, [r.TALK_TO_AGENT]

    def _fallback(self, session: ConversationSession, utterance: str) -> PolicyDecision:
        suffix = _name_suffix(session.profile)
        if extract_urgency(utterance) == Urgency.HIGH:
            reply = r.FALLBACK_URGENT.format(name_suffix=suffix)
            actions = [r.TALK_TO_AGENT]
        elif contains_any(utterance, FRUSTRATION_KEYWORDS):
            reply = r.FALLBACK_FRUSTRATED.format(name_suffix=suffix)
            actions = [r.TALK_TO_AGENT]
        else:
            reply = r.FALLBACK_GENERIC.format(name_suffix=suffix)
            actions = list(r.CLASSIFY_OPTIONS)
        return PolicyDecision(reply, DialogueState.FALLBACK, actions)
