"""
Deterministic field extraction from free-text chat messages.

Every profile field owns an ordered tuple of ExtractionRule entries.
Rules are tried top to bottom and the first candidate that passes the
rule's validator wins, so precedence is explicit and testable.

Usage:
    partial = extract("Hi, I'm Priya, my email is priya@test.com")
    assert partial.name == "Priya"
    assert partial.email == "priya@test.com"
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from support_intake.config import settings
from support_intake.schemas.profile_schema import (
    IssueType,
    PartialProfile,
    PreferredContact,
    Urgency,
)
from support_intake.utils import normalize_phone

logger = logging.getLogger(__name__)

MIN_EMAIL_LENGTH = 6
MIN_BOOKING_REF_LENGTH = 6
MAX_BARE_NAME_WORDS = 2

_EMAIL = r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"
# Name candidates end at punctuation, a connector word, or end of input.
_NAME = r"([A-Za-z][A-Za-z.'-]*(?:\s+[A-Za-z][A-Za-z.'-]*){0,3}?)"
_NAME_END = r"(?=\s*(?:[,.!?;:]|$)|\s+(?:and|my|from|here|i|im|i'm|with|calling|again)\b)"


@dataclass(frozen=True)
class ExtractionRule:
    """One ordered candidate pattern for a profile field."""

    name: str
    pattern: re.Pattern
    validator: Callable[[str], bool]
    normalizer: Callable[[str], str] = str.strip
    tentative: bool = False

    def apply(self, text: str) -> Optional[str]:
        for match in self.pattern.finditer(text):
            candidate = match.group(1).strip()
            if candidate and self.validator(candidate):
                return self.normalizer(candidate)
        return None


# --------------------------------------------------------------------------- #
# Keyword tables
# --------------------------------------------------------------------------- #

ISSUE_KEYWORDS: tuple[tuple[IssueType, tuple[str, ...]], ...] = (
    (IssueType.BOOKING, ("booking", "bookings", "booked", "reservation", "reservations")),
    (IssueType.PAYMENT, ("payment", "payments", "refund", "refunds", "refunded",
                         "charge", "charges", "charged")),
    (IssueType.PROPERTY, ("property", "properties", "location", "locations",
                          "venue", "venues")),
    (IssueType.ACCOUNT, ("account", "accounts", "login", "log in", "password")),
)

URGENCY_KEYWORDS: tuple[tuple[Urgency, tuple[str, ...]], ...] = (
    (Urgency.HIGH, ("urgent", "urgently", "emergency", "asap", "as soon as possible")),
    (Urgency.MEDIUM, ("soon", "today")),
)

KNOWN_LOCATIONS: tuple[str, ...] = (
    "bangalore", "bengaluru", "mumbai", "delhi", "goa", "kerala", "rajasthan",
    "himachal", "karnataka", "maharashtra", "pune", "lonavala", "coorg",
    "ooty", "manali", "jaipur", "udaipur",
)

CONTACT_KEYWORDS: dict[str, PreferredContact] = {
    "email": PreferredContact.EMAIL,
    "e-mail": PreferredContact.EMAIL,
    "mail": PreferredContact.EMAIL,
    "phone": PreferredContact.PHONE,
    "call": PreferredContact.PHONE,
    "whatsapp": PreferredContact.PHONE,
    "chat": PreferredContact.CHAT,
}

GREETING_WORDS: frozenset[str] = frozenset({
    "hi", "hii", "hello", "hey", "hola", "namaste", "good", "morning",
    "afternoon", "evening", "thanks", "thank", "you", "yes", "no", "ok",
    "okay", "sure", "bye", "please", "yeah", "yep", "nope",
})

# Words that never appear in a real name. Keeps "I'm looking for help",
# "I'm from Mumbai" or "Check availability" out of the name field.
NAME_STOP_WORDS: frozenset[str] = frozenset({
    "help", "support", "booking", "book", "issue", "problem", "query",
    "question", "complaint", "agent", "human", "customer", "owner", "host",
    "looking", "having", "trying", "facing", "getting", "unable", "not",
    "interested", "calling", "writing", "here", "fine", "good", "sorry",
    "about", "regarding", "the", "a", "an", "to", "for", "in", "on", "at",
    "with", "very", "really", "just", "still", "also", "new", "stuck",
    "waiting", "confused", "frustrated", "angry", "upset", "worried",
    "cancel", "cancelled", "checking", "wondering", "planning", "going",
    "from", "of", "by", "near", "into", "so", "too", "quite", "extremely",
    "feeling", "unhappy", "happy", "sad", "glad", "disappointed", "annoyed",
    "tired", "done", "back", "ready", "busy", "afraid", "unsure", "sick",
    "late", "lost", "scared", "check", "need", "want", "show", "get", "give",
    "tell", "find", "know", "see", "update", "change", "pay", "reset",
    "resend", "modify", "assistance", "availability", "info", "information",
    "details",
}) | GREETING_WORDS | frozenset(KNOWN_LOCATIONS) | frozenset(
    word for _, words in ISSUE_KEYWORDS for kw in words for word in kw.split()
) | frozenset(
    word for _, words in URGENCY_KEYWORDS for kw in words for word in kw.split()
)


# --------------------------------------------------------------------------- #
# Validators and normalizers
# --------------------------------------------------------------------------- #

def _valid_name(value: str) -> bool:
    cfg = settings.dialogue
    if not cfg.min_name_length <= len(value) <= cfg.max_name_length:
        return False
    words = value.lower().split()
    return not any(word.strip(".'-") in NAME_STOP_WORDS for word in words)


def _valid_bare_name(value: str) -> bool:
    words = value.split()
    if len(words) > MAX_BARE_NAME_WORDS:
        return False
    return all(word.isalpha() for word in words) and _valid_name(value)


def _normalize_name(value: str) -> str:
    return " ".join(word.capitalize() for word in value.strip(" .'-").split())


def _valid_email(value: str) -> bool:
    return "@" in value and "." in value and len(value) >= MIN_EMAIL_LENGTH


def _normalize_email(value: str) -> str:
    return value.strip().rstrip(".,;:!?)").lower()


def _valid_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return len(digits) in (10, 12)


def _valid_booking_reference(value: str) -> bool:
    return len(value) >= MIN_BOOKING_REF_LENGTH and any(ch.isdigit() for ch in value)


# --------------------------------------------------------------------------- #
# Rule tables
# --------------------------------------------------------------------------- #

_I = re.IGNORECASE

NAME_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("my_name_is", re.compile(rf"\bmy name is\s+{_NAME}{_NAME_END}", _I),
                   _valid_name, _normalize_name),
    ExtractionRule("i_am", re.compile(rf"\b(?:i['’]?m|i am)\s+{_NAME}{_NAME_END}", _I),
                   _valid_name, _normalize_name),
    ExtractionRule("this_is", re.compile(rf"\bthis is\s+{_NAME}{_NAME_END}", _I),
                   _valid_name, _normalize_name),
    ExtractionRule("call_me", re.compile(rf"\bcall me\s+{_NAME}{_NAME_END}", _I),
                   _valid_name, _normalize_name),
    ExtractionRule("bare_phrase", re.compile(r"^\s*([A-Za-z]+(?:\s+[A-Za-z]+)?)\s*[.!]?\s*$"),
                   _valid_bare_name, _normalize_name, tentative=True),
)

EMAIL_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("my_email_is", re.compile(rf"\bmy email(?: address| id)? is\s+({_EMAIL})", _I),
                   _valid_email, _normalize_email),
    ExtractionRule("email_mention", re.compile(rf"\be-?mail\b[^@\n]*?\b({_EMAIL})", _I),
                   _valid_email, _normalize_email),
    ExtractionRule("contact_at", re.compile(rf"\bcontact\b[^@\n]*?\b({_EMAIL})", _I),
                   _valid_email, _normalize_email),
    ExtractionRule("reach_at", re.compile(rf"\breach\b[^@\n]*?\b({_EMAIL})", _I),
                   _valid_email, _normalize_email),
    ExtractionRule("bare_address", re.compile(rf"({_EMAIL})"),
                   _valid_email, _normalize_email),
)

PHONE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("indian_mobile",
                   re.compile(r"(?<![\w+])((?:\+?91[\s-]?)?[6-9](?:[\s-]?\d){9})(?!\w)"),
                   _valid_phone, normalize_phone),
    ExtractionRule("ten_digits", re.compile(r"(?<!\w)(\d{10})(?!\w)"),
                   _valid_phone, normalize_phone),
)

BOOKING_REFERENCE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        "after_keyword",
        re.compile(
            r"\b(?:booking|reference|order)\b"
            r"(?:\s*(?:ref(?:erence)?|id|number|no\.?|code|is|was|#|:))*"
            r"\s*#?\s*([A-Za-z0-9]{6,})\b",
            _I,
        ),
        _valid_booking_reference,
        str.upper,
    ),
)


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(re.escape(kw).replace(r"\ ", r"\s+") for kw in keywords)
    return re.compile(rf"\b(?:{alternatives})\b", _I)


_ISSUE_PATTERNS = tuple((issue, _keyword_pattern(words)) for issue, words in ISSUE_KEYWORDS)
_URGENCY_PATTERNS = tuple((level, _keyword_pattern(words)) for level, words in URGENCY_KEYWORDS)
_LOCATION_PATTERN = _keyword_pattern(KNOWN_LOCATIONS)
_CONTACT_PATTERN = re.compile(
    r"\b(?:prefer(?:red)?|via|by|over|through|on)\s+(?:an?\s+)?"
    r"(e-?mail|mail|phone|call|whatsapp|chat)\b",
    _I,
)


# --------------------------------------------------------------------------- #
# Per-field extractors
# --------------------------------------------------------------------------- #

def _first_match(rules: tuple[ExtractionRule, ...], text: str) -> tuple[Optional[str], bool]:
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            logger.debug("Rule '%s' matched: %r", rule.name, value)
            return value, rule.tentative
    return None, False


def extract_name(text: str) -> tuple[Optional[str], bool]:
    """Return (name, tentative)."""
    return _first_match(NAME_RULES, text)


def extract_email(text: str) -> Optional[str]:
    return _first_match(EMAIL_RULES, text)[0]


def extract_phone(text: str) -> Optional[str]:
    return _first_match(PHONE_RULES, text)[0]


def extract_booking_reference(text: str) -> Optional[str]:
    return _first_match(BOOKING_REFERENCE_RULES, text)[0]


def extract_issue_type(text: str) -> Optional[IssueType]:
    for issue, pattern in _ISSUE_PATTERNS:
        if pattern.search(text):
            return issue
    return None


def extract_urgency(text: str) -> Optional[Urgency]:
    # HIGH is checked first so "urgent, today" never lands on MEDIUM.
    for level, pattern in _URGENCY_PATTERNS:
        if pattern.search(text):
            return level
    return None


def extract_location(text: str) -> Optional[str]:
    match = _LOCATION_PATTERN.search(text)
    return match.group(0).title() if match else None


def extract_preferred_contact(text: str) -> Optional[PreferredContact]:
    match = _CONTACT_PATTERN.search(text)
    if not match:
        return None
    return CONTACT_KEYWORDS.get(match.group(1).lower())


def extract(utterance: str) -> PartialProfile:
    """Scan one utterance for every profile field.

    Never raises on ambiguous input; fields that cannot be read are
    simply left unset.
    """
    text = utterance[: settings.dialogue.max_utterance_length]
    # Emails are removed before name matching so "I'm priya@test.com"
    # cannot yield a name.
    email = extract_email(text)
    name_text = re.sub(_EMAIL, " ", text)
    name, name_tentative = extract_name(name_text)

    return PartialProfile(
        name=name,
        email=email,
        phone=extract_phone(text),
        location=extract_location(text),
        issue_type=extract_issue_type(text),
        booking_reference=extract_booking_reference(text),
        urgency=extract_urgency(text),
        preferred_contact=extract_preferred_contact(text),
        tentative=frozenset({"name"}) if name and name_tentative else frozenset(),
    )


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    """Whole-word, case-insensitive keyword test used by the policy."""
    return bool(_keyword_pattern(keywords).search(text))
