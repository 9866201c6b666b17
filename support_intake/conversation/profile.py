"""
Profile accumulation across turns.

merge() folds one utterance's extracted fields into the running profile
without ever clearing a known value. Fields flagged as tentative by the
extractor only fill gaps; they never override a value that came from a
more specific rule.
"""

import logging
from typing import Iterable

from support_intake.conversation.extractor import extract
from support_intake.schemas.profile_schema import (
    PROFILE_FIELDS,
    CustomerProfile,
    PartialProfile,
)

logger = logging.getLogger(__name__)

# Observability weights; they never drive policy branching.
CONFIDENCE_WEIGHTS: dict[str, int] = {
    "name": 20,
    "email": 20,
    "phone": 15,
    "issue_type": 25,
    "booking_reference": 20,
}
MAX_CONFIDENCE = 100

# Order in which the policy collects the core fields.
COLLECTION_ORDER: tuple[str, ...] = ("name", "email", "issue_type")


def merge(current: CustomerProfile, partial: PartialProfile) -> CustomerProfile:
    """Return a new profile with every non-null field of ``partial`` applied."""
    updates: dict[str, object] = {}
    for name in PROFILE_FIELDS:
        value = getattr(partial, name)
        if value is None:
            continue
        if name in partial.tentative and getattr(current, name) is not None:
            logger.debug("Keeping '%s'; tentative candidate %r ignored", name, value)
            continue
        updates[name] = value

    if not updates:
        return current
    return current.model_copy(update=updates)


def confidence_score(profile: CustomerProfile) -> int:
    """Weighted completeness score in the range 0-100."""
    total = sum(
        weight for name, weight in CONFIDENCE_WEIGHTS.items()
        if getattr(profile, name) is not None
    )
    return min(total, MAX_CONFIDENCE)


def missing_fields(profile: CustomerProfile) -> list[str]:
    """Core fields still to collect, in collection order."""
    return [name for name in COLLECTION_ORDER if getattr(profile, name) is None]


def newly_filled(before: CustomerProfile, after: CustomerProfile) -> set[str]:
    """Names of fields whose value changed between two profiles."""
    return {name for name in PROFILE_FIELDS if getattr(before, name) != getattr(after, name)}


def replay_profile(utterances: Iterable[str]) -> CustomerProfile:
    """Rebuild a profile from scratch by re-extracting every user utterance."""
    profile = CustomerProfile()
    for text in utterances:
        profile = merge(profile, extract(text))
    return profile
