"""Customer profile models accumulated over a support conversation."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueType(str, Enum):
    BOOKING = "booking"
    PAYMENT = "payment"
    PROPERTY = "property"
    ACCOUNT = "account"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PreferredContact(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    CHAT = "chat"


class UserRole(str, Enum):
    CUSTOMER = "customer"
    PROPERTY_OWNER = "property_owner"
    UNKNOWN = "unknown"


PROFILE_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "location",
    "issue_type",
    "booking_reference",
    "urgency",
    "preferred_contact",
)


class CustomerProfile(BaseModel):
    """Structured details known about the person in the chat.

    Immutable: the accumulator produces a new instance on every merge.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    issue_type: Optional[IssueType] = None
    booking_reference: Optional[str] = None
    urgency: Optional[Urgency] = None
    preferred_contact: Optional[PreferredContact] = None

    def known_fields(self) -> dict[str, object]:
        """Return only the populated fields."""
        return {name: getattr(self, name) for name in PROFILE_FIELDS if getattr(self, name) is not None}


class PartialProfile(CustomerProfile):
    """Fields extracted from a single utterance.

    ``tentative`` names fields that came from a weak fallback rule and
    must not replace a value already on the profile.
    """

    tentative: frozenset[str] = Field(default_factory=frozenset)
