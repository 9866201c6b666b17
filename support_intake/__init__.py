"""Conversational support intake and escalation engine."""

from support_intake.engine import IntakeEngine
from support_intake.gateway import InMemoryTicketStore, SessionGateway

__all__ = ["IntakeEngine", "SessionGateway", "InMemoryTicketStore"]
