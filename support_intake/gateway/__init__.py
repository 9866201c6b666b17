from support_intake.gateway.session_gateway import SessionGateway, build_subject
from support_intake.gateway.store import (
    InMemoryTicketStore,
    RoleResolver,
    TicketCategory,
    TicketPriority,
    TicketRecord,
    TicketStatus,
    TicketStore,
)

__all__ = [
    "SessionGateway",
    "build_subject",
    "InMemoryTicketStore",
    "RoleResolver",
    "TicketStore",
    "TicketRecord",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
]
