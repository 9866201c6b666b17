"""
Per-conversation state and the registry that partitions it.

Each conversation identifier owns exactly one ConversationSession and one
asyncio.Lock. Turns for the same identifier run under that lock, one at
a time; different identifiers never share mutable state.

Usage:
    registry = SessionRegistry()
    async with registry.locked("TICKET-42"):
        session = registry.get_or_create("TICKET-42")
        session.append(Speaker.USER, "Hi")
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from support_intake.schemas.conversation_schema import DialogueState, Message, Speaker
from support_intake.schemas.profile_schema import CustomerProfile, UserRole

logger = logging.getLogger(__name__)


@dataclass
class ConversationSession:
    """State container for one conversation identifier."""

    conversation_id: str
    profile: CustomerProfile = field(default_factory=CustomerProfile)
    messages: list[Message] = field(default_factory=list)
    role: Optional[UserRole] = None
    operator_joined: bool = False
    escalated: bool = False
    created_at: float = field(default_factory=time.monotonic)
    last_active_at: float = field(default_factory=time.monotonic)

    @property
    def turn_count(self) -> int:
        """Number of user messages received so far."""
        return sum(1 for m in self.messages if m.speaker == Speaker.USER)

    @property
    def last_system_state(self) -> Optional[DialogueState]:
        for message in reversed(self.messages):
            if message.speaker == Speaker.SYSTEM:
                return message.state
        return None

    def append(self, speaker: Speaker, text: str, state: Optional[DialogueState] = None) -> Message:
        message = Message(speaker=speaker, text=text, state=state)
        self.messages.append(message)
        self.last_active_at = time.monotonic()
        return message

    def user_utterances(self) -> list[str]:
        return [m.text for m in self.messages if m.speaker == Speaker.USER]

    def reset(self) -> None:
        """Drop the profile and log. The resolved role stays cached."""
        self.profile = CustomerProfile()
        self.messages = []
        self.escalated = False
        self.operator_joined = False
        self.last_active_at = time.monotonic()


class SessionRegistry:
    """
    Map of conversation identifier to session, plus one lock per identifier.

    Eviction of an identifier is only allowed while holding its lock, so
    it can never race an in-flight turn. A lock is dropped once its
    session is gone and no task holds or waits on it.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    def lock(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    @asynccontextmanager
    async def locked(self, conversation_id: str) -> AsyncIterator[None]:
        """Hold the identifier's lock, then drop it if nothing else needs it."""
        lock = self.lock(conversation_id)
        self._holders[conversation_id] = self._holders.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._holders[conversation_id] - 1
            if remaining:
                self._holders[conversation_id] = remaining
            else:
                del self._holders[conversation_id]
                if conversation_id not in self._sessions:
                    self._locks.pop(conversation_id, None)

    def get(self, conversation_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(conversation_id)

    def get_or_create(self, conversation_id: str) -> ConversationSession:
        session = self._sessions.get(conversation_id)
        if session is None:
            session = ConversationSession(conversation_id=conversation_id)
            self._sessions[conversation_id] = session
            logger.debug("Session created: %s", conversation_id)
        return session

    def evict(self, conversation_id: str) -> bool:
        """Remove a session. Caller must hold ``locked(conversation_id)``."""
        removed = self._sessions.pop(conversation_id, None) is not None
        if removed:
            logger.debug("Session evicted: %s", conversation_id)
        return removed

    def evict_idle(self, max_idle_seconds: float) -> list[str]:
        """Evict sessions idle longer than the limit, skipping held ones."""
        now = time.monotonic()
        evicted: list[str] = []
        for conversation_id, session in list(self._sessions.items()):
            if now - session.last_active_at < max_idle_seconds:
                continue
            if conversation_id in self._holders:
                continue
            lock = self._locks.get(conversation_id)
            if lock is not None and lock.locked():
                continue
            self._sessions.pop(conversation_id, None)
            self._locks.pop(conversation_id, None)
            evicted.append(conversation_id)
        if evicted:
            logger.info("Evicted %d idle session(s)", len(evicted))
        return evicted
