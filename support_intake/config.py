"""
Centralized configuration with environment variable overrides.

Brand copy, dialogue limits, escalation thresholds and gateway timeouts
are configurable here. Nothing is hardcoded in policy or gateway logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from support_intake.logging_context import LOG_FORMAT, install_conversation_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_tuple(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma-separated env var into a tuple of non-empty items."""
    raw = os.getenv(env_var, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class BusinessConfig:
    """Brand and support-desk details quoted in replies."""

    name: str = os.getenv("BUSINESS_NAME", "Picnify")
    support_email: str = os.getenv("SUPPORT_EMAIL", "support@picnify.in")
    support_phone: str = os.getenv("SUPPORT_PHONE", "+91 80 1234 5678")
    support_hours: str = os.getenv("SUPPORT_HOURS", "Mon-Fri 9AM-6PM IST")
    free_cancellation_hours: int = _safe_int("FREE_CANCELLATION_HOURS", "24")
    refund_days: str = os.getenv("REFUND_DAYS", "5-7 business days")


@dataclass(frozen=True)
class DialogueConfig:
    """Limits applied by the extractor and the dialogue policy."""

    greeting_turn_limit: int = _safe_int("GREETING_TURN_LIMIT", "2")
    max_utterance_length: int = _safe_int("MAX_UTTERANCE_LENGTH", "1000")
    min_name_length: int = _safe_int("MIN_NAME_LENGTH", "2")
    max_name_length: int = _safe_int("MAX_NAME_LENGTH", "49")


@dataclass(frozen=True)
class EscalationConfig:
    """Turn thresholds for automatic hand-off to a human operator."""

    long_conversation_turns: int = _safe_int("LONG_CONVERSATION_TURNS", "10")
    complex_case_turns: int = _safe_int("COMPLEX_CASE_TURNS", "5")


@dataclass(frozen=True)
class GatewayConfig:
    """Ticket store access settings."""

    request_timeout_sec: float = _safe_float("GATEWAY_TIMEOUT", "5.0")
    summary_message_count: int = _safe_int("SUMMARY_MESSAGE_COUNT", "10")
    guest_prefixes: tuple[str, ...] = _safe_tuple("GUEST_PREFIXES", "guest-,anon-")


@dataclass(frozen=True)
class SessionConfig:
    """In-memory session lifecycle settings."""

    idle_ttl_seconds: float = _safe_float("SESSION_IDLE_TTL", "3600")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    dialogue: DialogueConfig = field(default_factory=DialogueConfig)
    escalation: EscalationConfig = field(default_factory=EscalationConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_name: str = os.getenv("AGENT_NAME", "support-intake")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.dialogue.greeting_turn_limit < 1:
        raise ValueError(
            f"GREETING_TURN_LIMIT must be >= 1, got {config.dialogue.greeting_turn_limit}"
        )
    if config.dialogue.max_utterance_length < 1:
        raise ValueError(
            f"MAX_UTTERANCE_LENGTH must be >= 1, got {config.dialogue.max_utterance_length}"
        )
    if not 1 <= config.dialogue.min_name_length <= config.dialogue.max_name_length:
        raise ValueError(
            "MIN_NAME_LENGTH must be >= 1 and <= MAX_NAME_LENGTH, "
            f"got {config.dialogue.min_name_length} / {config.dialogue.max_name_length}"
        )
    if config.escalation.long_conversation_turns < 1:
        raise ValueError(
            "LONG_CONVERSATION_TURNS must be >= 1, "
            f"got {config.escalation.long_conversation_turns}"
        )
    if config.escalation.complex_case_turns < 1:
        raise ValueError(
            f"COMPLEX_CASE_TURNS must be >= 1, got {config.escalation.complex_case_turns}"
        )
    if config.gateway.request_timeout_sec <= 0:
        raise ValueError(
            f"GATEWAY_TIMEOUT must be > 0, got {config.gateway.request_timeout_sec}"
        )
    if config.gateway.summary_message_count < 1:
        raise ValueError(
            "SUMMARY_MESSAGE_COUNT must be >= 1, "
            f"got {config.gateway.summary_message_count}"
        )
    if config.session.idle_ttl_seconds <= 0:
        raise ValueError(
            f"SESSION_IDLE_TTL must be > 0, got {config.session.idle_ttl_seconds}"
        )
    if config.business.free_cancellation_hours < 0:
        raise ValueError(
            "FREE_CANCELLATION_HOURS must be >= 0, "
            f"got {config.business.free_cancellation_hours}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_conversation_filter(logging.getLogger())
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
