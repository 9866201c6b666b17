"""Shared utilities used across the intake engine."""

import re


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping whitespace, hyphens and brackets.

    A leading + is preserved.

    Examples:
        >>> normalize_phone("98765 43210")
        '9876543210'
        >>> normalize_phone("+91 98765-43210")
        '+919876543210'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def truncate(text: str, limit: int) -> str:
    """Clip text to at most ``limit`` characters."""
    return text if len(text) <= limit else text[:limit]
