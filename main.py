"""
Support intake entry point.

Runs the offline console demo. A chat transport (widget, HTTP endpoint)
embeds IntakeEngine directly instead.

Usage:
    Interactive:  python main.py
    Scenario:     python main.py --scenario urgent
"""

import logging

from support_intake.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode() -> None:
    """Start the offline console demo (no ticket backend required)."""
    from console_demo import main as console_main

    logger.info("Starting console demo as '%s'", settings.agent_name)
    console_main()


if __name__ == "__main__":
    _run_console_mode()
