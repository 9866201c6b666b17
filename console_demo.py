"""
Offline console demo: runs support conversations through the real engine.

Uses the actual extractor, policy, escalation evaluator and gateway backed
by the in-memory ticket store. No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario owner
    python console_demo.py --scenario takeover
"""

import argparse
import asyncio

from support_intake.config import settings
from support_intake.engine import IntakeEngine
from support_intake.gateway import InMemoryTicketStore, SessionGateway, TicketRecord
from support_intake.schemas.conversation_schema import TurnResult
from support_intake.schemas.profile_schema import UserRole

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Drives one conversation in the terminal."""

    # Pre-scripted scenarios for --scenario flag: (conversation id, steps)
    SCENARIOS: dict[str, tuple[str, list[str]]] = {
        "customer": (
            "TICKET-1001",
            [
                "Hello, I need some help",
                "My name is Rahul Sharma",
                "you can reach me at rahul.sharma@example.com",
                "It's about my booking",
                "booking reference PIC482913",
                "I want to cancel it",
            ],
        ),
        "owner": (
            "TICKET-2001",
            [
                "Hi",
                "this is Anita",
                "anita@villas.in",
                "When is my next payout?",
                "I need to update photos on my listing",
            ],
        ),
        "urgent": (
            "guest-3001",
            ["Hi, I'm Priya, my email is priya@test.com, urgent refund issue"],
        ),
        "takeover": (
            "TICKET-4001",
            [
                "Hello",
                "I'm Vikram, vikram@example.com",
                "My payment was charged twice",
                "Are you still there?",
            ],
        ),
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, conversation_id: str = "guest-console") -> None:
        self.conversation_id = conversation_id
        self.store = InMemoryTicketStore([
            TicketRecord(id="TICKET-1001"),
            TicketRecord(id="TICKET-2001", requester_role=UserRole.PROPERTY_OWNER),
            TicketRecord(id="TICKET-4001"),
        ])
        self.engine = IntakeEngine(SessionGateway(self.store))

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _render(self, result: TurnResult) -> None:
        if result.silent:
            self.system_log("Operator has joined; assistant is silent")
            return
        self.agent_say(result.reply)
        if result.suggested_actions:
            self.system_log(f"Quick actions: {', '.join(result.suggested_actions)}")
        state = result.state.value if result.state else "-"
        self.system_log(f"State: {state} | confidence: {result.confidence}")
        if result.escalation.should_escalate:
            reason = result.escalation.reason.value if result.escalation.reason else "-"
            print(f"{RED}  !! Escalation: {reason}{RESET}")

    async def _turn(self, text: str) -> None:
        result = await self.engine.handle_turn(self.conversation_id, text)
        self._render(result)

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        if scenario not in self.SCENARIOS:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return
        self.conversation_id, steps = self.SCENARIOS[scenario]

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SUPPORT INTAKE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        for i, step in enumerate(steps):
            if scenario == "takeover" and i == len(steps) - 1:
                self.store.assign_agent(self.conversation_id, "agent-meera")
                print(f"{YELLOW}  ** Agent Meera claimed the ticket{RESET}")
            print(f"\n{BLUE}[User] {RESET}{step}")
            await self._turn(step)

        profile = self.engine.get_profile(self.conversation_id)
        ticket = await self.store.get_ticket(self.conversation_id)
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Profile: {profile.known_fields() if profile else {}}{RESET}")
        if ticket is not None:
            print(f"{DIM}  Ticket: {ticket.subject} | {ticket.status.value} | "
                  f"priority {ticket.priority.value} | escalated {ticket.escalated}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SUPPORT INTAKE - Console Demo{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}  Type 'quit' to exit, 'reset' to start over{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            user_input = input(f"\n{BLUE}[User] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                await self.engine.end_conversation(self.conversation_id)
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if user_input.lower() == "reset":
                await self.engine.reset_conversation(self.conversation_id)
                self.system_log("Conversation reset")
                continue
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("That was quite long. Could you keep it brief for me?")
                continue
            await self._turn(user_input)


def main() -> None:
    parser = argparse.ArgumentParser(description="Support intake console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        help="Auto-play a pre-scripted scenario",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
