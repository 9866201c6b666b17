"""Exception types raised by the intake engine."""


class IntakeError(Exception):
    """Base class for all intake engine errors."""


class InvalidConversationIdError(IntakeError):
    """Raised when a conversation identifier is empty or malformed."""


class InvalidUtteranceError(IntakeError):
    """Raised when a turn carries no user text."""


class GatewayUnavailableError(IntakeError):
    """Raised inside the session gateway when a collaborator call fails.

    Never escapes the gateway: callers receive a safe default instead.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause!r}")
        self.operation = operation
        self.cause = cause
