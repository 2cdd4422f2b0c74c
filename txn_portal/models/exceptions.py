"""Exception hierarchy for Txn Portal.

Failures carry a message an operator can read as-is, plus an optional hint.
"""


class ConsoleError(Exception):
    """Base exception for all Txn Portal errors.

    All domain-specific exceptions inherit from this base class,
    enabling consistent error handling across the application.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class TransportError(ConsoleError):
    """The request never reached the coordinator or timed out."""

    pass


class BackendRejectedError(ConsoleError):
    """The coordinator answered with a non-success result.

    ``backend_message`` is the server-provided message, if any, and is
    shown to the operator verbatim.
    """

    def __init__(
        self,
        message: str,
        backend_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.backend_message = backend_message
        self.status_code = status_code


class ConfigError(ConsoleError):
    """Configuration is invalid or missing."""

    pass


class ValidationError(ConsoleError):
    """Operator input (filters, pagination) failed validation."""

    pass


class ActionStateError(ConsoleError):
    """A control action was driven through an illegal state transition."""

    pass


def operator_message(error: ConsoleError, fallback: str | None = None) -> str:
    """Text to show the operator for a failed request.

    The server's own message wins; otherwise ``fallback`` or the error text.
    """
    if isinstance(error, BackendRejectedError) and error.backend_message:
        return error.backend_message
    return fallback or str(error)
