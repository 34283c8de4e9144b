"""Swimmeret exception hierarchy.

All exceptions inherit from SwimmeretError and carry a three-part structure:
message (what happened), detail (technical context), suggestion (what to do next).
"""


class SwimmeretError(Exception):
    """Base exception for all Swimmeret errors."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class PoolNotFoundError(SwimmeretError):
    """Raised when a pool cannot be found by id or slug."""

    def __init__(
        self,
        message: str = "Pool not found",
        detail: str | None = None,
        suggestion: str | None = "Join a pool first or check the pool link",
    ) -> None:
        super().__init__(message, detail, suggestion)


class UserNotFoundError(SwimmeretError):
    """Raised when a referenced user does not exist."""

    def __init__(
        self,
        message: str = "User not found",
        detail: str | None = None,
        suggestion: str | None = "Report an incident first to register the user",
    ) -> None:
        super().__init__(message, detail, suggestion)
