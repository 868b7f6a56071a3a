"""
Domain errors raised by the stores and the command service.

The Discord glue turns these into user-facing replies; anything that is not a
BotError is treated as an unexpected failure and logged.
"""
from __future__ import annotations

from typing import Any, Optional


class BotError(Exception):
    """Base class for all errors the bot reports back to a user."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BotError):
    pass


class InvalidMatchMode(ValidationError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid match mode: {value!r}", value=value)
        self.value = value


class NotFoundError(BotError):
    pass


class AlreadyExistsError(BotError):
    pass


class ProtectedEntityError(BotError):
    pass


class PermissionDeniedError(BotError):
    pass


class PersistenceError(BotError):
    """A load or save of a persisted document failed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, path=path)
        self.path = path
