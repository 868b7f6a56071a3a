"""
Core utilities and infrastructure for the omikuji bot.

This package contains:
- admin_storage: Per-channel admin registry
- config: Configuration loading and validation
- constants: Match modes and environment keys
- errors: Domain error taxonomy
- fortune_storage: Daily omikuji ledger
- help_system: Help embeds
- io_utils: File I/O helpers
- paths: Path resolution
- reaction_storage: Per-channel trigger -> response table
- user_directory: Cached display-name lookup
- utils: General utilities
"""
from .constants import MatchMode
from .errors import (
    AlreadyExistsError,
    BotError,
    InvalidMatchMode,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ProtectedEntityError,
    ValidationError,
)

__all__ = [
    # Constants
    "MatchMode",
    # Errors
    "AlreadyExistsError",
    "BotError",
    "InvalidMatchMode",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "ProtectedEntityError",
    "ValidationError",
]
