"""Services layer - business logic separated from Discord API."""
from .command_service import CommandService, DrawResult

__all__ = ["CommandService", "DrawResult"]
