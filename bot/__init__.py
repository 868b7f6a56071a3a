"""Bot package - Discord client and persisted bot state."""
from .client import OmikujiBot
from .state import BotState

__all__ = ["BotState", "OmikujiBot"]
