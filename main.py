"""
Main entry point for the omikuji bot.

Loads configuration from environment and starts the bot.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv
from discord.errors import LoginFailure, PrivilegedIntentsRequired

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

from bot import OmikujiBot
from core.config import ConfigError, Settings, load_settings

logger = logging.getLogger("omikuji")


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    logging.getLogger("discord").setLevel(level)

    # Suppress verbose third-party library logs unless LOG_LEVEL is DEBUG
    if level_name.upper() != "DEBUG":
        logging.getLogger("discord.gateway").setLevel(logging.WARNING)
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


async def main(settings: Settings) -> None:
    if not settings.token:
        logger.error("Missing bot token. Set DISCORD_BOT_TOKEN in .env or environment.")
        return

    bot = OmikujiBot(settings)
    try:
        await bot.start(settings.token)
    except PrivilegedIntentsRequired:
        logger.error(
            "Privileged intents required. Enable the MESSAGE CONTENT intent "
            "in the Discord developer portal."
        )
    except LoginFailure:
        logger.error(
            "Token is invalid. Reset it in the Discord developer portal "
            "and update DISCORD_BOT_TOKEN in your .env file."
        )
    finally:
        if not bot.is_closed():
            await bot.close()


def run() -> None:
    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", e)
        raise SystemExit(2) from e

    configure_logging(settings.log_level)
    if not env_path.exists():
        logger.debug(".env file not found at %s", env_path)

    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    run()
