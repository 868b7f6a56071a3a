"""
Web package for the omikuji bot.

Serves a health-check endpoint for container orchestration.
"""
