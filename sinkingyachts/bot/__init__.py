"""Telegram example bot for sinkingyachts."""

from .telegram import YachtsBot
from .formatters import BotFormatter

__all__ = ["YachtsBot", "BotFormatter"]
