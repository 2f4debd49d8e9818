"""Telegram moderation bot built on the sinkingyachts client."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import timedelta
from typing import Optional

import httpx
from telegram import Update
from telegram.constants import ParseMode
from telegram.error import NetworkError, TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from ..client import YachtsClient
from ..constants import MAX_RECENT_SECONDS
from ..errors import InvalidArgument, SinkingYachtsError
from .formatters import PHISHING_REPLY, BotFormatter, RecentSummary

logger = logging.getLogger(__name__)


class YachtsBot:
    """Deletes messages that link to phishing domains and announces feed events."""

    def __init__(self, token: str, client: YachtsClient, chat_id: str = ""):
        self.token = token
        self.client = client
        self.chat_id = chat_id
        self._app: Optional[Application] = None
        self._pending: set[asyncio.Task] = set()

    async def start(self):
        """Start the Telegram bot."""
        self._app = Application.builder().token(self.token).build()

        self._app.add_error_handler(self._handle_error)

        self._app.add_handler(CommandHandler("start", self._cmd_help))
        self._app.add_handler(CommandHandler("help", self._cmd_help))
        self._app.add_handler(CommandHandler("status", self._cmd_status))
        self._app.add_handler(CommandHandler("recent", self._cmd_recent))
        self._app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._on_message))

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)

        logger.info("Telegram bot started")

    async def stop(self):
        """Stop the Telegram bot."""
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()

        if self._app:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            self._app = None
        logger.info("Telegram bot stopped")

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle unexpected exceptions from Telegram handlers."""
        err = getattr(context, "error", None)
        update_id = getattr(update, "update_id", None)

        if isinstance(err, NetworkError):
            logger.warning("Telegram network error (update_id=%s): %s", update_id, err)
            return

        logger.exception("Unhandled Telegram handler error (update_id=%s)", update_id, exc_info=err)

    async def announce_ready(self) -> None:
        """Log the database size and yesterday's change counts."""
        try:
            size = await self.client.database_size()
            logger.info("Bot is ready to protect your chats from %s phishing domains", size)

            changes = await self.client.recent(timedelta(days=1))
            summary = RecentSummary.from_changes(changes, hours=24)
            logger.info("Domains added within the past day: %s", summary.added)
            logger.info("Domains deleted within the past day: %s", summary.deleted)
        except (SinkingYachtsError, httpx.HTTPError) as exc:
            logger.warning("Could not fetch startup statistics: %s", exc)

    async def send_message(self, text: str):
        """Send a simple text message to the configured chat."""
        if not self._app or not self.chat_id:
            return

        try:
            await self._app.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode=ParseMode.MARKDOWN,
            )
        except Exception as exc:
            logger.error("Failed to send message: %s", exc)

    def _schedule(self, text: str) -> None:
        task = asyncio.get_running_loop().create_task(self.send_message(text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def on_domain_added(self, domain: str) -> None:
        """Feed hook: announce a newly listed domain."""
        logger.info("New domain added: %s", domain)
        self._schedule(BotFormatter.format_domain_event(domain, added=True))

    def on_domain_deleted(self, domain: str) -> None:
        """Feed hook: announce a delisted domain."""
        logger.info("Domain deleted: %s", domain)
        self._schedule(BotFormatter.format_domain_event(domain, added=False))

    async def _on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Delete messages that contain phishing links."""
        message = update.effective_message
        if not message or not message.text:
            return
        if update.effective_user and update.effective_user.is_bot:
            return

        try:
            flagged = await self.client.is_phishing(message.text)
        except (SinkingYachtsError, httpx.HTTPError) as exc:
            logger.error("Phishing check failed for message %s: %s", message.message_id, exc)
            return

        if not flagged:
            return

        logger.info("Deleting phishing message %s in chat %s", message.message_id, message.chat_id)
        try:
            await message.delete()
        except TelegramError as exc:
            logger.warning("Failed to delete message %s: %s", message.message_id, exc)
        await context.bot.send_message(chat_id=message.chat_id, text=PHISHING_REPLY)

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start and /help."""
        await update.message.reply_text(BotFormatter.format_help(), parse_mode=ParseMode.MARKDOWN)

    async def _cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /status command."""
        size: Optional[int] = None
        try:
            size = await self.client.database_size()
        except (SinkingYachtsError, httpx.HTTPError) as exc:
            logger.warning("Database size lookup failed: %s", exc)

        message = BotFormatter.format_status(size, self.client.stats())
        await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN)

    async def _cmd_recent(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /recent [hours] command."""
        hours = 24.0
        if context.args:
            try:
                hours = float(context.args[0])
            except ValueError:
                pass
        if not math.isfinite(hours):
            await update.message.reply_text("Hours must be a finite number.")
            return
        hours = max(min(hours, MAX_RECENT_SECONDS / 3600), 0.0)

        try:
            changes = await self.client.recent(timedelta(hours=hours))
        except InvalidArgument as exc:
            await update.message.reply_text(str(exc))
            return
        except (SinkingYachtsError, httpx.HTTPError) as exc:
            logger.warning("Recent changes lookup failed: %s", exc)
            await update.message.reply_text("Could not fetch recent changes right now.")
            return

        message = BotFormatter.format_recent(RecentSummary.from_changes(changes, hours))
        await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN)
