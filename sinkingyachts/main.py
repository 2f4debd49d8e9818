"""Main entry point for the sinkingyachts example moderation bot."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from .bot import YachtsBot
from .client import YachtsClient
from .config import Config, load_config, validate_config
from .monitoring import HealthServer

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


class BotRunner:
    """Wires the client, the Telegram bot and the health server together."""

    def __init__(self, config: Config):
        self.config = config
        self.client = YachtsClient.from_config(config)
        self.bot = YachtsBot(
            token=config.telegram_bot_token,
            client=self.client,
            chat_id=config.telegram_chat_id,
        )
        if self.client.mode.uses_feed:
            self.client.on_domain_added = self.bot.on_domain_added
            self.client.on_domain_deleted = self.bot.on_domain_deleted

        self.health_server = HealthServer(
            host=config.health_host,
            port=config.health_port,
            status_provider=self.client.stats,
            enabled=config.health_enabled,
        )
        self._stop_event = asyncio.Event()
        self._stop_lock = asyncio.Lock()
        self._stopped = False

    async def start(self):
        """Start all components and block until stop() is called."""
        logger.info("Starting sinkingyachts bot...")

        await self.client.start()
        await self.bot.start()
        await self.health_server.start()
        await self.bot.announce_ready()

        logger.info("Bot running")
        await self._stop_event.wait()

    async def stop(self):
        """Stop all components (idempotent)."""
        async with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True

            logger.info("Stopping sinkingyachts bot...")
            self._stop_event.set()
            await self.bot.stop()
            await self.health_server.stop()
            await self.client.stop()
            logger.info("Bot stopped")


async def run_bot():
    """Run the example bot."""
    config = load_config()
    configure_logging(config.log_level)

    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.critical(err)
        sys.exit(1)

    runner = BotRunner(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(runner.stop()))

    try:
        await runner.start()
    except KeyboardInterrupt:
        pass
    finally:
        await runner.stop()


def main():
    """Entry point."""
    asyncio.run(run_bot())


if __name__ == "__main__":
    main()
