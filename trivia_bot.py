#!/usr/bin/env python3
"""
Trivia Bot Orchestrator

Starts the pieces in order and tears them down in reverse:

1. NATS connection (command and chat event bus)
2. Database (trivia scores and command log)
3. Card catalog (local cache file or HTTP endpoint)
4. Trivia plugin (subscriptions)

All trivia behaviour lives in the trivia plugin package.
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

import nats
from nats.aio.client import Client as NATS

from common.config import get_config
from common.database import BotDatabase
from trivia.catalog import CardCatalog
from trivia.plugin import TriviaPlugin
from trivia.providers import CatalogProvider, HttpCatalogProvider, LocalCatalogProvider
from trivia.storage import TriviaStorage

logger = logging.getLogger(__name__)


def build_catalog_provider(catalog_config: Dict[str, Any]) -> CatalogProvider:
    """Pick the catalog source from the 'catalog' config section."""
    if catalog_config.get('url'):
        return HttpCatalogProvider(
            catalog_config['url'],
            timeout=catalog_config.get('timeout', HttpCatalogProvider.DEFAULT_TIMEOUT),
        )
    return LocalCatalogProvider(catalog_config.get('path', 'cache/items.json'))


class TriviaBot:
    """
    Trivia bot orchestrator.

    Responsibilities:
    1. Connect infrastructure (NATS, database)
    2. Load the catalog and start the plugin
    3. Coordinate graceful shutdown
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.nats: Optional[NATS] = None
        self.database: Optional[BotDatabase] = None
        self.catalog: Optional[CardCatalog] = None
        self.plugin: Optional[TriviaPlugin] = None

    async def start(self) -> None:
        """Start all components in order."""
        try:
            logger.info(f"Connecting to NATS at {self.config['nats_url']}...")
            self.nats = await nats.connect(self.config['nats_url'], name='trivia-bot')

            logger.info("Connecting to database...")
            self.database = BotDatabase(self.config['database_url'])
            await self.database.connect(create_tables=True)
            storage = TriviaStorage(self.database)
            await storage.cleanup()

            logger.info("Loading card catalog...")
            provider = build_catalog_provider(self.config['catalog'])
            try:
                self.catalog = await provider.load()
            finally:
                await provider.close()

            self.plugin = TriviaPlugin(
                self.nats,
                self.catalog,
                storage=storage,
                config=self.config['trivia'],
            )
            await self.plugin.initialize()

            logger.info("Trivia bot started")

        except Exception as e:
            logger.error(f"Failed to start trivia bot: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop all components in reverse order."""
        logger.info("Shutting down trivia bot...")

        if self.plugin:
            await self.plugin.shutdown()
            self.plugin = None
        if self.database:
            await self.database.close()
            self.database = None
        if self.nats and not self.nats.is_closed:
            await self.nats.drain()
        self.nats = None

        logger.info("Trivia bot stopped")


async def run(config: Dict[str, Any]) -> None:
    """Run the bot until SIGINT/SIGTERM."""
    bot = TriviaBot(config)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    await bot.start()
    try:
        await stop_event.wait()
        logger.info("Received shutdown signal")
    finally:
        await bot.stop()


def main(argv=None) -> int:
    """Entry point: trivia-bot <config file>"""
    config = get_config(argv)
    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        pass
    except Exception:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
