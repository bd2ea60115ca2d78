"""
Main entry point for the Aori arbitrage bot.
Orchestrates all components and runs the main event loop.
"""

import asyncio
import signal
import sys
from typing import Optional

# Use uvloop for better performance on Linux
try:
    import uvloop
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
except ImportError:
    pass  # uvloop not available (Windows)

from .arbitrage.simple_arb import SimpleArb
from .clients.provider import AoriProvider
from .config import load_config, Config
from .engine.collector import AoriCollector
from .engine.core import Engine, Executor
from .engine.executor import AoriExecutor, LoggingExecutor
from .exceptions import AoriError, ConfigError
from .utils.logger import setup_logging, get_logger

logger = get_logger("main")


class AoriArbBot:
    """
    Main bot orchestrator.

    Coordinates:
    - Provider connection and wallet session
    - Event collection from both sockets
    - Arbitrage detection
    - Take-order dispatch
    """

    def __init__(self, config: Config):
        """Initialize bot with configuration."""
        self.config = config
        self._running = False
        self._shutdown_event = asyncio.Event()

        self.provider: Optional[AoriProvider] = None
        self.collector: Optional[AoriCollector] = None
        self.strategy: Optional[SimpleArb] = None
        self.executor: Optional[Executor] = None
        self.engine: Optional[Engine] = None

    async def initialize(self) -> None:
        """Connect and build all components."""
        logger.info("Initializing Aori Arbitrage Bot")

        self.provider = await AoriProvider.from_config(self.config)
        await self.provider.auth_wallet()

        self.collector = AoriCollector(self.provider)

        self.strategy = SimpleArb(
            signer=self.provider.signer,
            counter=self.provider.counter,
            api_key=self.config.aori.api_key,
            seat_id=self.config.aori.seat_id,
            prune_inactive=self.config.strategy.prune_inactive
        )

        if self.config.strategy.simulation_mode:
            logger.warning("Simulation mode - take orders will be logged, not sent")
            self.executor = LoggingExecutor()
        else:
            self.executor = AoriExecutor(self.provider)

        self.engine = Engine(self.collector, self.strategy, self.executor)

        logger.info("Bot initialized successfully")

    async def run(self) -> None:
        """Run the engine until the streams end or shutdown is requested."""
        self._running = True
        logger.info("Starting Aori Arbitrage Bot")

        engine_task = asyncio.create_task(self.engine.run())
        stats_task = asyncio.create_task(self._run_stats_reporter())
        shutdown_task = asyncio.create_task(self._shutdown_event.wait())

        try:
            done, _ = await asyncio.wait(
                {engine_task, shutdown_task},
                return_when=asyncio.FIRST_COMPLETED
            )
            if engine_task in done:
                # Streams ended: no reconnection, surface it
                logger.warning("Event stream ended")
                engine_task.result()
        finally:
            self._running = False
            for task in (engine_task, stats_task, shutdown_task):
                task.cancel()
            await asyncio.gather(engine_task, stats_task, shutdown_task, return_exceptions=True)

    async def _run_stats_reporter(self) -> None:
        """Periodically report statistics."""
        while self._running:
            await asyncio.sleep(60)  # Every minute
            self._log_stats()

    def _log_stats(self) -> None:
        """Log current statistics."""
        strategy_stats = self.strategy.get_stats() if self.strategy else None
        engine_stats = self.engine.get_stats() if self.engine else None

        logger.info(
            "Bot statistics",
            extra={
                "events_seen": strategy_stats.events_seen if strategy_stats else 0,
                "ledger_size": len(self.strategy.ledger) if self.strategy else 0,
                "matches_found": strategy_stats.matches_found if strategy_stats else 0,
                "actions_dispatched": engine_stats.actions_dispatched if engine_stats else 0,
                "actions_failed": engine_stats.actions_failed if engine_stats else 0,
                "frames_dropped": self.collector.frames_dropped if self.collector else 0
            }
        )

    async def shutdown(self) -> None:
        """Gracefully shutdown the bot."""
        logger.info("Shutting down bot")
        self._running = False

        if self.engine:
            self.engine.stop()

        if self.collector:
            await self.collector.close()

        if self.provider:
            await self.provider.close()

        self._log_stats()
        logger.info("Bot shutdown complete")

    def request_shutdown(self) -> None:
        """Request graceful shutdown."""
        self._shutdown_event.set()


def setup_signal_handlers(bot: AoriArbBot) -> None:
    """Set up signal handlers for graceful shutdown."""
    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        bot.request_shutdown()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def main() -> None:
    """Main entry point."""
    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(
        level=config.logging.log_level,
        json_format=config.logging.json_logging
    )

    logger.info("Starting Aori Arbitrage Bot")

    bot = AoriArbBot(config)
    setup_signal_handlers(bot)

    try:
        await bot.initialize()
    except (AoriError, ConnectionError) as e:
        logger.error(f"Startup failed: {e}")
        print(f"Startup failed: {e}")
        await bot.shutdown()
        sys.exit(1)

    try:
        await bot.run()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
    finally:
        await bot.shutdown()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
