"""Main entry point for the ok-to-wake clock"""
import logging
import asyncio
from sleepclock.config import validate_config, LOG_LEVEL, SETTINGS_FILE
from sleepclock.scheduler.clock_driver import ClockDriver
from sleepclock.services.nap_overlay import InMemoryNapStore
from sleepclock.services.settings_store import JsonFileKeyValueStore, SettingsStore

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point"""
    driver = None
    try:
        # Validate configuration
        logger.info("Validating configuration...")
        validate_config()

        # Load settings
        logger.info(f"Loading settings from {SETTINGS_FILE}...")
        settings_store = SettingsStore(JsonFileKeyValueStore(SETTINGS_FILE))
        settings_store.load()

        # Start clock
        driver = ClockDriver(
            schedule_provider=settings_store.get_schedule,
            nap_store=InMemoryNapStore(),
        )
        driver.start()

        logger.info("Clock is running. Press Ctrl+C to stop.")
        await asyncio.Event().wait()

    except asyncio.CancelledError:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        # Cleanup
        if driver:
            logger.info("Stopping clock...")
            await driver.stop()

        logger.info("Shutdown complete")


def run() -> None:
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
