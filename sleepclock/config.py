"""Configuration management"""
import logging
import os
from pathlib import Path
from dotenv import load_dotenv
import pytz

from sleepclock.exceptions import ConfigurationError

load_dotenv()

# Storage
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))
SETTINGS_FILE: Path = Path(os.getenv("SETTINGS_FILE", str(DATA_PATH / "settings.json")))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Clock
# Seconds between re-evaluations of the schedule
TICK_INTERVAL_SECONDS: float = float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))

# IANA timezone for "now" (e.g. 'Europe/Stockholm')
TIMEZONE: str = os.getenv("TIMEZONE") or "UTC"


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if TICK_INTERVAL_SECONDS <= 0:
        raise ConfigurationError(
            f"TICK_INTERVAL_SECONDS must be positive, got {TICK_INTERVAL_SECONDS}",
            config_key="TICK_INTERVAL_SECONDS"
        )
    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        raise ConfigurationError(
            f"Unknown LOG_LEVEL '{LOG_LEVEL}'",
            config_key="LOG_LEVEL"
        )
    try:
        pytz.timezone(TIMEZONE)
    except pytz.exceptions.UnknownTimeZoneError as e:
        raise ConfigurationError(
            f"Invalid timezone: '{TIMEZONE}'. "
            f"Please use IANA timezone (e.g., 'Europe/Stockholm', 'America/New_York')",
            config_key="TIMEZONE",
            cause=e
        )
