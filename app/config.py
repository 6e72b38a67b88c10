"""
Configuration for the PlantCare scheduling engine
==================================================
Runtime settings for the care registry, the key-value store it persists to,
the reminder scheduler and the HTTP boundary.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from app.domain.exceptions import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be a number.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PLANTCARE_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("PLANTCARE_SECRET_KEY", "PlantCareDevSecretKey"))

    # Shared key-value store (one file per key, reachable by several processes)
    store_dir: str = field(default_factory=lambda: os.getenv("PLANTCARE_STORE_DIR", "var"))
    store_key: str = field(default_factory=lambda: os.getenv("PLANTCARE_STORE_KEY", "SavedPlants"))
    store_poll_seconds: int = field(default_factory=lambda: _env_int("PLANTCARE_STORE_POLL_SECONDS", 2))
    store_lock_timeout: float = field(default_factory=lambda: _env_float("PLANTCARE_STORE_LOCK_TIMEOUT", 5.0))
    shutdown_drain_seconds: float = field(default_factory=lambda: _env_float("PLANTCARE_SHUTDOWN_DRAIN_SECONDS", 10.0))

    # Seed the starter collection when the store is empty
    seed_sample_plants: bool = field(default_factory=lambda: _env_bool("PLANTCARE_SEED_SAMPLES", True))

    # Reminder scheduler
    scheduler_check_interval: float = field(
        default_factory=lambda: _env_float("PLANTCARE_SCHEDULER_CHECK_INTERVAL", 1.0)
    )
    scheduler_max_workers: int = field(default_factory=lambda: _env_int("PLANTCARE_SCHEDULER_MAX_WORKERS", 2))

    eventbus_queue_size: int = field(default_factory=lambda: _env_int("PLANTCARE_EVENTBUS_QUEUE_SIZE", 1024))
    eventbus_worker_count: int = field(default_factory=lambda: _env_int("PLANTCARE_EVENTBUS_WORKER_COUNT", 2))

    # HTTP boundary
    host: str = field(default_factory=lambda: os.getenv("PLANTCARE_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PLANTCARE_PORT", 8000))

    DEBUG: bool = field(default_factory=lambda: _env_bool("PLANTCARE_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_DIR", "logs"))

    _DEFAULT_SECRET_KEY: str = field(default="PlantCareDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise ConfigurationError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set PLANTCARE_SECRET_KEY environment variable to a secure random value."
            )
        if self.store_poll_seconds <= 0:
            raise ConfigurationError("PLANTCARE_STORE_POLL_SECONDS must be positive.")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "STORE_DIR": self.store_dir,
            "STORE_KEY": self.store_key,
            "DEBUG": self.DEBUG,
        }


def setup_logging(debug: bool = False, *, level: str | None = None, log_dir: str = "logs") -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when setup runs more than once
    has_console = any(getattr(h, "name", "") == "plantcare_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "plantcare_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8 so plant names in any script log cleanly)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "plantcare_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "plantcare.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.name = "plantcare_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"plantcare_console", "plantcare_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("PLANTCARE_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
