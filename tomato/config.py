"""Configuration management for Tomato Timer."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from platformdirs import user_data_dir, user_log_dir

from tomato.data.auth import DEFAULT_AUTH_URL

__all__ = ["AppConfig", "setup_logging"]

logger = logging.getLogger(__name__)

APP_NAME = "Tomato Timer"
APP_AUTHOR = "Tomato"

DEFAULT_POLL_INTERVAL = 5  # seconds
DEFAULT_REQUEST_TIMEOUT = 10  # seconds


def _data_dir() -> Path:
    return Path(user_data_dir(APP_NAME, APP_AUTHOR))


def _log_dir() -> Path:
    return Path(user_log_dir(APP_NAME, APP_AUTHOR))


@dataclass
class AppConfig:
    """Runtime configuration, read from the environment."""

    db_path: Path = field(default_factory=lambda: _data_dir() / "tomato.db")
    remote_url: Optional[str] = None  # Remote sync is off unless this is set
    auth_url: str = DEFAULT_AUTH_URL
    api_key: Optional[str] = None
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    debug: bool = False

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url and self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        config = cls()
        if env.get("TOMATO_DB_PATH"):
            config.db_path = Path(env["TOMATO_DB_PATH"]).expanduser()
        config.remote_url = env.get("TOMATO_REMOTE_URL") or None
        config.auth_url = env.get("TOMATO_AUTH_URL") or DEFAULT_AUTH_URL
        config.api_key = env.get("TOMATO_API_KEY") or None
        poll = env.get("TOMATO_POLL_INTERVAL")
        if poll:
            try:
                config.poll_interval_seconds = max(1, int(poll))
            except ValueError:
                logger.warning(f"Ignoring invalid TOMATO_POLL_INTERVAL={poll!r}")
        config.debug = env.get("TOMATO_DEBUG", "").lower() in {"1", "true", "yes"}
        return config


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    log_dir = _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tomato-timer.log"

    level = logging.DEBUG if debug else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(),
        ],
    )

    # Reduce noise from libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
