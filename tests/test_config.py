from pathlib import Path

from tomato.config import DEFAULT_POLL_INTERVAL, AppConfig
from tomato.data.auth import DEFAULT_AUTH_URL


def test_defaults_without_environment() -> None:
    config = AppConfig.from_env({})

    assert config.db_path.name == "tomato.db"
    assert config.remote_url is None
    assert config.auth_url == DEFAULT_AUTH_URL
    assert config.poll_interval_seconds == DEFAULT_POLL_INTERVAL
    assert config.remote_enabled is False
    assert config.debug is False


def test_values_read_from_environment(tmp_path) -> None:
    config = AppConfig.from_env(
        {
            "TOMATO_DB_PATH": str(tmp_path / "x.db"),
            "TOMATO_REMOTE_URL": "https://db.example.test",
            "TOMATO_API_KEY": "key",
            "TOMATO_POLL_INTERVAL": "12",
            "TOMATO_DEBUG": "true",
        }
    )

    assert config.db_path == Path(tmp_path / "x.db")
    assert config.remote_enabled is True
    assert config.poll_interval_seconds == 12
    assert config.debug is True


def test_invalid_poll_interval_keeps_default() -> None:
    config = AppConfig.from_env({"TOMATO_POLL_INTERVAL": "soon"})

    assert config.poll_interval_seconds == DEFAULT_POLL_INTERVAL


def test_remote_needs_api_key() -> None:
    config = AppConfig.from_env({"TOMATO_REMOTE_URL": "https://db.example.test"})

    assert config.remote_enabled is False
