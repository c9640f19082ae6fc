from __future__ import annotations

"""Tomato Timer entry point.

Builds the Qt application, the local store, the optional remote sync
stack, loads saved state and shows the main window.
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from tomato.config import AppConfig, setup_logging
from tomato.core.app_state import AppState
from tomato.core.clock import QtClock
from tomato.core.sync import SyncCoordinator
from tomato.data.auth import AuthClient
from tomato.data.remote import DocumentClient, HttpRemoteStore
from tomato.data.storage import Storage, StorageError
from tomato.ui.main_window import MainWindow
from tomato.ui.notifier import QtAlerts
from tomato.ui.styles import apply_theme


logger = logging.getLogger(__name__)


def restore_saved_state(app_state: AppState) -> str | None:
    """Loads the local copy; on unreadable data keeps defaults and returns the reason."""
    try:
        app_state.load_from_storage()
    except StorageError as e:
        logger.error(f"Could not restore saved data: {e}")
        return str(e)
    return None


def main() -> int:
    """Creates the application's dependencies and runs the UI loop."""
    config = AppConfig.from_env()
    setup_logging(config.debug)

    app = QApplication(sys.argv)
    app.setApplicationName("Tomato Timer")
    apply_theme(app)

    storage = Storage(config.db_path)
    try:
        storage.init_db()
    except StorageError as e:
        logger.error(f"Cannot open local storage: {e}")
        QMessageBox.critical(None, "Storage error", f"Cannot open local data.\n\n{e}")
        return 1

    remote: HttpRemoteStore | None = None
    auth: AuthClient | None = None
    if config.remote_enabled:
        client = DocumentClient(config.remote_url, timeout=config.request_timeout)
        remote = HttpRemoteStore(client, poll_interval_ms=config.poll_interval_seconds * 1000)
        auth = AuthClient(config.api_key, auth_url=config.auth_url, timeout=config.request_timeout)
    else:
        logger.info("Remote sync disabled; set TOMATO_REMOTE_URL and TOMATO_API_KEY to enable it")

    sync = SyncCoordinator(storage, remote)
    app_state = AppState(storage=storage, clock=QtClock(), sync=sync, alerts=QtAlerts())
    problem = restore_saved_state(app_state)

    window = MainWindow(storage=storage, app_state=app_state, auth=auth)
    window.show()
    if problem is not None:
        QMessageBox.critical(window, "Storage error", f"Saved data could not be read; starting with defaults.\n\n{problem}")
    try:
        return app.exec()
    finally:
        if remote is not None:
            remote.close()
        if auth is not None:
            auth.close()


if __name__ == "__main__":
    raise SystemExit(main())
