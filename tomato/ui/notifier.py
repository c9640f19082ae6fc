from __future__ import annotations

"""Phase-complete side effects: an audible cue plus a tray notification."""

import logging

from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QApplication, QStyle, QSystemTrayIcon

from tomato.core.alerts import APP_TITLE, message_for
from tomato.core.timer import Phase


logger = logging.getLogger(__name__)


class QtAlerts:
    """Beeps and shows a tray balloon; never raises."""

    def __init__(self) -> None:
        self._tray: QSystemTrayIcon | None = None
        self._tray_checked = False

    def phase_finished(self, finished: Phase) -> None:
        self._play_sound()
        self._notify(message_for(finished))

    def _play_sound(self) -> None:
        try:
            QApplication.beep()
        except Exception as e:
            logger.debug(f"Failed to play sound: {e}")

    def _notify(self, message: str) -> None:
        try:
            tray = self._ensure_tray()
            if tray is None:
                logger.debug("System tray unavailable, notification skipped")
                return
            tray.showMessage(APP_TITLE, message, QSystemTrayIcon.MessageIcon.Information, 5000)
        except Exception as e:
            logger.debug(f"Failed to send notification: {e}")

    def _ensure_tray(self) -> QSystemTrayIcon | None:
        # Created on first use; a missing tray is treated like a denied permission.
        if self._tray_checked:
            return self._tray
        self._tray_checked = True
        if not QSystemTrayIcon.isSystemTrayAvailable():
            return None
        app = QApplication.instance()
        icon = app.style().standardIcon(QStyle.StandardPixmap.SP_MessageBoxInformation) if app else QIcon()
        self._tray = QSystemTrayIcon(icon)
        self._tray.show()
        return self._tray
