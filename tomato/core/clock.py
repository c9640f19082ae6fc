from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


TICK_INTERVAL_MS = 1000


class Clock(Protocol):
    def arm(self, on_tick: Callable[[], None]) -> None: ...

    def disarm(self) -> None: ...

    @property
    def is_armed(self) -> bool: ...


class QtClock(QObject):
    """One-second tick source backed by a QTimer on the GUI thread."""

    def __init__(self, interval_ms: int = TICK_INTERVAL_MS, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)
        self._on_tick: Callable[[], None] | None = None

    @property
    def is_armed(self) -> bool:
        return self._on_tick is not None

    def arm(self, on_tick: Callable[[], None]) -> None:
        self._on_tick = on_tick
        self._timer.start()

    def disarm(self) -> None:
        self._timer.stop()
        self._on_tick = None

    def _on_timeout(self) -> None:
        if self._on_tick is not None:
            self._on_tick()
