from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal

from tomato.core.alerts import Alerts
from tomato.core.clock import Clock
from tomato.core.models import Settings, Snapshot, SyncStatus, TaskRecord
from tomato.core.sync import SyncCoordinator
from tomato.core.timer import PhaseTimer, PhaseTransition, TimerSnapshot
from tomato.data import transfer
from tomato.data.remote import Identity
from tomato.data.storage import Storage, StorageError


logger = logging.getLogger(__name__)


class AppState(QObject):
    """Owns settings, the session log and the timer; the UI talks only to this."""

    state_changed = pyqtSignal()
    ticked = pyqtSignal(object)
    phase_changed = pyqtSignal(object)
    settings_changed = pyqtSignal(object)
    tasks_changed = pyqtSignal()
    sync_status_changed = pyqtSignal(object)
    identity_changed = pyqtSignal(object)
    storage_failed = pyqtSignal(str)

    def __init__(
        self,
        storage: Storage,
        clock: Clock,
        sync: SyncCoordinator,
        alerts: Alerts | None = None,
    ) -> None:
        super().__init__()
        self._storage = storage
        self._clock = clock
        self._sync = sync
        self._alerts = alerts
        self.settings = Settings()
        self.tasks: list[TaskRecord] = []
        self.timer = PhaseTimer(self.settings)
        self._sync.remote_snapshot.connect(self._apply_remote)
        self._sync.status_changed.connect(self.sync_status_changed)
        self._sync.identity_changed.connect(self.identity_changed)

    @property
    def sync_status(self) -> SyncStatus:
        return self._sync.status

    @property
    def identity(self) -> Identity | None:
        return self._sync.identity

    def snapshot(self) -> Snapshot:
        return Snapshot(settings=self.settings, tasks=tuple(self.tasks))

    def timer_snapshot(self) -> TimerSnapshot:
        return self.timer.snapshot()

    def load_from_storage(self) -> None:
        """Adopts the local copy as-is; nothing is written back."""
        snapshot = self._storage.load()
        if snapshot is not None:
            self._replace(snapshot)

    def set_pending_task(self, title: str, notes: str = "") -> None:
        self.timer.set_pending_task(title, notes)
        self.state_changed.emit()

    def toggle(self) -> bool:
        if not self.timer.toggle():
            return False
        if self.timer.armed:
            self._clock.arm(self._on_tick)
        else:
            self._clock.disarm()
        self.ticked.emit(self.timer.snapshot())
        self.state_changed.emit()
        return True

    def reset(self) -> None:
        self.timer.reset()
        self.ticked.emit(self.timer.snapshot())
        self.state_changed.emit()

    def update_settings(self, focus_time: int, break_time: int) -> None:
        settings = Settings(focus_time=focus_time, break_time=break_time)
        self.settings = settings
        self.timer.apply_settings(settings)
        self.settings_changed.emit(settings)
        self.ticked.emit(self.timer.snapshot())
        self.state_changed.emit()
        self._persist()

    def export_to(self, path: str | Path) -> Path:
        return transfer.export_snapshot(self.snapshot(), path)

    def import_from(self, path: str | Path) -> None:
        """Replaces settings and the log wholesale; raises ImportFormatError untouched."""
        snapshot = transfer.import_snapshot(path)
        self._replace(snapshot)
        self._persist()
        logger.info(f"Imported {len(snapshot.tasks)} tasks from {path}")

    def sign_in(self, identity: Identity) -> None:
        self._sync.attach(identity)

    def sign_out(self) -> None:
        self._sync.detach()
        try:
            self.load_from_storage()
        except StorageError as e:
            self._report_storage_error(e)

    def shutdown(self) -> None:
        self.timer.disarm()
        self._clock.disarm()
        self._sync.close()

    def _on_tick(self) -> None:
        transition = self.timer.tick()
        if transition is not None:
            self._finish_phase(transition)
        self.ticked.emit(self.timer.snapshot())

    def _finish_phase(self, transition: PhaseTransition) -> None:
        if self._alerts is not None:
            try:
                self._alerts.phase_finished(transition.finished)
            except Exception as e:
                logger.debug(f"Phase alert failed: {e}")
        if transition.task is not None:
            self.tasks.append(transition.task)
            self.tasks_changed.emit()
            self._persist()
        self.phase_changed.emit(transition)
        self.state_changed.emit()

    def _apply_remote(self, snapshot: Snapshot) -> None:
        # Last write wins: whatever arrives replaces local state.
        self._replace(snapshot)
        self._persist()

    def _replace(self, snapshot: Snapshot) -> None:
        self.settings = snapshot.settings
        self.tasks = list(snapshot.tasks)
        self.timer.apply_settings(self.settings)
        self.settings_changed.emit(self.settings)
        self.tasks_changed.emit()
        self.ticked.emit(self.timer.snapshot())
        self.state_changed.emit()

    def _persist(self) -> None:
        try:
            self._sync.persist(self.snapshot())
        except StorageError as e:
            self._report_storage_error(e)

    def _report_storage_error(self, error: StorageError) -> None:
        logger.error(f"Local save failed: {error}")
        self.storage_failed.emit(str(error))
