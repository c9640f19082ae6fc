"""Sync coordinator - keeps the local store and the remote document in step."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from tomato.core.models import Snapshot, SyncStatus, encode_settings, encode_tasks
from tomato.data.remote import Identity, RemoteStore, Subscription
from tomato.data.storage import Storage, StorageError

logger = logging.getLogger(__name__)


class SyncCoordinator(QObject):
    """Dirty-checked, local-first persistence with at most one remote write in flight.

    Incoming remote snapshots are announced through ``remote_snapshot`` and
    are applied by the owner as-is (last write wins, echoes of our own writes
    included).
    """

    status_changed = pyqtSignal(object)
    remote_snapshot = pyqtSignal(object)
    identity_changed = pyqtSignal(object)

    def __init__(
        self,
        local: Storage,
        remote: Optional[RemoteStore] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._local = local
        self._remote = remote
        self._identity: Optional[Identity] = None
        self._subscription: Optional[Subscription] = None
        self._status = SyncStatus.SYNCED
        self._in_flight: Optional[tuple[Identity, Snapshot]] = None
        self._deferred: Optional[Snapshot] = None

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    def _set_status(self, status: SyncStatus) -> None:
        if status != self._status:
            self._status = status
            self.status_changed.emit(status)

    def is_dirty(self, snapshot: Snapshot) -> bool:
        return (encode_settings(snapshot.settings), encode_tasks(snapshot.tasks)) != self._local.last_saved()

    def persist(self, snapshot: Snapshot) -> bool:
        """Writes the snapshot if it changed. Returns whether anything was written.

        Raises StorageError when the local write fails; nothing remote is
        attempted in that case.
        """
        if not self.is_dirty(snapshot):
            return False
        self._local.save(snapshot)
        if self._identity is not None and self._remote is not None:
            if self._in_flight is not None:
                self._deferred = snapshot
            else:
                self._push(snapshot)
        return True

    def _push(self, snapshot: Snapshot) -> None:
        identity = self._identity
        write = (identity, snapshot)
        self._in_flight = write
        self._deferred = None
        self._set_status(SyncStatus.SYNCING)
        logger.debug(f"Uploading snapshot for {identity.uid}")
        self._remote.save(identity, snapshot, lambda error: self._on_write_done(write, error))

    def _on_write_done(self, write: tuple[Identity, Snapshot], error: Optional[Exception]) -> None:
        if write is not self._in_flight:
            # Issued for an identity that has since been detached.
            logger.debug(f"Ignoring stale write result for {write[0].uid}")
            return
        written = write[1]
        deferred = self._deferred
        self._in_flight = None
        self._deferred = None
        if error is not None:
            logger.warning(f"Remote save failed: {error}")
            self._set_status(SyncStatus.ERROR)
            return
        self._set_status(SyncStatus.SYNCED)
        if deferred is not None and self._identity is not None and deferred != written:
            self._push(deferred)

    def attach(self, identity: Identity) -> None:
        """Starts listening for the identity's document; local state is left alone."""
        self.detach()
        self._identity = identity
        self.identity_changed.emit(identity)
        if self._remote is None:
            return
        logger.info(f"Subscribing to remote document for {identity.uid}")

        # Callbacks from a handle we no longer own belong to an older identity.
        def on_change(snapshot: Snapshot) -> None:
            if self._subscription is subscription:
                self._on_remote_change(snapshot)

        def on_error(error: Exception) -> None:
            if self._subscription is subscription:
                self._on_remote_error(error)

        subscription = self._remote.subscribe(identity, on_change, on_error)
        self._subscription = subscription

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self._identity is not None:
            logger.info(f"Detached remote sync for {self._identity.uid}")
            self._identity = None
            self._deferred = None
            if self._in_flight is not None:
                self._in_flight = None
                self._set_status(SyncStatus.SYNCED)
            self.identity_changed.emit(None)

    def _on_remote_change(self, snapshot: Snapshot) -> None:
        if self._in_flight is None:
            self._set_status(SyncStatus.SYNCED)
        self.remote_snapshot.emit(snapshot)

    def _on_remote_error(self, error: Exception) -> None:
        logger.error(f"Remote sync error: {error}")
        self._set_status(SyncStatus.ERROR)
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        try:
            fallback = self._local.load()
        except StorageError as e:
            logger.error(f"Fallback load failed: {e}")
            return
        if fallback is not None:
            self.remote_snapshot.emit(fallback)

    def close(self) -> None:
        self.detach()
