"""Remote document store: one JSON document per user.

The HTTP side speaks the Firebase Realtime Database REST dialect
(``GET``/``PUT`` on ``{base_url}/users/{uid}.json?auth=<token>``). Requests
are blocking, so ``HttpRemoteStore`` runs them on a ``QThreadPool`` and
hands the outcome back to the GUI thread through a queued signal. Change
notifications are delivered by polling the document and reporting new
``lastUpdated`` values.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

import requests
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, QTimer, pyqtSignal, pyqtSlot

from tomato.core.models import Snapshot

__all__ = [
    "DocumentClient",
    "HttpRemoteStore",
    "Identity",
    "PollingSubscription",
    "RemoteAuthError",
    "RemoteStore",
    "RemoteStoreError",
    "Subscription",
]

logger = logging.getLogger(__name__)


class RemoteStoreError(Exception):
    """Remote document store error."""

    pass


class RemoteAuthError(RemoteStoreError):
    """The token was rejected."""

    pass


@dataclass(frozen=True)
class Identity:
    """An authenticated user."""

    uid: str
    token: str
    email: str = ""


class Subscription(Protocol):
    def close(self) -> None: ...


class RemoteStore(Protocol):
    """Asynchronous, fallible backend available only for an identity."""

    def save(
        self,
        identity: Identity,
        snapshot: Snapshot,
        on_done: Callable[[Optional[Exception]], None],
    ) -> None: ...

    def subscribe(
        self,
        identity: Identity,
        on_change: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None],
    ) -> Subscription: ...


def build_payload(snapshot: Snapshot) -> dict:
    """Document body; lastUpdated is informational only."""
    payload = snapshot.to_dict()
    payload["lastUpdated"] = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return payload


class DocumentClient:
    """Blocking HTTP access to a user's document."""

    USER_AGENT = "Tomato-Timer/0.1.0"

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        """Initialize document client.

        Args:
            base_url: Database root URL
            timeout: Request timeout in seconds
            session: Optional requests session (for dependency injection/testing)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    def document_url(self, identity: Identity) -> str:
        return f"{self.base_url}/users/{identity.uid}.json"

    def _request(self, method: str, identity: Identity, data: Optional[dict] = None) -> Any:
        kwargs: dict = {
            "timeout": self.timeout,
            "headers": {"Accept": "application/json", "User-Agent": self.USER_AGENT},
            "params": {"auth": identity.token},
        }
        if data is not None:
            kwargs["json"] = data
        try:
            response = self._session.request(method, self.document_url(identity), **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise RemoteStoreError("Cannot connect to remote store") from e
        except requests.exceptions.Timeout as e:
            raise RemoteStoreError("Request timed out") from e

        if response.status_code in (401, 403):
            raise RemoteAuthError("Permission denied")
        if response.status_code >= 400:
            detail = ""
            try:
                detail = response.json().get("error", "")
            except (ValueError, AttributeError):
                pass
            raise RemoteStoreError(f"Remote store error ({response.status_code}): {detail or response.reason}")
        try:
            return response.json() if response.content else None
        except ValueError as e:
            raise RemoteStoreError("Remote store returned invalid JSON") from e

    def get_document(self, identity: Identity) -> Optional[dict]:
        """Returns the document, or None when the user has none yet."""
        document = self._request("GET", identity)
        if document is not None and not isinstance(document, dict):
            raise RemoteStoreError("Remote document is not an object")
        return document

    def put_document(self, identity: Identity, payload: dict) -> None:
        self._request("PUT", identity, data=payload)

    def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "DocumentClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class _Call(QRunnable):
    def __init__(self, call_id: int, fn: Callable[[], Any], done: pyqtSignal) -> None:
        super().__init__()
        self._call_id = call_id
        self._fn = fn
        self._done = done

    def run(self) -> None:
        result: Any = None
        error: Optional[Exception] = None
        try:
            result = self._fn()
        except Exception as e:
            error = e
        self._done.emit(self._call_id, result, error)


class PollingSubscription(QObject):
    """Watches one document and reports each new version.

    Stops for good after the first error, like a listener that was cancelled
    by the server. ``close()`` is idempotent and silences late results.
    """

    def __init__(
        self,
        store: "HttpRemoteStore",
        identity: Identity,
        on_change: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None],
        interval_ms: int,
    ) -> None:
        super().__init__(store)
        self._store = store
        self._identity = identity
        self._on_change = on_change
        self._on_error = on_error
        self._last_seen: Optional[str] = None
        self._polling = False
        self._closed = False
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.poll)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self._timer.start()
        self.poll()

    def poll(self) -> None:
        if self._closed or self._polling:
            return
        self._polling = True
        self._store.submit(lambda: self._store.client.get_document(self._identity), self._on_polled)

    def _on_polled(self, document: Optional[dict], error: Optional[Exception]) -> None:
        self._polling = False
        if self._closed:
            return
        if error is None and document is not None:
            version = document.get("lastUpdated")
            if version is not None and version == self._last_seen:
                return
            try:
                snapshot = Snapshot.from_dict(document)
            except (KeyError, TypeError, ValueError) as e:
                error = RemoteStoreError(f"Malformed remote document: {e}")
            else:
                self._last_seen = version
                self._on_change(snapshot)
                return
        if error is not None:
            self.close()
            self._on_error(error)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._timer.stop()
        self.deleteLater()

    def __enter__(self) -> "PollingSubscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HttpRemoteStore(QObject):
    """RemoteStore over DocumentClient with results delivered on the GUI thread."""

    _call_finished = pyqtSignal(int, object, object)

    def __init__(
        self,
        client: DocumentClient,
        poll_interval_ms: int = 5000,
        pool: Optional[QThreadPool] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.client = client
        self.poll_interval_ms = poll_interval_ms
        self._pool = pool or QThreadPool.globalInstance()
        self._ids = itertools.count(1)
        self._callbacks: dict[int, Callable[[Any, Optional[Exception]], None]] = {}
        self._call_finished.connect(self._dispatch)

    def submit(self, fn: Callable[[], Any], callback: Callable[[Any, Optional[Exception]], None]) -> None:
        call_id = next(self._ids)
        self._callbacks[call_id] = callback
        self._pool.start(_Call(call_id, fn, self._call_finished))

    @pyqtSlot(int, object, object)
    def _dispatch(self, call_id: int, result: Any, error: Optional[Exception]) -> None:
        callback = self._callbacks.pop(call_id, None)
        if callback is not None:
            callback(result, error)

    def save(
        self,
        identity: Identity,
        snapshot: Snapshot,
        on_done: Callable[[Optional[Exception]], None],
    ) -> None:
        payload = build_payload(snapshot)
        self.submit(lambda: self.client.put_document(identity, payload), lambda _result, error: on_done(error))

    def subscribe(
        self,
        identity: Identity,
        on_change: Callable[[Snapshot], None],
        on_error: Callable[[Exception], None],
    ) -> PollingSubscription:
        subscription = PollingSubscription(self, identity, on_change, on_error, self.poll_interval_ms)
        subscription.start()
        return subscription

    def close(self) -> None:
        self._pool.waitForDone(self.client.timeout * 1000)
        self.client.close()
