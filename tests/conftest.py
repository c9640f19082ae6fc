from __future__ import annotations

from typing import Callable

import pytest
from PyQt6.QtCore import QCoreApplication

from tomato.core.app_state import AppState
from tomato.core.models import Snapshot
from tomato.core.sync import SyncCoordinator
from tomato.data.remote import Identity
from tomato.data.storage import Storage


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeClock:
    def __init__(self) -> None:
        self._on_tick: Callable[[], None] | None = None
        self.arm_calls = 0

    @property
    def is_armed(self) -> bool:
        return self._on_tick is not None

    def arm(self, on_tick: Callable[[], None]) -> None:
        self.arm_calls += 1
        self._on_tick = on_tick

    def disarm(self) -> None:
        self._on_tick = None

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            if self._on_tick is None:
                return
            self._on_tick()


class FakeSubscription:
    def __init__(self, identity: Identity, on_change, on_error) -> None:
        self.identity = identity
        self.on_change = on_change
        self.on_error = on_error
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeRemoteStore:
    """Holds writes until the test resolves them."""

    def __init__(self) -> None:
        self.saves: list[tuple[Identity, Snapshot]] = []
        self._pending: list[Callable] = []
        self.subscriptions: list[FakeSubscription] = []

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    def save(self, identity: Identity, snapshot: Snapshot, on_done) -> None:
        self.saves.append((identity, snapshot))
        self._pending.append(on_done)

    def complete(self, error: Exception | None = None) -> None:
        self._pending.pop(0)(error)

    def subscribe(self, identity: Identity, on_change, on_error) -> FakeSubscription:
        subscription = FakeSubscription(identity, on_change, on_error)
        self.subscriptions.append(subscription)
        return subscription


@pytest.fixture
def storage(tmp_path) -> Storage:
    store = Storage(tmp_path / "tomato.db")
    store.init_db()
    return store


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def identity() -> Identity:
    return Identity(uid="user-1", token="token-1", email="me@example.com")


@pytest.fixture
def sync(storage, remote) -> SyncCoordinator:
    return SyncCoordinator(storage, remote)


@pytest.fixture
def state(storage, clock, sync) -> AppState:
    return AppState(storage=storage, clock=clock, sync=sync)
