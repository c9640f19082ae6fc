from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tomato.core.models import Settings, TaskRecord


class Phase(str, Enum):
    FOCUS = "focus"
    BREAK = "break"


@dataclass(frozen=True)
class TimerSnapshot:
    phase: Phase
    total_seconds: int
    remaining_seconds: int
    armed: bool
    pending_title: str
    pending_notes: str

    @property
    def progress(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self.remaining_seconds / self.total_seconds))


@dataclass(frozen=True)
class PhaseTransition:
    finished: Phase
    started: Phase
    task: TaskRecord | None = None


class PhaseTimer:
    """Focus/break countdown driven by external one-second ticks."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._phase = Phase.FOCUS
        self._remaining_sec = self._settings.focus_seconds
        self._armed = False
        self._pending_title = ""
        self._pending_notes = ""

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_sec

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def pending_title(self) -> str:
        return self._pending_title

    @property
    def pending_notes(self) -> str:
        return self._pending_notes

    @property
    def can_arm(self) -> bool:
        return self._phase == Phase.BREAK or bool(self._pending_title.strip())

    def phase_duration(self, phase: Phase | None = None) -> int:
        phase = phase or self._phase
        if phase == Phase.FOCUS:
            return self._settings.focus_seconds
        return self._settings.break_seconds

    def set_pending_task(self, title: str, notes: str = "") -> None:
        self._pending_title = title
        self._pending_notes = notes

    def toggle(self) -> bool:
        """Flips armed; refuses to arm a focus phase that has no task."""
        if not self._armed and not self.can_arm:
            return False
        self._armed = not self._armed
        return True

    def disarm(self) -> None:
        self._armed = False

    def reset(self) -> None:
        self._remaining_sec = self.phase_duration()

    def apply_settings(self, settings: Settings) -> None:
        # A running countdown keeps its length; only later phases pick up the change.
        self._settings = settings
        if not self._armed:
            self._remaining_sec = self.phase_duration()

    def tick(self) -> PhaseTransition | None:
        if not self._armed:
            return None

        if self._remaining_sec > 0:
            self._remaining_sec -= 1
        if self._remaining_sec > 0:
            return None

        finished = self._phase
        task: TaskRecord | None = None
        if finished == Phase.FOCUS and self._pending_title.strip():
            task = TaskRecord.create(self._pending_title, self._pending_notes)
            self._pending_title = ""
            self._pending_notes = ""

        self._phase = Phase.BREAK if finished == Phase.FOCUS else Phase.FOCUS
        self._remaining_sec = self.phase_duration()
        return PhaseTransition(finished=finished, started=self._phase, task=task)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            total_seconds=self.phase_duration(),
            remaining_seconds=self._remaining_sec,
            armed=self._armed,
            pending_title=self._pending_title,
            pending_notes=self._pending_notes,
        )
