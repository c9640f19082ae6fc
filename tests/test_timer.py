import pytest

from tomato.core.models import Settings
from tomato.core.timer import Phase, PhaseTimer


def test_initial_state_is_disarmed_focus() -> None:
    timer = PhaseTimer()

    assert timer.phase == Phase.FOCUS
    assert timer.remaining_seconds == 25 * 60
    assert timer.armed is False


def test_cannot_arm_focus_without_task() -> None:
    timer = PhaseTimer()

    assert timer.toggle() is False
    assert timer.armed is False

    timer.set_pending_task("   ")
    assert timer.toggle() is False

    timer.set_pending_task("Write report")
    assert timer.toggle() is True
    assert timer.armed is True


def test_tick_while_disarmed_does_nothing() -> None:
    timer = PhaseTimer()

    assert timer.tick() is None
    assert timer.remaining_seconds == 25 * 60


def test_toggle_keeps_remaining() -> None:
    timer = PhaseTimer()
    timer.set_pending_task("Task")
    timer.toggle()
    timer.tick()
    timer.tick()

    timer.toggle()
    timer.tick()

    assert timer.armed is False
    assert timer.remaining_seconds == 25 * 60 - 2


def test_last_tick_flips_to_break_with_full_duration() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=2))
    timer.set_pending_task("Write report", "draft")
    timer.toggle()

    for _ in range(59):
        assert timer.tick() is None
    assert timer.remaining_seconds == 1

    transition = timer.tick()

    assert transition is not None
    assert transition.finished == Phase.FOCUS
    assert transition.started == Phase.BREAK
    assert timer.phase == Phase.BREAK
    assert timer.remaining_seconds == 120
    assert timer.armed is True


def test_focus_completion_creates_record_and_clears_pending() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=1))
    timer.set_pending_task("Write report", "draft")
    timer.toggle()

    transition = None
    for _ in range(60):
        transition = timer.tick() or transition

    assert transition.task is not None
    assert transition.task.title == "Write report"
    assert transition.task.notes == "draft"
    assert timer.pending_title == ""
    assert timer.pending_notes == ""


def test_break_completion_creates_no_record() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=1))
    timer.set_pending_task("Write report")
    timer.toggle()
    for _ in range(60):
        timer.tick()

    timer.set_pending_task("Next task")
    transition = None
    for _ in range(60):
        transition = timer.tick() or transition

    assert transition.finished == Phase.BREAK
    assert transition.task is None
    assert timer.phase == Phase.FOCUS
    assert timer.pending_title == "Next task"


def test_focus_completion_with_cleared_title_creates_no_record() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=1))
    timer.set_pending_task("Write report")
    timer.toggle()
    timer.set_pending_task("")

    transition = None
    for _ in range(60):
        transition = timer.tick() or transition

    assert transition.finished == Phase.FOCUS
    assert transition.task is None


def test_reset_restores_duration_without_touching_armed() -> None:
    timer = PhaseTimer()
    timer.set_pending_task("Task")
    timer.toggle()
    for _ in range(10):
        timer.tick()

    timer.reset()

    assert timer.remaining_seconds == 25 * 60
    assert timer.armed is True


@pytest.mark.parametrize("focus, brk", [(1, 1), (25, 5), (50, 10), (90, 30)])
def test_settings_while_disarmed_rederive_remaining(focus: int, brk: int) -> None:
    timer = PhaseTimer()

    timer.apply_settings(Settings(focus_time=focus, break_time=brk))

    assert timer.remaining_seconds == focus * 60


def test_settings_while_armed_apply_to_next_phase_only() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=1))
    timer.set_pending_task("Task")
    timer.toggle()
    timer.tick()

    timer.apply_settings(Settings(focus_time=10, break_time=3))
    assert timer.remaining_seconds == 59

    for _ in range(59):
        timer.tick()

    assert timer.phase == Phase.BREAK
    assert timer.remaining_seconds == 180


def test_snapshot_progress() -> None:
    timer = PhaseTimer(Settings(focus_time=1, break_time=1))
    timer.set_pending_task("Task")
    timer.toggle()
    for _ in range(30):
        timer.tick()

    snapshot = timer.snapshot()

    assert snapshot.total_seconds == 60
    assert snapshot.remaining_seconds == 30
    assert snapshot.progress == pytest.approx(0.5)


def test_progress_stays_in_range_after_shortening_running_phase() -> None:
    timer = PhaseTimer(Settings(focus_time=10, break_time=5))
    timer.set_pending_task("Task")
    timer.toggle()
    timer.tick()

    timer.apply_settings(Settings(focus_time=1, break_time=5))
    snapshot = timer.snapshot()

    assert snapshot.remaining_seconds > snapshot.total_seconds
    assert snapshot.progress == 0.0
