from tomato.core.models import Settings
from tomato.data.storage import SETTINGS_KEY, TASKS_KEY
from tomato.main import restore_saved_state


def test_restore_keeps_defaults_when_saved_data_is_corrupt(state, storage) -> None:
    storage.set_setting(TASKS_KEY, "not a list")

    problem = restore_saved_state(state)

    assert problem is not None
    assert "corrupt" in problem
    assert state.settings == Settings()
    assert state.tasks == []


def test_restore_adopts_saved_settings(state, storage) -> None:
    storage.set_setting(SETTINGS_KEY, {"focusTime": 40, "breakTime": 10})
    storage.set_setting(TASKS_KEY, [])

    assert restore_saved_state(state) is None
    assert state.settings == Settings(focus_time=40, break_time=10)
