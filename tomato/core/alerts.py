from __future__ import annotations

from typing import Protocol

from tomato.core.timer import Phase


APP_TITLE = "Tomato Timer"
MESSAGES = {
    Phase.FOCUS: "Break time!",
    Phase.BREAK: "Time to focus!",
}


def message_for(finished: Phase) -> str:
    """Notification text for the phase that just ended."""
    return MESSAGES[finished]


class Alerts(Protocol):
    def phase_finished(self, finished: Phase) -> None: ...
