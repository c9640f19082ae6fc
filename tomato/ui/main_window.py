from __future__ import annotations

from datetime import datetime

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from tomato.core.app_state import AppState
from tomato.core.models import SyncStatus
from tomato.core.timer import Phase, TimerSnapshot
from tomato.data.auth import AuthClient, AuthError
from tomato.data.storage import Storage, StorageError
from tomato.data.transfer import ImportFormatError, default_export_name


LAST_EMAIL_KEY = "lastEmail"

SYNC_LABELS = {
    SyncStatus.SYNCED: "● Synced",
    SyncStatus.SYNCING: "● Syncing…",
    SyncStatus.ERROR: "● Sync failed",
}
SYNC_COLORS = {
    SyncStatus.SYNCED: "#4caf50",
    SyncStatus.SYNCING: "#f2b233",
    SyncStatus.ERROR: "#e0533d",
}


def format_time(seconds: int) -> str:
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class LoginDialog(QDialog):
    def __init__(self, auth: AuthClient, email: str = "", parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Sign in")
        self._auth = auth
        self.identity = None

        self.email_edit = QLineEdit(email)
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.error_label = QLabel("")
        self.error_label.setObjectName("MutedText")

        form = QFormLayout()
        form.addRow("Email:", self.email_edit)
        form.addRow("Password:", self.password_edit)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Cancel)
        sign_in_btn = buttons.addButton("Sign in", QDialogButtonBox.ButtonRole.AcceptRole)
        register_btn = buttons.addButton("Register", QDialogButtonBox.ButtonRole.ActionRole)
        sign_in_btn.clicked.connect(lambda: self._submit(register=False))
        register_btn.clicked.connect(lambda: self._submit(register=True))
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.error_label)
        layout.addWidget(buttons)

    def _submit(self, register: bool) -> None:
        email = self.email_edit.text().strip()
        password = self.password_edit.text()
        if not email or not password:
            self.error_label.setText("Email and password are required")
            return
        try:
            if register:
                self.identity = self._auth.sign_up(email, password)
            else:
                self.identity = self._auth.sign_in(email, password)
        except AuthError as e:
            self.error_label.setText(str(e))
            return
        self.accept()


class MainWindow(QMainWindow):
    def __init__(self, storage: Storage, app_state: AppState, auth: AuthClient | None = None) -> None:
        super().__init__()
        self.setWindowTitle("Tomato Timer")
        self.resize(900, 620)

        self.storage = storage
        self.app_state = app_state
        self.auth = auth

        self._build_ui()
        self._connect_signals()

        self._sync_settings_from_state()
        self._render_timer(self.app_state.timer_snapshot())
        self.refresh_tasks()
        self._update_account()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        split = QSplitter(Qt.Orientation.Horizontal)
        left = QWidget()
        right = QWidget()
        split.addWidget(left)
        split.addWidget(right)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)

        root_layout = QHBoxLayout(central)
        root_layout.addWidget(split)

        left_layout = QVBoxLayout(left)
        top_bar = QHBoxLayout()
        self.phase_label = QLabel("Focus")
        self.phase_label.setObjectName("Heading")
        self.sync_label = QLabel("")
        self.account_label = QLabel("")
        self.account_label.setObjectName("MutedText")
        self.account_btn = QPushButton("Sign in")
        top_bar.addWidget(self.phase_label)
        top_bar.addStretch()
        top_bar.addWidget(self.sync_label)
        top_bar.addWidget(self.account_label)
        top_bar.addWidget(self.account_btn)
        left_layout.addLayout(top_bar)

        self.timer_label = QLabel("25:00")
        self.timer_label.setObjectName("TimerLabel")
        self.timer_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        left_layout.addWidget(self.timer_label, 1)

        self.progress_bar = QProgressBar()
        self.progress_bar.setObjectName("PhaseProgress")
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setTextVisible(False)
        left_layout.addWidget(self.progress_bar)

        controls = QHBoxLayout()
        self.toggle_btn = QPushButton("Start")
        self.toggle_btn.setObjectName("PrimaryButton")
        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setObjectName("SecondaryButton")
        controls.addStretch()
        controls.addWidget(self.toggle_btn)
        controls.addWidget(self.reset_btn)
        controls.addStretch()
        left_layout.addLayout(controls)

        settings_form = QFormLayout()
        self.focus_minutes = QSpinBox()
        self.focus_minutes.setRange(1, 240)
        self.break_minutes = QSpinBox()
        self.break_minutes.setRange(1, 240)
        settings_form.addRow("Focus (min):", self.focus_minutes)
        settings_form.addRow("Break (min):", self.break_minutes)
        left_layout.addLayout(settings_form)

        self.task_box = QWidget()
        task_layout = QVBoxLayout(self.task_box)
        task_layout.setContentsMargins(0, 0, 0, 0)
        self.task_title = QLineEdit()
        self.task_title.setPlaceholderText("What are you working on?")
        self.task_notes = QPlainTextEdit()
        self.task_notes.setPlaceholderText("Notes…")
        self.task_notes.setMaximumHeight(90)
        task_layout.addWidget(QLabel("Current task"))
        task_layout.addWidget(self.task_title)
        task_layout.addWidget(self.task_notes)
        left_layout.addWidget(self.task_box)

        right_layout = QVBoxLayout(right)
        header = QHBoxLayout()
        title = QLabel("Work log")
        title.setObjectName("SubtleTitle")
        self.export_btn = QPushButton("Export")
        self.import_btn = QPushButton("Import")
        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.export_btn)
        header.addWidget(self.import_btn)
        right_layout.addLayout(header)

        self.log_list = QListWidget()
        right_layout.addWidget(self.log_list, 1)

        space_action = QAction(self)
        space_action.setShortcut(QKeySequence(Qt.Key.Key_Space))
        space_action.triggered.connect(self._space_toggle)
        self.addAction(space_action)

    def _connect_signals(self) -> None:
        self.toggle_btn.clicked.connect(self.toggle_timer)
        self.reset_btn.clicked.connect(self.app_state.reset)
        self.focus_minutes.valueChanged.connect(self._apply_settings)
        self.break_minutes.valueChanged.connect(self._apply_settings)
        self.task_title.textChanged.connect(self._on_task_edited)
        self.task_notes.textChanged.connect(self._on_task_edited)
        self.export_btn.clicked.connect(self.export_data)
        self.import_btn.clicked.connect(self.import_data)
        self.account_btn.clicked.connect(self._on_account_clicked)

        self.app_state.ticked.connect(self._render_timer)
        self.app_state.phase_changed.connect(self._on_phase_changed)
        self.app_state.settings_changed.connect(self._sync_settings_from_state)
        self.app_state.tasks_changed.connect(self.refresh_tasks)
        self.app_state.sync_status_changed.connect(self._render_sync_status)
        self.app_state.identity_changed.connect(self._update_account)
        self.app_state.storage_failed.connect(self._on_storage_failed)

    def _sync_settings_from_state(self, *_args) -> None:
        settings = self.app_state.settings
        for spin, value in ((self.focus_minutes, settings.focus_time), (self.break_minutes, settings.break_time)):
            if spin.value() != value:
                spin.blockSignals(True)
                spin.setValue(value)
                spin.blockSignals(False)

    def _apply_settings(self, *_args) -> None:
        self.app_state.update_settings(self.focus_minutes.value(), self.break_minutes.value())

    def _on_task_edited(self) -> None:
        self.app_state.set_pending_task(self.task_title.text(), self.task_notes.toPlainText())
        self._update_buttons()

    def _space_toggle(self) -> None:
        if self.task_title.hasFocus() or self.task_notes.hasFocus():
            return
        self.toggle_timer()

    def toggle_timer(self) -> None:
        self.app_state.toggle()
        self._update_buttons()

    def _on_phase_changed(self, transition) -> None:
        if transition.task is not None:
            for widget in (self.task_title, self.task_notes):
                widget.blockSignals(True)
                widget.clear()
                widget.blockSignals(False)
        self._update_buttons()

    def _render_timer(self, snapshot: TimerSnapshot) -> None:
        self.timer_label.setText(format_time(snapshot.remaining_seconds))
        self.progress_bar.setValue(round(snapshot.progress * 1000))
        self.phase_label.setText("Focus" if snapshot.phase == Phase.FOCUS else "Break")
        self.task_box.setVisible(snapshot.phase == Phase.FOCUS)
        self._update_buttons()

    def _render_sync_status(self, status: SyncStatus) -> None:
        if self.app_state.identity is None:
            self.sync_label.setText("")
            return
        self.sync_label.setText(SYNC_LABELS[status])
        self.sync_label.setStyleSheet(f"color: {SYNC_COLORS[status]};")

    def _update_buttons(self) -> None:
        timer = self.app_state.timer
        self.toggle_btn.setText("Pause" if timer.armed else "Start")
        self.toggle_btn.setEnabled(timer.armed or timer.can_arm)

    def _update_account(self, *_args) -> None:
        identity = self.app_state.identity
        self.account_btn.setVisible(self.auth is not None)
        self.account_btn.setText("Sign out" if identity else "Sign in")
        self.account_label.setText(identity.email if identity else "")
        self.export_btn.setVisible(identity is None)
        self.import_btn.setVisible(identity is None)
        self._render_sync_status(self.app_state.sync_status)

    def _on_account_clicked(self) -> None:
        if self.app_state.identity is not None:
            self.app_state.sign_out()
            return
        if self.auth is None:
            return
        dialog = LoginDialog(self.auth, email=str(self.storage.get_setting(LAST_EMAIL_KEY, "")), parent=self)
        if dialog.exec() == QDialog.DialogCode.Accepted and dialog.identity is not None:
            self._remember_email(dialog.identity.email)
            self.app_state.sign_in(dialog.identity)

    def _remember_email(self, email: str) -> None:
        try:
            self.storage.set_setting(LAST_EMAIL_KEY, email)
        except StorageError:
            pass

    def refresh_tasks(self) -> None:
        self.log_list.clear()
        if not self.app_state.tasks:
            QListWidgetItem("No sessions yet. Finish a focus interval to log it here.", self.log_list)
            return
        for task in reversed(self.app_state.tasks):
            try:
                when = datetime.fromisoformat(task.timestamp.replace("Z", "+00:00")).astimezone()
                stamp = when.strftime("%Y-%m-%d %H:%M")
            except ValueError:
                stamp = task.timestamp
            text = f"{task.title} · {stamp}"
            if task.notes:
                text += f"\n{task.notes}"
            QListWidgetItem(text, self.log_list)

    def export_data(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export data", default_export_name(), "JSON (*.json)")
        if not path:
            return
        try:
            self.app_state.export_to(path)
        except OSError as e:
            QMessageBox.warning(self, "Export failed", str(e))

    def import_data(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import data", "", "JSON (*.json)")
        if not path:
            return
        try:
            self.app_state.import_from(path)
        except ImportFormatError:
            QMessageBox.warning(self, "Import failed", "Import failed: invalid file format")
            return
        except OSError as e:
            QMessageBox.warning(self, "Import failed", str(e))
            return
        QMessageBox.information(self, "Import", "Data imported successfully!")

    def _on_storage_failed(self, message: str) -> None:
        QMessageBox.critical(self, "Save failed", message)

    def closeEvent(self, event) -> None:  # noqa: N802
        self.app_state.shutdown()
        event.accept()
