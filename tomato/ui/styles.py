from __future__ import annotations

from PyQt6.QtWidgets import QApplication


THEME_QSS = """
QWidget {
    background: #fbf3ef;
    color: #33261f;
    font-size: 13px;
}

QLabel {
    background: transparent;
}

QLabel#Heading {
    font-size: 26px;
    font-weight: 700;
    color: #c4432b;
}

QLabel#SubtleTitle {
    font-size: 16px;
    font-weight: 600;
    color: #6e5348;
}

QLabel#TimerLabel {
    font-size: 72px;
    font-weight: 700;
    color: #2e211b;
}

QProgressBar#PhaseProgress {
    border: none;
    border-radius: 3px;
    background: #f0ddd5;
    max-height: 6px;
}

QProgressBar#PhaseProgress::chunk {
    border-radius: 3px;
    background: #c4432b;
}

QLabel#MutedText {
    color: #8d7569;
}

QPushButton {
    border: none;
    background: #f6e6de;
    border-radius: 14px;
    padding: 7px 14px;
    font-weight: 600;
}

QPushButton:hover {
    background: #f0d9ce;
}

QPushButton:disabled {
    color: #b8a299;
    background: #f7eeea;
}

QPushButton#PrimaryButton {
    background: #e0533d;
    color: #ffffff;
    border-radius: 22px;
    padding: 10px 28px;
    font-size: 15px;
}

QPushButton#PrimaryButton:hover {
    background: #cf4631;
}

QPushButton#PrimaryButton:disabled {
    background: #f0b3a7;
    color: #fff6f3;
}

QPushButton#SecondaryButton {
    border-radius: 22px;
    padding: 10px 20px;
    font-size: 15px;
}

QLineEdit, QPlainTextEdit, QSpinBox {
    background: #fffaf7;
    border: 1px solid #f0ddd4;
    border-radius: 12px;
    padding: 6px 10px;
}

QListWidget {
    background: #fffaf7;
    border: none;
    border-radius: 12px;
    padding: 6px;
}

QListWidget::item {
    border-bottom: 1px solid #f3e4dd;
    padding: 8px 4px;
}

QSplitter::handle {
    background: transparent;
    width: 16px;
}
"""


def apply_theme(app: QApplication) -> None:
    app.setStyleSheet(THEME_QSS)
