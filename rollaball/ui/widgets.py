"""Qt adapters for the UI state machine plus the small widgets the screens share."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QLabel, QPushButton, QVBoxLayout, QWidget

from rollaball.core.ui_state import Notification
from rollaball.ui.colors import Palette, blend_hex
from rollaball.ui.models import LevelCardState


class WidgetPanel:
    """Lets the state machine toggle a QWidget screen."""

    def __init__(self, widget: QWidget) -> None:
        self.widget = widget

    def set_visible(self, visible: bool) -> None:
        self.widget.setVisible(visible)


class LabelText:
    def __init__(self, label: QLabel) -> None:
        self.label = label

    def set_text(self, text: str) -> None:
        self.label.setText(text)


def screen_frame(object_name: str) -> QFrame:
    frame = QFrame()
    frame.setObjectName(object_name)
    frame.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: {Palette.PANEL_BG};
            border: 1px solid {Palette.PANEL_BORDER};
            border-radius: 20px;
        }}
        QLabel {{ color: {Palette.TEXT_PRIMARY}; }}
        """
    )
    return frame


def primary_button(text: str, on_click: Callable[[], None]) -> QPushButton:
    button = QPushButton(text)
    button.setCursor(Qt.CursorShape.PointingHandCursor)
    button.setStyleSheet(
        f"""
        QPushButton {{
            background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                stop:0 {Palette.PRIMARY_LIGHT}, stop:1 {Palette.PRIMARY_DARK});
            color: white;
            padding: 10px 18px;
            border: none;
            border-radius: 12px;
            font-weight: 700;
        }}
        QPushButton:disabled {{
            background: #3a4556;
            color: {Palette.TEXT_MUTED};
        }}
        """
    )
    button.clicked.connect(on_click)
    return button


class LevelButton(QPushButton):
    """Main-menu entry for one level; disabled while the level is locked."""

    def __init__(self, state: LevelCardState, on_select: Callable[[str], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        entry = state.entry
        suffix = f"  ·  best {state.best_score:,}" if state.completed else ""
        badge = "∞ " if entry.is_endless_mode else ""
        self.setText(f"{badge}{entry.display_name}{suffix}")
        self.setEnabled(state.unlocked)
        self.setToolTip(entry.scene_name if state.unlocked else f"{entry.scene_name} (locked)")
        border = Palette.GOLD if state.is_current else Palette.PANEL_BORDER
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {Palette.PANEL_BG};
                color: {Palette.TEXT_PRIMARY};
                border: 2px solid {border};
                border-radius: 12px;
                padding: 12px;
                text-align: left;
                font-size: 15px;
            }}
            QPushButton:disabled {{ color: {Palette.TEXT_MUTED}; }}
            """
        )
        self.clicked.connect(lambda: on_select(entry.scene_name))


class NotificationToast(QFrame):
    """Transient message; fades toward the window background as it expires."""

    def __init__(self, notification: Notification, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.notification = notification
        self.setObjectName("toast")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 10, 16, 10)
        label = QLabel(notification.message)
        label.setStyleSheet(f"color: {Palette.TEXT_PRIMARY}; font-weight: 600;")
        layout.addWidget(label)
        self.update_fade(notification.shown_at)

    def update_fade(self, now: float) -> None:
        n = self.notification
        t = (now - n.shown_at) / n.duration if n.duration > 0 else 1.0
        color = blend_hex(Palette.TOAST_BG, Palette.BG_TOP, t)
        self.setStyleSheet(f"QFrame#toast {{ background: {color}; border-radius: 10px; }}")
