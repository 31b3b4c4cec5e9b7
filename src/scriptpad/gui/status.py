"""Exit code and run status readout."""

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QHBoxLayout, QLabel, QWidget

from ..config import Config
from ..state import RunStatus, status_color

DOT_SIZE = 10


class StatusIndicator(QWidget):
    """Shows ``Exit value: N  Status: ●`` with the dot colored by run status."""

    def __init__(self, config: Config, parent: QWidget | None = None):
        super().__init__(parent)
        self._config = config

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 10, 0)
        layout.setSpacing(10)

        self._exit_label = QLabel()
        layout.addWidget(self._exit_label)
        layout.addWidget(QLabel("Status:"))

        self._dot = QLabel()
        self._dot.setFixedSize(DOT_SIZE, DOT_SIZE)
        layout.addWidget(self._dot, 0, Qt.AlignmentFlag.AlignVCenter)

        self.show_status(RunStatus.IDLE, 0)

    def show_status(self, status: RunStatus, exit_code: int):
        self._exit_label.setText(f"Exit value: {exit_code}")
        self._dot.setStyleSheet(
            f"background-color: {status_color(status, self._config)}; border-radius: {DOT_SIZE // 2}px;"
        )
        self._dot.setToolTip(status.value.capitalize())
