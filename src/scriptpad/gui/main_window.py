"""Main application window: editor, output pane and run controls."""

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QFontDatabase, QKeySequence, QTextCursor
from PySide6.QtWidgets import (
    QHBoxLayout,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from .. import log
from ..config import Config
from ..diagnostics import (
    Location,
    OutputSegment,
    caret_offset,
    format_error_output,
    marker_for,
    parse_link_href,
    segments_to_html,
)
from ..errors import RunInProgressError
from ..runner import ScriptRunner
from ..state import AppState, ExecutionOutcome, begin_run, fail_run, finish_run, stream_output
from .status import StatusIndicator
from .workers import RunWorker

logger = log.get_logger()


class MainWindow(QMainWindow):
    """Split-pane script editor with an output viewer."""

    def __init__(self, config: Config):
        super().__init__()
        self._config = config
        self._state = AppState()
        self._segments: list[OutputSegment] = []
        self._marker = marker_for(config.script_name)

        self.setWindowTitle("Scriptpad")
        self.resize(config.window_width, config.window_height)

        self._worker = RunWorker(ScriptRunner(config))
        self._worker.output_changed.connect(self._on_output_changed)
        self._worker.run_finished.connect(self._on_run_finished)
        self._worker.run_failed.connect(self._on_run_failed)

        self._setup_ui()
        self._render()

    def _setup_ui(self):
        """Set up the main UI."""
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # ==================== TOP BAR ====================
        top_bar = QWidget()
        top_bar.setStyleSheet("background-color: black; color: white;")
        top_layout = QHBoxLayout(top_bar)
        top_layout.setContentsMargins(5, 5, 5, 5)

        self._run_btn = QPushButton("Run")
        self._run_btn.setShortcut(QKeySequence("Ctrl+R"))
        self._run_btn.setToolTip("Run the script (Ctrl+R)")
        self._run_btn.clicked.connect(self.run_script)
        top_layout.addWidget(self._run_btn)

        self._stop_btn = QPushButton("Stop")
        self._stop_btn.setShortcut(QKeySequence("Ctrl+."))
        self._stop_btn.setToolTip("Stop the running script (Ctrl+.)")
        self._stop_btn.clicked.connect(self.stop_script)
        top_layout.addWidget(self._stop_btn)

        top_layout.addStretch()

        self._status = StatusIndicator(self._config)
        top_layout.addWidget(self._status)

        layout.addWidget(top_bar)

        # ==================== PANES ====================
        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        font.setPointSize(self._config.font_size)
        pane_style = (
            f"background-color: {self._config.editor_background};"
            f" color: {self._config.text_color}; border: none;"
        )

        self._editor = QPlainTextEdit()
        self._editor.setFont(font)
        self._editor.setStyleSheet(pane_style)
        self._editor.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        self._output = QTextBrowser()
        self._output.setFont(font)
        self._output.setStyleSheet(pane_style)
        self._output.setOpenLinks(False)
        self._output.setOpenExternalLinks(False)
        self._output.anchorClicked.connect(self._on_link_clicked)

        self._splitter = QSplitter(Qt.Orientation.Horizontal)
        self._splitter.addWidget(self._editor)
        self._splitter.addWidget(self._output)
        self._splitter.setHandleWidth(1)
        self._splitter.setStyleSheet("QSplitter::handle { background-color: white; }")
        self._splitter.setSizes(self._config.splitter_sizes)
        layout.addWidget(self._splitter, 1)

    @property
    def editor(self) -> QPlainTextEdit:
        return self._editor

    @property
    def state(self) -> AppState:
        return self._state

    # ==================== RUN CONTROL ====================

    def run_script(self):
        """Run the editor contents, unless a run is already in flight."""
        try:
            state = begin_run(self._state)
        except RunInProgressError:
            logger.debug("run request ignored, already running")
            return
        if not self._worker.start(self._editor.toPlainText()):
            return
        self._set_state(state)

    def stop_script(self):
        self._worker.stop()

    def _on_output_changed(self, text: str):
        self._set_state(stream_output(self._state, text))

    def _on_run_finished(self, outcome: ExecutionOutcome):
        self._set_state(finish_run(self._state, outcome))

    def _on_run_failed(self, reason: str):
        self._set_state(fail_run(self._state, reason))

    # ==================== RENDERING ====================

    def _set_state(self, state: AppState):
        self._state = state
        self._render()

    def _render(self):
        state = self._state
        self._status.show_status(state.status, state.exit_code)
        self._run_btn.setEnabled(not state.running)
        self._stop_btn.setEnabled(state.running)

        if state.error_output is not None:
            self._segments = format_error_output(state.error_output, self._marker)
            self._output.setHtml(segments_to_html(self._segments, self._config.link_color))
            return

        self._segments = []
        text = state.output
        if state.message:
            if text and not text.endswith("\n"):
                text += "\n"
            text += state.message
        self._output.setPlainText(text)
        if state.running:
            self._output.moveCursor(QTextCursor.MoveOperation.End)

    # ==================== DIAGNOSTIC LINKS ====================

    def _on_link_clicked(self, url: QUrl):
        index = parse_link_href(url.toString())
        if index is None or index >= len(self._segments):
            return
        location = self._segments[index].location
        if location is not None:
            self.jump_to(location)

    def jump_to(self, location: Location):
        """Move the editor caret to ``location`` and focus the editor. Text is left untouched."""
        offset = caret_offset(self._editor.toPlainText(), location)
        offset = min(offset, self._editor.document().characterCount() - 1)
        cursor = self._editor.textCursor()
        cursor.setPosition(offset)
        self._editor.setTextCursor(cursor)
        self._editor.setFocus()
        logger.debug("caret moved", line=location.line, column=location.column, offset=offset)

    def cleanup(self):
        """Stop any running script and remember the window layout."""
        self._worker.stop()
        self._config.window_width = self.width()
        self._config.window_height = self.height()
        self._config.splitter_sizes = self._splitter.sizes()
