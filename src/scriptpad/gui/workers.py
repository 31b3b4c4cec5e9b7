"""Background worker that runs scripts off the UI thread."""

import threading

from PySide6.QtCore import QObject, Signal

from .. import log
from ..errors import RunnerError
from ..runner import ScriptRunner

logger = log.get_logger()


class RunWorker(QObject):
    """Runs one script at a time on a Python thread.

    Uses Python threading (not QThread); results reach the UI through Qt
    signals, which are queued onto the UI thread.
    """

    # Whole stdout read so far, emitted after every chunk
    output_changed = Signal(str)

    # ExecutionOutcome of a completed (or stopped) run
    run_finished = Signal(object)

    # The run could not be started or its output could not be read
    run_failed = Signal(str)

    def __init__(self, runner: ScriptRunner):
        super().__init__()
        self._runner = runner
        self._thread: threading.Thread | None = None
        self._cancel = threading.Event()
        self._guard = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None

    def start(self, text: str) -> bool:
        """Start a run of ``text``. Returns False if a run is already in flight."""
        with self._guard:
            if self._thread is not None:
                logger.debug("run request ignored, already running")
                return False
            self._cancel = threading.Event()
            self._thread = threading.Thread(target=self._run, args=(text, self._cancel), daemon=True)
            self._thread.start()
        return True

    def stop(self):
        """Cancel the current run."""
        with self._guard:
            if self._thread is None:
                return
            self._cancel.set()
        self._runner.stop()

    def _run(self, text: str, cancel: threading.Event):
        """Worker thread body.

        The result is emitted only after the run slot is released, so the UI
        can start the next run as soon as it sees the previous one end.
        """
        signal, payload = self._execute(text, cancel)
        with self._guard:
            self._thread = None
        signal.emit(payload)

    def _execute(self, text: str, cancel: threading.Event) -> tuple[Signal, object]:
        try:
            outcome = self._runner.run(text, on_output=self.output_changed.emit, cancel=cancel)
        except RunnerError as e:
            logger.error("run failed", error=str(e))
            return self.run_failed, str(e)
        except Exception as e:
            logger.exception("unexpected error during run")
            return self.run_failed, f"unexpected error: {e}"
        return self.run_finished, outcome
