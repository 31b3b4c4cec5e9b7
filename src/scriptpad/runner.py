"""Runs the edited script through the external interpreter."""

import codecs
import os
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from . import log
from .config import Config
from .errors import RunInProgressError, RunnerError
from .state import ExecutionOutcome

logger = log.get_logger()

# Seconds between SIGTERM and SIGKILL when a run is stopped
KILL_GRACE_SECONDS = 2.0


class ScriptRunner:
    """Writes the buffer to the script file and runs the interpreter on it.

    Only one run may be in flight at a time; ``run`` raises
    RunInProgressError otherwise. ``run`` blocks until the child exits, so
    callers invoke it from a worker thread and use ``stop`` from any other
    thread to cancel.
    """

    def __init__(self, config: Config):
        self._config = config
        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None
        self._cancelled = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def write_script(self, text: str) -> Path:
        """Persist the buffer to the script file, replacing the previous run's copy."""
        path = self._config.script_path
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise RunnerError(f"cannot write {path}: {e.strerror or e}") from e
        return path

    def build_command(self) -> list[str]:
        """Interpreter command line; the script is passed relative to the work dir."""
        command = [self._config.interpreter]
        if self._config.mode_flag:
            command.append(self._config.mode_flag)
        command.append(self._config.script_name)
        return command

    def run(
        self,
        text: str,
        on_output: Callable[[str], None] | None = None,
        cancel: threading.Event | None = None,
    ) -> ExecutionOutcome:
        """Run ``text`` and return what the interpreter produced.

        Args:
            text: Script source to execute.
            on_output: Called with the whole stdout read so far, after every chunk.
            cancel: Cancellation token for this run. Callers that start the run
                on another thread create it up front, so a stop requested
                before the run begins is not lost.

        Raises:
            RunInProgressError: Another run has not finished yet.
            RunnerError: The script could not be written or the interpreter
                could not be started.
        """
        if not self._lock.acquire(blocking=False):
            raise RunInProgressError()
        try:
            self._cancelled = cancel if cancel is not None else threading.Event()
            self.write_script(text)
            return self._execute(on_output)
        finally:
            self._lock.release()

    def stop(self) -> None:
        """Cancel the current run, if any."""
        self._cancelled.set()
        process = self._process
        if process is not None:
            logger.info("stopping run", pid=process.pid)
            self._terminate(process)

    def _execute(self, on_output: Callable[[str], None] | None) -> ExecutionOutcome:
        command = self.build_command()
        logger.info("run started", command=command, cwd=self._config.work_dir)
        start = time.perf_counter()

        try:
            process = subprocess.Popen(
                command,
                cwd=self._config.work_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            logger.error("failed to start interpreter", command=command, error=str(e))
            raise RunnerError(f"cannot start {command[0]}: {e.strerror or e}") from e

        self._process = process
        if self._cancelled.is_set():
            # stop() arrived before the process handle was published
            self._terminate(process)

        timer = None
        if self._config.timeout is not None:
            timer = threading.Timer(self._config.timeout, self._on_timeout, args=(process,))
            timer.daemon = True
            timer.start()

        stderr_parts: list[str] = []
        stderr_thread = threading.Thread(
            target=self._drain, args=(process.stderr, stderr_parts), daemon=True
        )
        stderr_thread.start()

        try:
            stdout = self._read_stream(process.stdout, on_output)
            stderr_thread.join()
            exit_code = process.wait()
        except OSError as e:
            self._terminate(process)
            process.wait()
            raise RunnerError(f"reading interpreter output failed: {e}") from e
        finally:
            if timer is not None:
                timer.cancel()
            process.stdout.close()
            process.stderr.close()
            self._process = None

        outcome = ExecutionOutcome(
            stdout=stdout,
            stderr="".join(stderr_parts),
            exit_code=exit_code,
            cancelled=self._cancelled.is_set(),
        )
        logger.info(
            "run finished",
            exit_code=exit_code,
            cancelled=outcome.cancelled,
            time_ms=round((time.perf_counter() - start) * 1000),
        )
        return outcome

    def _read_stream(self, stream: BinaryIO, on_output: Callable[[str], None] | None) -> str:
        """Read ``stream`` to EOF, reporting the accumulated text after each chunk."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        text = ""
        while True:
            chunk = stream.read1(self._config.chunk_size)
            if not chunk:
                break
            decoded = decoder.decode(chunk)
            if not decoded:
                continue  # partial multi-byte character
            text += decoded
            if on_output is not None:
                on_output(text)

        tail = decoder.decode(b"", final=True)
        if tail:
            text += tail
            if on_output is not None:
                on_output(text)
        return text

    def _drain(self, stream: BinaryIO, parts: list[str]) -> None:
        """Collect a stream without reporting progress."""
        parts.append(self._read_stream(stream, None))

    def _on_timeout(self, process: subprocess.Popen) -> None:
        if process.poll() is None:
            logger.warning("run timed out", timeout=self._config.timeout)
            self._cancelled.set()
            self._terminate(process)

    def _terminate(self, process: subprocess.Popen) -> None:
        """Ask the process (and anything it spawned) to exit, then kill it after a grace period."""
        if process.poll() is not None:
            return
        try:
            if sys.platform == "win32":
                process.terminate()
            else:
                os.killpg(process.pid, signal.SIGTERM)
        except (ProcessLookupError, PermissionError):
            return

        killer = threading.Timer(KILL_GRACE_SECONDS, self._kill, args=(process,))
        killer.daemon = True
        killer.start()

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        if process.poll() is not None:
            return
        try:
            if sys.platform == "win32":
                process.kill()
            else:
                os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
