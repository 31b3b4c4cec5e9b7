"""Application state and its transitions.

The window holds a single ``AppState`` value and replaces it through the
functions below, so every status change goes through one place:

    IDLE --begin_run--> RUNNING --finish_run / fail_run--> IDLE
"""

from dataclasses import dataclass, replace
from enum import Enum

from .config import Config
from .errors import RunInProgressError


class RunStatus(Enum):
    """Whether the interpreter is currently running."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Everything a finished run produced."""

    stdout: str
    stderr: str
    exit_code: int
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.cancelled


@dataclass(frozen=True)
class AppState:
    """What the window currently shows."""

    status: RunStatus = RunStatus.IDLE
    exit_code: int = 0
    output: str = ""
    error_output: str | None = None  # stderr of a failed run, rendered with links
    message: str | None = None  # shown after the output (failures, cancellation)

    @property
    def running(self) -> bool:
        return self.status is RunStatus.RUNNING


def begin_run(state: AppState) -> AppState:
    """Enter RUNNING and clear the previous result."""
    if state.running:
        raise RunInProgressError()
    return replace(state, status=RunStatus.RUNNING, output="", error_output=None, message=None)


def stream_output(state: AppState, text: str) -> AppState:
    """Replace the visible output with the stdout accumulated so far."""
    if not state.running:
        return state
    return replace(state, output=text)


def finish_run(state: AppState, outcome: ExecutionOutcome) -> AppState:
    """Return to IDLE with the result of a completed run."""
    if outcome.cancelled:
        return replace(
            state,
            status=RunStatus.IDLE,
            exit_code=outcome.exit_code,
            output=outcome.stdout,
            error_output=None,
            message="Run stopped",
        )
    if outcome.exit_code != 0:
        return replace(
            state,
            status=RunStatus.IDLE,
            exit_code=outcome.exit_code,
            output=outcome.stdout,
            error_output=outcome.stderr,
            message=None,
        )
    return replace(
        state,
        status=RunStatus.IDLE,
        exit_code=0,
        output=outcome.stdout,
        error_output=None,
        message=None,
    )


def fail_run(state: AppState, reason: str) -> AppState:
    """Return to IDLE after the run could not be started or read."""
    return replace(
        state,
        status=RunStatus.IDLE,
        output="",
        error_output=None,
        message=f"Execution failed: {reason}",
    )


def status_color(status: RunStatus, config: Config) -> str:
    """Indicator color for a run status."""
    if status is RunStatus.RUNNING:
        return config.running_color
    return config.idle_color
