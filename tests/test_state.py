"""Tests for the application state transitions."""

import pytest

from scriptpad.config import Config
from scriptpad.errors import RunInProgressError
from scriptpad.state import (
    AppState,
    ExecutionOutcome,
    RunStatus,
    begin_run,
    fail_run,
    finish_run,
    status_color,
    stream_output,
)


def _finished(output="old", exit_code=0):
    return AppState(status=RunStatus.IDLE, exit_code=exit_code, output=output)


class TestBeginRun:
    """Tests for begin_run function."""

    def test_clears_previous_result(self):
        previous = AppState(exit_code=1, output="x", error_output="foo.kts:1:1: e", message="m")
        state = begin_run(previous)

        assert state.status is RunStatus.RUNNING
        assert state.output == ""
        assert state.error_output is None
        assert state.message is None

    def test_keeps_last_exit_code_until_finished(self):
        assert begin_run(_finished(exit_code=3)).exit_code == 3

    def test_rejects_second_run(self):
        with pytest.raises(RunInProgressError):
            begin_run(AppState(status=RunStatus.RUNNING))


class TestStreamOutput:
    """Tests for stream_output function."""

    def test_replaces_output_while_running(self):
        state = stream_output(begin_run(AppState()), "hel")
        state = stream_output(state, "hello")
        assert state.output == "hello"

    def test_ignored_when_idle(self):
        state = _finished()
        assert stream_output(state, "late chunk") is state


class TestFinishRun:
    """Tests for finish_run function."""

    def test_success_shows_stdout_unmodified(self):
        outcome = ExecutionOutcome(stdout="a\n  b\n", stderr="noise", exit_code=0)
        state = finish_run(begin_run(AppState()), outcome)

        assert state.status is RunStatus.IDLE
        assert state.output == "a\n  b\n"
        assert state.error_output is None
        assert state.exit_code == 0

    def test_failure_shows_stderr(self):
        outcome = ExecutionOutcome(stdout="partial", stderr="foo.kts:1:1: error", exit_code=1)
        state = finish_run(begin_run(AppState()), outcome)

        assert state.status is RunStatus.IDLE
        assert state.error_output == "foo.kts:1:1: error"
        assert state.exit_code == 1

    def test_cancelled_run(self):
        outcome = ExecutionOutcome(stdout="tick\n", stderr="", exit_code=-15, cancelled=True)
        state = finish_run(begin_run(AppState()), outcome)

        assert state.status is RunStatus.IDLE
        assert state.output == "tick\n"
        assert state.error_output is None
        assert state.message == "Run stopped"
        assert not outcome.succeeded


class TestFailRun:
    """Tests for fail_run function."""

    def test_reports_reason(self):
        state = fail_run(begin_run(AppState()), "cannot start kotlinc: No such file or directory")

        assert state.status is RunStatus.IDLE
        assert state.message == "Execution failed: cannot start kotlinc: No such file or directory"
        assert state.output == ""


class TestStatusColor:
    """Tests for status_color function."""

    def test_colors_follow_config(self):
        config = Config(running_color="#00ff00", idle_color="#ff0000")
        assert status_color(RunStatus.RUNNING, config) == "#00ff00"
        assert status_color(RunStatus.IDLE, config) == "#ff0000"
