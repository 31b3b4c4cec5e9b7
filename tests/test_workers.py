"""Tests for the background run worker."""

import threading
import time
from unittest.mock import MagicMock

import pytest

pytest.importorskip("PySide6.QtWidgets")

from scriptpad.errors import RunnerError  # noqa: E402
from scriptpad.gui.workers import RunWorker  # noqa: E402
from scriptpad.runner import ScriptRunner  # noqa: E402
from scriptpad.state import ExecutionOutcome  # noqa: E402

OK = ExecutionOutcome(stdout="", stderr="", exit_code=0)


def _wait_idle(worker, timeout=5.0):
    deadline = time.monotonic() + timeout
    while worker.is_running:
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


def _collect(signal):
    received = []
    signal.connect(lambda *args: received.append(args[0] if args else None))
    return received


class TestRun:
    """Tests for RunWorker._run, called on the test thread."""

    def test_emits_output_and_outcome(self):
        outcome = ExecutionOutcome(stdout="hi\n", stderr="", exit_code=0)
        runner = MagicMock(spec=ScriptRunner)

        def fake_run(text, on_output=None, cancel=None):
            on_output("h")
            on_output("hi\n")
            return outcome

        runner.run.side_effect = fake_run
        worker = RunWorker(runner)
        outputs = _collect(worker.output_changed)
        finished = _collect(worker.run_finished)
        failed = _collect(worker.run_failed)

        worker._run("println(1)", threading.Event())

        runner.run.assert_called_once()
        assert runner.run.call_args.args[0] == "println(1)"
        assert outputs == ["h", "hi\n"]
        assert finished == [outcome]
        assert failed == []

    def test_runner_error_is_reported(self):
        runner = MagicMock(spec=ScriptRunner)
        runner.run.side_effect = RunnerError("cannot start kotlinc: No such file or directory")
        worker = RunWorker(runner)
        finished = _collect(worker.run_finished)
        failed = _collect(worker.run_failed)

        worker._run("println(1)", threading.Event())

        assert finished == []
        assert failed == ["cannot start kotlinc: No such file or directory"]

    def test_unexpected_error_is_reported(self):
        runner = MagicMock(spec=ScriptRunner)
        runner.run.side_effect = ValueError("bad")
        worker = RunWorker(runner)
        failed = _collect(worker.run_failed)

        worker._run("println(1)", threading.Event())

        assert failed == ["unexpected error: bad"]

    def test_run_slot_is_free_when_result_arrives(self):
        runner = MagicMock(spec=ScriptRunner)
        runner.run.return_value = OK
        worker = RunWorker(runner)
        worker._thread = threading.current_thread()
        running_at_finish = []
        worker.run_finished.connect(lambda outcome: running_at_finish.append(worker.is_running))

        worker._run("println(1)", threading.Event())

        assert running_at_finish == [False]


class TestStart:
    """Tests for RunWorker.start / stop."""

    def test_only_one_run_at_a_time(self):
        release = threading.Event()
        runner = MagicMock(spec=ScriptRunner)
        runner.run.side_effect = lambda text, on_output=None, cancel=None: release.wait(5) and OK
        worker = RunWorker(runner)

        assert worker.start("a")
        thread = worker._thread
        assert worker.is_running
        assert not worker.start("b")

        release.set()
        thread.join(5)
        assert runner.run.call_count == 1

    def test_stop_before_run_begins_is_kept(self):
        gate = threading.Event()
        seen = []
        runner = MagicMock(spec=ScriptRunner)

        def fake_run(text, on_output=None, cancel=None):
            gate.wait(5)
            seen.append(cancel.is_set())
            return OK

        runner.run.side_effect = fake_run
        worker = RunWorker(runner)

        worker.start("a")
        thread = worker._thread
        worker.stop()
        gate.set()
        thread.join(5)

        assert seen == [True]
        runner.stop.assert_called_once()

    def test_each_run_gets_a_fresh_token(self):
        tokens = []
        runner = MagicMock(spec=ScriptRunner)
        runner.run.side_effect = lambda text, on_output=None, cancel=None: tokens.append(cancel) or OK
        worker = RunWorker(runner)

        for text in ("a", "b"):
            assert worker.start(text)
            assert _wait_idle(worker)

        assert len(tokens) == 2
        assert tokens[0] is not tokens[1]
        assert not tokens[1].is_set()

    def test_stop_without_run_does_nothing(self):
        runner = MagicMock(spec=ScriptRunner)
        RunWorker(runner).stop()
        runner.stop.assert_not_called()
