"""Shared fixtures for Scriptpad tests."""

import os
import sys

import pytest

# Qt widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def python_config(tmp_path):
    """Config that runs scripts with the current Python interpreter."""
    from scriptpad.config import Config

    return Config(
        interpreter=sys.executable,
        mode_flag="-u",
        script_name="script.py",
        work_dir=str(tmp_path),
    )


@pytest.fixture(scope="session")
def qapp():
    """A QApplication shared by every widget test."""
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app
