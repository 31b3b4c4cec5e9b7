"""PySide6 GUI module for Scriptpad.

This module provides the graphical user interface including:
- Main window with the editor and output panes
- Run status indicator
- Background worker that runs the interpreter
"""

from .app import run

__all__ = ["run"]
