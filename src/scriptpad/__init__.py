"""Scriptpad - edit a script and run it through an external interpreter.

The edited buffer is written to a script file, the interpreter runs it on a
background thread, its stdout streams into the output pane, and diagnostics
of a failed run become links that move the editor caret to the reported
line and column.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
