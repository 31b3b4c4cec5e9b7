"""Main entry point for Scriptpad.

This module is executed when running:
- python -m scriptpad
- scriptpad (via pyproject.toml entry point)
"""

from .gui import run

if __name__ == "__main__":
    run()
