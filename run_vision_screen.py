"""Entry point script for the staircase vision screening tests.

This small wrapper simply dispatches to :mod:`vision_screen.cli`.  Keeping the
actual logic in the package makes it possible to launch the tests via
``python -m vision_screen`` *or* by executing this file directly.
"""
from __future__ import annotations

from vision_screen.cli import main


if __name__ == "__main__":
    main()
