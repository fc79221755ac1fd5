"""
Text output for the terminal: copy summary and log history.
"""

from .summary import build_copy_summary
from .history import render_history

__all__ = ["build_copy_summary", "render_history"]
