#!/usr/bin/env python3
"""
Runner script for the shift log tool.
This makes it easy to run the tool with uv: uv run python scripts/run.py <args>
"""

import sys

from shift_log_tool.cli import main

if __name__ == "__main__":
    sys.exit(main())
