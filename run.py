#!/usr/bin/env python3
"""Agent Panel - Run the application.

Usage:
    python run.py
    # Or: agentpanel (after pip install -e .)

Flags are the same as the installed command; see `python run.py --help`.
"""

import sys

from agentpanel.app import main

if __name__ == "__main__":
    sys.exit(main())
