#!/usr/bin/env python3
"""
Workday Voice Agent - Main Entry Point

Runs the agent from a source checkout:
    python main.py [--list-events DATE | --find-event TIME --date DATE | --register-model [MODEL_ID]]
"""

import sys

from workday_agent.application import main

if __name__ == "__main__":
    sys.exit(main())
