"""
Main entry point for the Workday Voice Agent.

This module allows the application to be run using:
    python -m workday_agent
"""

import sys

from workday_agent.application import main

if __name__ == "__main__":
    sys.exit(main())
