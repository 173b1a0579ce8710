#!/usr/bin/env python3
"""
Mineplan CLI - Entry point for the mining layout planner.

This module allows running the planner as:
    python -m mine_planner plan region.json
    mineplan plan region.json  (when installed via pip)
"""

from mine_planner.cli import main

if __name__ == "__main__":
    main()
