#!/usr/bin/env python3
"""
TALLY Launcher
===============
Run this script to start the counter.
"""

from tally.main import main

if __name__ == "__main__":
    main()
