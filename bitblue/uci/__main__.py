"""
Main entry point for running BitBlue as a UCI engine.

Usage:
    python -m bitblue.uci [--settings settings.json] [--debug]
"""

from bitblue.uci.interface import main

if __name__ == "__main__":
    main()
