#!/usr/bin/env python
"""
BoardBurrow command-line entry point.

Usage: python main.py [--store PATH] <command> [...]
Run ``python main.py --help`` for the list of commands.
"""

from boardburrow.presentation.cli import main

if __name__ == "__main__":
    main()
