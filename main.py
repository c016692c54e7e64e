#!/usr/bin/env python3
"""Thin wrapper: run pyfsck CLI. Usage: python main.py [-C path] <cmd> ... (same as the pyfsck script)."""

import sys

if __name__ == "__main__":
    from pyfsck.cli import main
    sys.exit(main())
