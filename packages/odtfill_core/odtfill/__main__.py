"""
Entry point for running odtfill as a module.

Usage:
    python -m odtfill --template template.odt --json data.json --destfile out.odt
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
