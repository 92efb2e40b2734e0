"""
CLI entry point for spectralmap package.

Usage:
    python -m spectralmap <command> [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
