"""
Package entry point.

Allows running: python -m geotiles build
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
