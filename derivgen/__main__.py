"""
Main entry point for running the package as a module.

Usage:
    python -m derivgen
    python -m derivgen --fix-invalid
    python -m derivgen --verify
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
