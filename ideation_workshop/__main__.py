#!/usr/bin/env python3
"""
Ideation Workshop - Entry Point

Run with: python -m ideation_workshop --help
"""

import sys

from .cli import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nAborted by user.")
        sys.exit(130)
