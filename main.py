#!/usr/bin/env python3
"""ChainTimer — entry point.

Run with:
    python main.py
    python -m chaintimer
"""

import sys

from chaintimer.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
