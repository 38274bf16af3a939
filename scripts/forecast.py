#!/usr/bin/env python
"""
CLI wrapper for the forecast pipeline.

Equivalent to the ``sectorcast-forecast`` console script; see
``sectorcast/cli.py`` for options and exit codes.

Usage:
    python scripts/forecast.py --sector agriculture --region Jaipur
"""

import sys

from sectorcast.cli import main

if __name__ == "__main__":
    sys.exit(main())
