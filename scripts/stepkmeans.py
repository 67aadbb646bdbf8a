#!/usr/bin/env python3
"""
stepkmeans CLI entry point for running from a checkout.

Usage:
    python scripts/stepkmeans.py tui --points samples/points.yaml --k 2
    python scripts/stepkmeans.py step samples/points.yaml --k 2 --steps 5 --seed 1
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from stepkmeans.cli import main


if __name__ == "__main__":
    sys.exit(main())
