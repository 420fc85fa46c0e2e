"""Main entry point for running scicalc_pkg as a module.

This allows running SciCalc with:
    python -m scicalc_pkg
    python -m scicalc_pkg --serve
    python -m scicalc_pkg -e "8+4"
    python -m scicalc_pkg --press 1 6 ²√x =

This is equivalent to running:
    python -m scicalc_pkg.cli
    python scicalc.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
