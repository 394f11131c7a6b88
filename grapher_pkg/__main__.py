"""Main entry point for running grapher_pkg as a module.

This allows running Grapher with:
    python -m grapher_pkg -e "2+2"
    python -m grapher_pkg --domain "sqrt(x - 1)"

This is equivalent to running:
    python -m grapher_pkg.cli
    python grapher.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
