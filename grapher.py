#!/usr/bin/env python3
"""
Grapher - expression engine for an interactive graphing calculator

Main entry point for the Grapher command-line tool.
This file serves as a thin wrapper that delegates all functionality
to the grapher_pkg package.

Usage:
    python grapher.py -e "2+3*4"                   # Evaluate expression
    python grapher.py --domain "asec(x)"           # Domain of an expression
    python grapher.py --intersect "x^2" "2*x+1"    # Intersection points
    python grapher.py --help                       # Show help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for Grapher.

    Delegates all functionality to the grapher_pkg.cli module,
    which handles argument parsing, evaluation, and output formatting.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from grapher_pkg.cli import main_entry

    try:
        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
