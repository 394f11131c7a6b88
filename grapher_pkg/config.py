"""Centralized configuration for Grapher.

This module defines:
- Sampling limits for curve plotting and intersection scans
- Bisection and deduplication tolerances for root refinement
- Domain analysis epsilon for open-bound approximation
- Cache sizes for parsed expression trees
- Regex patterns for classifying workspace input lines

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with GRAPHER_)
"""

import os
import re

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("grapher")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Intersection scan configuration
MIN_INTERSECTION_SAMPLES = int(
    os.getenv("GRAPHER_MIN_INTERSECTION_SAMPLES", "200")
)  # Lower clamp for pixel-width based sampling
MAX_INTERSECTION_SAMPLES = int(
    os.getenv("GRAPHER_MAX_INTERSECTION_SAMPLES", "1000")
)  # Upper clamp for pixel-width based sampling
BISECTION_MAX_ITERATIONS = int(os.getenv("GRAPHER_BISECTION_MAX_ITERATIONS", "40"))
BISECTION_EPSILON = float(
    os.getenv("GRAPHER_BISECTION_EPSILON", "1e-8")
)  # |d(mid)| below this counts as converged
DEDUPLICATION_THRESHOLD = float(
    os.getenv("GRAPHER_DEDUPLICATION_THRESHOLD", "1e-6")
)  # Roots closer than this are the same root
INTERSECTION_RESIDUAL_TOLERANCE = float(
    os.getenv("GRAPHER_INTERSECTION_RESIDUAL_TOLERANCE", "1e-4")
)  # |left - right| relative to the sides above this is a pole, not a root

# Curve sampling configuration
MIN_CURVE_SAMPLES = int(os.getenv("GRAPHER_MIN_CURVE_SAMPLES", "200"))
MAX_CURVE_SAMPLES = int(os.getenv("GRAPHER_MAX_CURVE_SAMPLES", "5000"))
ADAPTIVE_REFERENCE_RANGE = float(
    os.getenv("GRAPHER_ADAPTIVE_REFERENCE_RANGE", "40.0")
)  # View width at which curve sampling equals pixel width
MIN_DOMAIN_SAMPLES = 2
MAX_DOMAIN_SAMPLES = int(os.getenv("GRAPHER_MAX_DOMAIN_SAMPLES", "10000"))
MIN_SAMPLES_PER_SUBDOMAIN = int(os.getenv("GRAPHER_MIN_SAMPLES_PER_SUBDOMAIN", "10"))
REGION_SAMPLES = int(
    os.getenv("GRAPHER_REGION_SAMPLES", "500")
)  # Columns tested when shading an inequation region

# Domain analysis
DOMAIN_EPSILON = float(
    os.getenv("GRAPHER_DOMAIN_EPSILON", "1e-10")
)  # Inward shift approximating an open bound

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("GRAPHER_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_FUNCTION_EXPANSION_DEPTH = int(
    os.getenv("GRAPHER_MAX_FUNCTION_EXPANSION_DEPTH", "32")
)  # nested user-function calls

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("GRAPHER_CACHE_SIZE_PARSE", "1024"))

# Output
OUTPUT_PRECISION = int(os.getenv("GRAPHER_OUTPUT_PRECISION", "6"))

# Default viewport
DEFAULT_MIN_X = float(os.getenv("GRAPHER_DEFAULT_MIN_X", "-10"))
DEFAULT_MAX_X = float(os.getenv("GRAPHER_DEFAULT_MAX_X", "10"))
DEFAULT_PIXEL_WIDTH = int(os.getenv("GRAPHER_DEFAULT_PIXEL_WIDTH", "800"))

FREE_VARIABLE = "x"

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

NAMED_FUNCTION_RE = re.compile(r"^([A-Za-z]\w*)\s*\(\s*x\s*\)\s*=\s*(.+)$")
NUMBER_LITERAL = r"-?\d+(?:\.\d+)?"
RANGE_RE = re.compile(
    rf"^([A-Za-z]\w*)\s*=\s*\[\s*({NUMBER_LITERAL})\s*(:|\.\.)\s*({NUMBER_LITERAL})\s*\]$"
)
NUMBER_SET_RE = re.compile(
    rf"^(?:([A-Za-z]\w*)\s*=\s*)?\{{\s*({NUMBER_LITERAL}(?:\s*,\s*{NUMBER_LITERAL})*)\s*\}}$"
)
CONSTANT_RE = re.compile(r"^([A-Za-z]\w*)\s*=\s*(.+)$")
POINT_RE = re.compile(r"^(?:([A-Za-z]\w*)\s*=\s*)?\((.+)\)$")
EQUATION_LABEL_RE = re.compile(r"^([A-Za-z]\w*)\s*:\s*(.+)$")
