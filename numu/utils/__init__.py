# File: utils/__init__.py
"""Pure Python utilities for Numu.

Submodules:
    - dt_utils: Local-calendar date normalization and week arithmetic
    - math_utils: Rate rounding, safe division, percentages

Usage:
    from . import dt_utils
    from .math_utils import safe_ratio
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
