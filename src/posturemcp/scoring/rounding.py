"""Percentage rounding shared by the scorers."""

from __future__ import annotations

import math
from fractions import Fraction


def percent(count: int, total: int) -> int:
    """Return ``count / total * 100`` rounded half up; 0 when *total* is 0.

    Exact rational arithmetic, so ``1/8`` gives 13 rather than whatever
    ``12.499999…`` a float would produce.
    """
    if total <= 0:
        return 0
    return math.floor(Fraction(count * 100, total) + Fraction(1, 2))
