"""
SunSpec scale-factor application.

A SunSpec value register holds an integer that must be multiplied by
``10 ** sf``, where ``sf`` is a signed exponent read from a separate
register.  Results are not range-checked: whatever the device reports
flows through.

CHANGELOG:
- 2026-10-19: Multiply by the float power of ten for negative exponents too
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math


def scale(raw: int, exponent: int) -> float:
    """Return ``raw * 10 ** exponent`` as a float.

    The power of ten is computed as a float and multiplied in, so
    ``scale(3, -1)`` is ``3 * 0.1`` (0.30000000000000004), not 0.3.
    Exponents beyond the float range give ``inf`` (or ``0.0`` for large
    negative exponents) instead of raising.
    """
    if raw == 0:
        return 0.0
    try:
        return raw * 10.0**exponent
    except OverflowError:
        return math.copysign(math.inf, raw)


def to_kilo(value: float) -> float:
    """Convert W to kW or Wh to kWh."""
    return value / 1000.0
