"""Interpolation curves mapping ``(start, end, progress)`` to a value.

``progress`` is expected in ``[0, 1]``; values outside that range are not
validated and simply extrapolate.
"""

from __future__ import annotations

import math
from typing import Callable

Curve = Callable[[float, float, float], float]


def linear(start: float, end: float, progress: float) -> float:
    return start + progress * (end - start)


def equal_power(start: float, end: float, progress: float) -> float:
    """Constant-loudness crossfade between two non-negative amplitudes."""
    return math.sqrt(linear(start * start, end * end, progress))


def exponential(start: float, end: float, progress: float) -> float:
    """``start + (end - start) * (1 - end**progress)``.

    The rate is taken from *end* itself, so the curve only lands on *end* at
    ``progress == 1`` when ``end`` is 0 or equal to *start*.
    """
    return start + (end - start) * (1.0 - end**progress)


CURVES: dict[str, Curve] = {
    "linear": linear,
    "equal_power": equal_power,
    "exponential": exponential,
}


def get_curve(curve: str | Curve) -> Curve:
    """Resolve a curve name or callable to a callable."""
    if callable(curve):
        return curve
    key = curve.lower().replace("-", "_")
    if key not in CURVES:
        raise ValueError(f"Unknown curve {curve!r}, valid names: {list(CURVES.keys())}")
    return CURVES[key]
