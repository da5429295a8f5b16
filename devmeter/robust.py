from __future__ import annotations

import math
from typing import Sequence

import numpy as np

MAD_CONSISTENCY = 1.4826


def median(xs: Sequence[float]) -> float:
    """Median of a sample, 0 for an empty one. The input is not modified."""

    if len(xs) == 0:
        return 0.0
    return float(np.median(np.asarray(xs, dtype=float)))


def mad(xs: Sequence[float]) -> float:
    """Median absolute deviation. Returns 1 instead of 0 to keep a usable scale."""

    if len(xs) == 0:
        return 1.0
    arr = np.asarray(xs, dtype=float)
    m = float(np.median(np.abs(arr - np.median(arr))))
    if m == 0 or not math.isfinite(m):
        return 1.0
    return m


def robust_z(x: float, sample: Sequence[float]) -> float:
    """asinh((x - median) / (1.4826 * MAD)).

    asinh grows logarithmically in the tails, so a single extreme value in
    either ``x`` or ``sample`` moves the result by a bounded amount.
    """

    med = median(sample)
    s = MAD_CONSISTENCY * mad(sample)
    if s == 0:
        s = 1.0
    return math.asinh((float(x) - med) / s)


def clip(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x
