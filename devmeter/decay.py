from __future__ import annotations

import math


def decay_weight(delta_days: float, tau: float) -> float:
    """exp(-delta_days / tau); 0 when tau is not positive."""

    if tau <= 0:
        return 0.0
    return math.exp(-delta_days / tau)


def blend_dual_horizon(short_agg: float, long_agg: float, lam: float) -> float:
    """Blend short- and long-horizon aggregates with lam clamped into [0, 1]."""

    lam = max(0.0, min(1.0, lam))
    return lam * short_agg + (1.0 - lam) * long_agg
