"""Calibration drift monitoring.

Stored baselines go stale as the population of analyzed developers shifts.
This module compares a domain's calibration samples against freshly observed
raw category values with the population stability index (PSI) and routes
alerts to a pluggable sink.

Recalibration triggers (recommended)
- PSI >= psi_warn on any category: log and watch.
- PSI >= psi_alert on any category: rebuild the baseline with
  ``python -m devmeter.recalib bootstrap``.

Example
>>> from devmeter.monitoring import evaluate_calibration_drift, LoggingAlertSink, monitor_and_alert
>>> results = evaluate_calibration_drift(calibration, {"influence": [...]})
>>> monitor_and_alert(results, LoggingAlertSink())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Protocol, Sequence

import numpy as np

from .config_schema import CATEGORY_ORDER, MonitoringConfig
from .models import CalibrationData

logger = logging.getLogger(__name__)


def _quantile_bins(values: Iterable[float], bins: int) -> np.ndarray:
    arr = np.asarray(list(values), dtype=float)
    if len(arr) == 0:
        return arr
    qs = np.linspace(0, 1, bins + 1)
    edges = np.quantile(arr, qs)
    # widen duplicate edges so histogram bins stay increasing
    for i in range(1, len(edges)):
        if edges[i] <= edges[i - 1]:
            edges[i] = np.nextafter(edges[i - 1], np.inf)
    return edges


def psi_from_values(
    ref: Iterable[float], cur: Iterable[float], bins: int = 5, min_sample: int = 10, eps: float = 1e-6
) -> Optional[float]:
    """PSI of ``cur`` against ``ref`` over quantile bins of ``ref``.

    PSI = sum((p_i - q_i) * ln(p_i / q_i)) with additive smoothing.
    Returns None when either side has fewer than ``min_sample`` values
    (``ref`` is allowed down to ``bins + 1`` values since calibration
    sequences are short by design).
    """

    ref = np.asarray(list(ref), dtype=float)
    cur = np.asarray(list(cur), dtype=float)
    if len(ref) < bins + 1 or len(cur) < min_sample:
        return None
    edges = _quantile_bins(ref, bins)
    # values outside the reference range land in the edge bins
    r_hist, _ = np.histogram(np.clip(ref, edges[0], edges[-1]), bins=edges)
    c_hist, _ = np.histogram(np.clip(cur, edges[0], edges[-1]), bins=edges)
    r_prob = (r_hist + eps) / (r_hist.sum() + eps * len(r_hist))
    c_prob = (c_hist + eps) / (c_hist.sum() + eps * len(c_hist))
    return float(np.sum((r_prob - c_prob) * np.log(r_prob / c_prob)))


@dataclass
class DriftResults:
    psi: Dict[str, Optional[float]]
    flags: Dict[str, bool] = field(default_factory=dict)


class AlertSink(Protocol):
    def send(self, message: str) -> None:  # pragma: no cover - interface only
        ...


class LoggingAlertSink:
    """Default sink: emit alerts through the module logger."""

    def send(self, message: str) -> None:
        logger.warning(message)


def evaluate_calibration_drift(
    calibration: CalibrationData,
    observed: Mapping[str, Sequence[float]],
    thresholds: Optional[MonitoringConfig] = None,
) -> DriftResults:
    """PSI per category for every category present in ``observed``."""

    thresholds = thresholds or MonitoringConfig()
    psi: Dict[str, Optional[float]] = {}
    flags: Dict[str, bool] = {}
    for category in CATEGORY_ORDER:
        if category not in observed:
            continue
        value = psi_from_values(
            calibration.sample(category),
            observed[category],
            bins=thresholds.bins,
            min_sample=thresholds.min_sample,
        )
        psi[category] = value
        if value is None:
            flags[f"{category}_insufficient"] = True
            continue
        flags[f"{category}_warn"] = value >= thresholds.psi_warn
        flags[f"{category}_alert"] = value >= thresholds.psi_alert
    return DriftResults(psi=psi, flags=flags)


def should_alert(results: DriftResults) -> bool:
    return any(v for k, v in results.flags.items() if k.endswith("_alert"))


def format_alert_message(results: DriftResults, domain: str = "") -> str:
    parts = [f"[devmeter] calibration drift{' for ' + domain if domain else ''}"]
    psi_s = ", ".join(
        f"{c}={v:.3f}" if v is not None else f"{c}=NA" for c, v in results.psi.items()
    )
    if psi_s:
        parts.append(f"PSI({psi_s})")
    on = [k for k, v in results.flags.items() if v is True]
    if on:
        parts.append("Flags: " + ", ".join(sorted(on)))
    return " | ".join(parts)


def monitor_and_alert(results: DriftResults, sink: AlertSink, domain: str = "") -> bool:
    """Send an alert when any category crossed the alert threshold."""

    if should_alert(results):
        sink.send(format_alert_message(results, domain))
        return True
    return False
