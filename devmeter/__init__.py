"""Developer reputation scoring engine.

Turns per-developer activity events from code-hosting and social platforms
into a calibrated score with a confidence and an auditable breakdown:

- Config schema and defaults
- Robust statistics (median/MAD, asinh z-score)
- File-backed calibration baselines per domain
- Anti-gaming preprocessing (merge, discount, timing, bot exclusion)
- Feature vector building over seven evidence categories
- Log-odds scoring with explainable contributors
- Calibration drift monitoring and an operations script
- FastAPI server endpoints
"""

__all__ = [
    "config_schema",
    "models",
    "robust",
    "decay",
    "calibration",
    "preprocess",
    "features",
    "scorer",
    "analyzer",
    "monitoring",
]
