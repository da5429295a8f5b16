"""Calibration operations script.

Examples:
  python -m devmeter.recalib bootstrap --samples data/samples.csv --data-dir ./data
  python -m devmeter.recalib drift --domain octocat --observed data/observed.csv
  python -m devmeter.recalib show --domain octocat

CSV formats:
  bootstrap: domain, category, value
  drift:     category, value
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .calibration import CalibrationError, CalibrationStore
from .config_schema import CATEGORY_ORDER, Config, load_config
from .models import CalibrationData
from .monitoring import LoggingAlertSink, evaluate_calibration_drift, format_alert_message, monitor_and_alert

logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, cols: Sequence[str], path: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns {missing}")


def _read_rows(path: str, key_columns: Sequence[str]) -> pd.DataFrame:
    """Read a CSV as text and validate it; keys keep their spelling (``007`` stays ``007``)."""

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    _require_columns(df, list(key_columns) + ["value"], path)
    for col in key_columns:
        df[col] = df[col].str.strip()
        blank = df.index[df[col] == ""]
        if len(blank):
            raise ValueError(f"{path}: missing {col} on lines {[int(i) + 2 for i in blank]}")
    values = pd.to_numeric(df["value"].str.strip(), errors="coerce")
    bad = df.index[values.isna()]
    if len(bad):
        raise ValueError(f"{path}: non-numeric value on lines {[int(i) + 2 for i in bad]}")
    df["value"] = values.astype(float)
    _check_categories(df, path)
    return df


def _check_categories(df: pd.DataFrame, path: str) -> None:
    unknown = sorted(set(df["category"]) - set(CATEGORY_ORDER))
    if unknown:
        raise ValueError(f"{path}: unknown categories {unknown}")


def calibrations_from_frame(df: pd.DataFrame) -> Dict[str, CalibrationData]:
    """Group ``domain, category, value`` rows into sorted per-domain samples."""

    out: Dict[str, CalibrationData] = {}
    for domain, group in df.groupby("domain", sort=True):
        samples = {
            str(category): sorted(float(v) for v in rows["value"])
            for category, rows in group.groupby("category")
        }
        out[str(domain)] = CalibrationData.from_dict(samples)
    return out


def observed_from_frame(df: pd.DataFrame) -> Dict[str, List[float]]:
    return {str(c): rows["value"].astype(float).tolist() for c, rows in df.groupby("category")}


def _cmd_bootstrap(args: argparse.Namespace, store: CalibrationStore) -> int:
    df = _read_rows(args.samples, ["domain", "category"])
    data = calibrations_from_frame(df)
    store.bootstrap_calibration(data)
    print(f"bootstrapped {len(data)} domains into {store.data_dir}")
    return 0


def _cmd_drift(args: argparse.Namespace, store: CalibrationStore, cfg: Config) -> int:
    df = _read_rows(args.observed, ["category"])
    calibration = store.load_calibration(args.domain)
    results = evaluate_calibration_drift(calibration, observed_from_frame(df), cfg.monitoring)
    print(format_alert_message(results, args.domain))
    alerted = monitor_and_alert(results, LoggingAlertSink(), args.domain)
    return 1 if alerted else 0


def _cmd_show(args: argparse.Namespace, store: CalibrationStore) -> int:
    print(json.dumps(store.load_calibration(args.domain).to_dict(), indent=2))
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="devmeter calibration operations")
    p.add_argument("--config", default=None, help="Path to YAML config to override defaults")
    p.add_argument("--data-dir", default=None, help="Calibration directory (overrides config)")
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("bootstrap", help="Write per-domain calibration from a samples CSV")
    b.add_argument("--samples", required=True)

    d = sub.add_parser("drift", help="Compare observed values against a stored calibration")
    d.add_argument("--domain", required=True)
    d.add_argument("--observed", required=True)

    s = sub.add_parser("show", help="Print the effective calibration for a domain")
    s.add_argument("--domain", required=True)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_config(Path(args.config) if args.config else None)
    store = CalibrationStore(args.data_dir or cfg.calibration.data_dir)
    try:
        if args.cmd == "bootstrap":
            return _cmd_bootstrap(args, store)
        if args.cmd == "drift":
            return _cmd_drift(args, store, cfg)
        return _cmd_show(args, store)
    except (CalibrationError, ValueError, OSError) as e:
        logger.error("%s failed: %s", args.cmd, e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
