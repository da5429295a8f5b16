from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from pathlib import Path
from typing import List, Mapping, Union

from .models import CalibrationData

logger = logging.getLogger(__name__)

# Saves hash onto a fixed set of locks so the table never grows with domains.
_LOCK_STRIPES = 64


class CalibrationError(Exception):
    """Raised when a stored calibration cannot be read or written."""


def default_calibration() -> CalibrationData:
    """Built-in baselines: typical magnitudes per category."""

    return CalibrationData(
        shipping=[0, 1, 2, 5, 10, 20, 50, 100],  # commits/PRs per period
        quality=[0, 0.2, 0.5, 0.8, 0.9, 0.95, 1.0],  # review depth, capped at 1
        influence=[0, 1, 5, 15, 50, 150, 500],  # stars/followers
        complexity=[0, 0.1, 0.3, 0.5, 0.7, 0.9, 1.0],  # language entropy
        collaboration=[0, 1, 3, 5, 10, 20, 50],  # unique collaborators
        reliability=[0, 0.5, 0.7, 0.8, 0.9, 0.95, 1.0],  # CI pass rate
        novelty=[0, 0.1, 0.3, 0.5, 0.7, 0.9, 1.0],  # new languages/topics
    )


class CalibrationStore:
    """File-backed calibration baselines, one JSON file per domain.

    A missing file is not an error: ``load_calibration`` returns the
    built-in defaults. Saves for the same domain are serialized by an
    in-process lock, striped by path, and committed with a temp file plus
    ``os.replace`` so readers never observe a partially written file.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(_LOCK_STRIPES)]

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, domain: str) -> Path:
        """Resolve the file for ``domain``; domains may contain ``/`` but never escape the store."""

        try:
            base = self._data_dir.resolve()
            path = (base / f"{domain}.json").resolve()
        except (OSError, ValueError) as e:
            raise CalibrationError(f"Invalid calibration domain: {domain!r}") from e
        if not domain or base not in path.parents:
            raise CalibrationError(f"Invalid calibration domain: {domain!r}")
        return path

    def _lock_for(self, path: Path) -> threading.Lock:
        return self._locks[hash(str(path)) % len(self._locks)]

    def load_calibration(self, domain: str) -> CalibrationData:
        path = self.path_for(domain)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            logger.debug("No calibration for domain %s; using defaults", domain)
            return default_calibration()
        except (OSError, ValueError) as e:
            raise CalibrationError(f"Failed to read calibration for {domain}: {e}") from e

        if not isinstance(raw, dict):
            raise CalibrationError(f"Calibration for {domain} is not a JSON object")
        try:
            return CalibrationData.from_dict(raw)
        except (TypeError, ValueError) as e:
            raise CalibrationError(f"Failed to decode calibration for {domain}: {e}") from e

    def save_calibration(self, domain: str, data: CalibrationData) -> None:
        path = self.path_for(domain)
        payload = json.dumps(data.to_dict(), indent=2) + "\n"

        with self._lock_for(path):
            tmp_path = path.with_name(f".{path.name}.tmp.{uuid.uuid4().hex}")
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except OSError as e:
                if tmp_path.exists():
                    tmp_path.unlink()
                raise CalibrationError(f"Failed to save calibration for {domain}: {e}") from e

        logger.info("Saved calibration for domain %s to %s", domain, path)

    def bootstrap_calibration(self, sample_data: Mapping[str, CalibrationData]) -> None:
        """Save every domain in order, stopping at the first failure."""

        for domain, data in sample_data.items():
            try:
                self.save_calibration(domain, data)
            except CalibrationError as e:
                raise CalibrationError(f"Failed to bootstrap calibration for {domain}: {e}") from e
        logger.info("Bootstrapped calibration for %d domains", len(sample_data))
