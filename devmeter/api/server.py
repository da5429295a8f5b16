from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..analyzer import Analyzer, analysis_type
from ..calibration import CalibrationError
from ..config_schema import load_config
from .schemas import AnalyzeRequest, AnalyzeResponse, CalibrationBody

logger = logging.getLogger(__name__)

app = FastAPI(title="Developer Reputation Scoring API")


@lru_cache(maxsize=1)
def get_analyzer() -> Analyzer:
    cfg_path = os.environ.get("DEVMETER_CONFIG")
    cfg = load_config(Path(cfg_path) if cfg_path else None)
    return Analyzer(os.environ.get("DEVMETER_DATA_DIR") or None, cfg)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest) -> AnalyzeResponse:
    analyzer = get_analyzer()
    github_events = [e.to_raw() for e in req.github_events]
    x_events = [e.to_raw() for e in req.x_events]
    kind = analysis_type(github_events, x_events)

    if kind == "combined":
        result = analyzer.analyze_events_with_x(github_events, x_events, req.input)
    elif kind == "github":
        result = analyzer.analyze_events(github_events, req.input)
    elif kind == "x":
        result = analyzer.analyze_events(x_events, req.input)
    else:
        logger.warning("No analyzable data found for %s", req.input)
        raise HTTPException(status_code=422, detail="no analyzable data found for the provided input")

    logger.info("Analysis completed for %s (%s): score=%d confidence=%.2f", req.input, kind, result.score, result.confidence)
    return AnalyzeResponse.from_result(result, kind)


@app.get("/calibration/{domain:path}", response_model=CalibrationBody)
def get_calibration(domain: str) -> CalibrationBody:
    try:
        data = get_analyzer().calibration_store.load_calibration(domain)
    except CalibrationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CalibrationBody.from_data(data)


@app.put("/calibration/{domain:path}", response_model=CalibrationBody)
def put_calibration(domain: str, body: CalibrationBody) -> CalibrationBody:
    try:
        get_analyzer().calibration_store.save_calibration(domain, body.to_data())
    except CalibrationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return body
