from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import CalibrationData, RawEvent, ScoreResult


class EventIn(BaseModel):
    type: str
    timestamp: datetime
    count: float = 0.0
    repo: str = ""
    language: str = ""
    metadata: Optional[Dict[str, Any]] = None

    def to_raw(self) -> RawEvent:
        return RawEvent(
            type=self.type,
            timestamp=self.timestamp,
            count=self.count,
            repo=self.repo,
            language=self.language,
            metadata=self.metadata,
        )


class AnalyzeRequest(BaseModel):
    input: str = Field(min_length=1)
    github_events: List[EventIn] = Field(default_factory=list)
    x_events: List[EventIn] = Field(default_factory=list)


class ContributorOut(BaseModel):
    name: str
    contribution: float


class BreakdownOut(BaseModel):
    shipping: float
    quality: float
    influence: float
    complexity: float
    collaboration: float
    reliability: float
    novelty: float


class AnalyzeResponse(BaseModel):
    score: int
    confidence: float
    posterior: float
    contributors: List[ContributorOut]
    breakdown: BreakdownOut
    analysis_type: str

    @classmethod
    def from_result(cls, result: ScoreResult, analysis_type: str) -> "AnalyzeResponse":
        return cls(analysis_type=analysis_type, **result.to_dict())


class CalibrationBody(BaseModel):
    shipping: List[float] = Field(default_factory=list)
    quality: List[float] = Field(default_factory=list)
    influence: List[float] = Field(default_factory=list)
    complexity: List[float] = Field(default_factory=list)
    collaboration: List[float] = Field(default_factory=list)
    reliability: List[float] = Field(default_factory=list)
    novelty: List[float] = Field(default_factory=list)

    def to_data(self) -> CalibrationData:
        return CalibrationData.from_dict(self.model_dump())

    @classmethod
    def from_data(cls, data: CalibrationData) -> "CalibrationBody":
        return cls(**data.to_dict())
