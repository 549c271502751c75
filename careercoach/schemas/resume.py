from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from careercoach.schemas.base import CamelModel

AnalysisSource = Literal["ai", "recovered", "fallback"]


class AIAnalysisPayload(CamelModel):
    """Shape the AI provider must return; validated strictly."""

    model_config = ConfigDict(strict=True, extra="ignore")

    ats_score: float
    suggestions: list[str]
    missing_keywords: list[str]
    strengths: list[str]


class ResumeAnalysis(CamelModel):
    ats_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list, max_length=5)
    missing_keywords: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    source: AnalysisSource = "ai"


class ResumeUploadResponse(ResumeAnalysis):
    resume_text: str
    analysis_date: datetime
    has_job_description: bool


class ResumeHistoryItem(CamelModel):
    filename: str
    upload_date: datetime
    ats_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)
