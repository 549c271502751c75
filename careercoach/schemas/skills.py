from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field

from careercoach.schemas.base import CamelModel


class SkillDemand(CamelModel):
    skill: str
    demand: int = Field(ge=0, le=100)
    growth: int
    jobs: int = Field(ge=0)


class SkillDemandResponse(CamelModel):
    success: bool = True
    skills: list[SkillDemand] = Field(default_factory=list)
    last_updated: datetime
    total_jobs: int = 0


class CoverLetterRequest(CamelModel):
    job_title: str = Field(min_length=1, max_length=200)
    company: str = Field(min_length=1, max_length=200)
    job_description: str | None = Field(default=None, max_length=20000)
    user_profile: dict[str, Any] | None = None


class CoverLetterPayload(CamelModel):
    """Shape the AI provider must return; validated strictly."""

    model_config = ConfigDict(strict=True, extra="ignore")

    cover_letter: str = Field(min_length=1)


class CoverLetter(CamelModel):
    cover_letter: str
    source: Literal["ai", "fallback"]


class CoverLetterResponse(CoverLetter):
    generated_at: datetime


class CareerTipsResponse(CamelModel):
    tips: list[str] = Field(default_factory=list)
    personalized_for: str | None = None
