from __future__ import annotations

from pydantic import Field

from careercoach.schemas.base import CamelModel


class DashboardStats(CamelModel):
    resume_score: int = Field(ge=0, le=100)
    total_quizzes: int = Field(ge=0)
    average_interview_score: int = Field(ge=0, le=100)
    skills_count: int = Field(ge=0)
    available_questions: int = Field(ge=0)
    quiz_categories: int = Field(ge=0)


class ActivityItem(CamelModel):
    date: str
    score: int = Field(ge=0, le=100)
    type: str
    category: str


class QuizOverview(CamelModel):
    total_questions: int = 0
    categories: list[str] = Field(default_factory=list)
    completed_today: int = 0
    average_score: int = 0


class DashboardView(CamelModel):
    stats: DashboardStats
    recent_activity: list[ActivityItem] = Field(default_factory=list)
    quiz_overview: QuizOverview = Field(default_factory=QuizOverview)
