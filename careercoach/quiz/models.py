from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from careercoach.quiz.catalog import CATEGORIES, is_known_category

Difficulty = Literal["Easy", "Medium", "Hard"]


class QuizQuestion(BaseModel):
    id: str
    category: str
    difficulty: Difficulty
    prompt: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    correct_option_index: int = Field(ge=0)
    explanation: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: str) -> str:
        if not is_known_category(value):
            raise ValueError(f"category must be one of: {', '.join(CATEGORIES)}")
        return value

    @model_validator(mode="after")
    def _validate_answer_index(self) -> "QuizQuestion":
        if self.correct_option_index >= len(self.options):
            raise ValueError("correct_option_index must index into options")
        return self

    def is_correct(self, selected_option_index: int | None) -> bool:
        # Out-of-range and missing answers are simply wrong.
        if selected_option_index is None:
            return False
        return selected_option_index == self.correct_option_index


class QuizAttempt(BaseModel):
    id: int | None = None
    user_id: str | None = None
    question_id: str
    selected_option_index: int | None = None
    is_correct: bool
    time_spent_seconds: float | None = None
    category: str
    submitted_at: datetime


class InterviewScore(BaseModel):
    date: datetime
    score: int = Field(ge=0, le=100)
    category: str


class UserProgress(BaseModel):
    resume_score: int = Field(default=0, ge=0, le=100)
    interview_scores: list[InterviewScore] = Field(default_factory=list)
    total_quizzes_taken: int = Field(default=0, ge=0)
    skills_improved: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    name: str
    email: str
    avatar: str | None = None
    phone: str | None = None
    location: str | None = None
    experience: str | None = None
    current_role: str | None = None
    target_role: str | None = None
    skills: list[str] = Field(default_factory=list)


class ResumeHistoryEntry(BaseModel):
    filename: str
    upload_date: datetime
    ats_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)
