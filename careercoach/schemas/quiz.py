from __future__ import annotations

from datetime import datetime

from pydantic import Field

from careercoach.schemas.base import CamelModel


class CategoryItem(CamelModel):
    name: str
    question_count: int = Field(ge=0)
    difficulties: list[str] = Field(default_factory=list)
    icon: str


class CategoriesResponse(CamelModel):
    success: bool = True
    categories: list[CategoryItem] = Field(default_factory=list)
    total_categories: int = 0


class CategoryCount(CamelModel):
    category: str
    count: int = Field(ge=0)


class RecentQuiz(CamelModel):
    category: str
    score: int = Field(ge=0, le=100)
    date: str


class QuizStatsResponse(CamelModel):
    success: bool = True
    total_questions: int = 0
    total_categories: int = 0
    difficulties: list[str] = Field(default_factory=list)
    category_breakdown: list[CategoryCount] = Field(default_factory=list)
    recent_quizzes: list[RecentQuiz] = Field(default_factory=list)
    completed_today: int = 0
    average_score: int = 0


class QuizSubmitRequest(CamelModel):
    quiz_id: str = Field(min_length=1, max_length=100)
    selected_answer: int | None = None
    time_spent: float | None = Field(default=None, ge=0)


class QuizSubmitResponse(CamelModel):
    is_correct: bool
    correct_answer: int
    correct_option_index: int
    explanation: str | None = None


class QuestionOut(CamelModel):
    id: str
    category: str
    difficulty: str
    question: str
    options: list[str]
    tags: list[str] = Field(default_factory=list)


class QuestionListResponse(CamelModel):
    success: bool = True
    questions: list[QuestionOut] = Field(default_factory=list)
    category: str
    count: int = 0


class CategoryStat(CamelModel):
    total: int = 0
    correct: int = 0


class UserQuizStatsResponse(CamelModel):
    total_attempts: int = 0
    correct_answers: int = 0
    category_stats: dict[str, CategoryStat] = Field(default_factory=dict)


class ScoreSample(CamelModel):
    date: datetime
    score: int = Field(ge=0, le=100)
    category: str


class PerformanceResponse(CamelModel):
    total_attempts: int = 0
    correct_answers: int = 0
    category_wise: dict[str, CategoryStat] = Field(default_factory=dict)
    recent_scores: list[ScoreSample] = Field(default_factory=list)
