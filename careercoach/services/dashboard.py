from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Sequence

from careercoach.core.scoring_config import get_scoring_value
from careercoach.core.timeouts import Ok, fetch_with_timeout, value_or
from careercoach.quiz import catalog
from careercoach.quiz.catalog import CategorySummary
from careercoach.quiz.models import QuizAttempt, UserProfile, UserProgress
from careercoach.quiz.stats import AggregatedStats, aggregate
from careercoach.schemas.dashboard import ActivityItem, DashboardStats, DashboardView, QuizOverview
from careercoach.schemas.quiz import (
    CategoriesResponse,
    CategoryCount,
    CategoryItem,
    CategoryStat,
    PerformanceResponse,
    QuizStatsResponse,
    RecentQuiz,
    ScoreSample,
    UserQuizStatsResponse,
)
from careercoach.store.db import Store

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _day(value: datetime) -> str:
    return value.date().isoformat()


@dataclass(frozen=True)
class CatalogStats:
    total_questions: int
    categories: list[CategorySummary] = field(default_factory=list)
    difficulties: list[str] = field(default_factory=list)

    @property
    def category_names(self) -> list[str]:
        return [summary.name for summary in self.categories]

    @classmethod
    def fallback(cls) -> "CatalogStats":
        return cls(
            total_questions=catalog.fallback_question_total(),
            categories=catalog.fallback_categories(),
            difficulties=list(catalog.DIFFICULTIES),
        )


def _dashboard_default(key: str, default: int) -> int:
    return int(get_scoring_value(f"dashboard.defaults.{key}", default))


class DashboardComposer:
    """Builds the read-only quiz and dashboard views.

    Every public coroutine returns a complete response. Store timeouts and
    failures are replaced with catalog data or fixed defaults here, so the
    routes never see them.
    """

    def __init__(
        self,
        store: Store,
        *,
        read_timeout_s: float,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._timeout_s = read_timeout_s
        self._clock = clock

    async def _read(self, func, *args, label: str):
        return await fetch_with_timeout(func, *args, timeout_s=self._timeout_s, label=label)

    async def catalog_stats(self) -> CatalogStats:
        profile, difficulties = await asyncio.gather(
            self._read(self._store.category_profile, label="category_profile"),
            self._read(self._store.list_difficulties, label="difficulties"),
        )
        if not isinstance(profile, Ok) or not profile.value:
            return CatalogStats.fallback()

        summaries = [
            CategorySummary(
                name=name,
                question_count=count,
                difficulties=tuple(levels),
                icon=catalog.icon_for(name),
            )
            for name, count, levels in profile.value
        ]
        return CatalogStats(
            total_questions=sum(summary.question_count for summary in summaries),
            categories=summaries,
            difficulties=value_or(difficulties, list(catalog.DIFFICULTIES)),
        )

    async def categories(self) -> CategoriesResponse:
        stats = await self.catalog_stats()
        items = [
            CategoryItem(
                name=summary.name,
                question_count=summary.question_count,
                difficulties=list(summary.difficulties),
                icon=summary.icon,
            )
            for summary in stats.categories
        ]
        return CategoriesResponse(success=True, categories=items, total_categories=len(items))

    async def quiz_stats(self) -> QuizStatsResponse:
        try:
            stats, attempts = await asyncio.gather(
                self.catalog_stats(),
                self._read(self._store.list_attempts, label="attempts"),
            )
            window = int(get_scoring_value("quiz.recent_window", 3))
            neutral = int(get_scoring_value("quiz.empty_average_score", 85))
            aggregated = aggregate(
                value_or(attempts, []),
                window,
                empty_average=neutral,
                today=self._clock().date(),
            )
            return QuizStatsResponse(
                success=True,
                total_questions=stats.total_questions,
                total_categories=len(stats.categories),
                difficulties=stats.difficulties,
                category_breakdown=[
                    CategoryCount(category=summary.name, count=summary.question_count)
                    for summary in stats.categories
                ],
                recent_quizzes=[
                    RecentQuiz(category=sample.category, score=sample.score, date=_day(sample.date))
                    for sample in aggregated.recent_samples
                ],
                completed_today=aggregated.completed_today,
                average_score=aggregated.average_score,
            )
        except Exception:  # noqa: BLE001 - statistics never fail the request
            logger.exception("quiz_stats_compose_failed")
            return QuizStatsResponse(success=True)

    async def dashboard(self, user_id: str | None) -> DashboardView:
        try:
            # Reads run together so the whole view waits at most one read timeout.
            if user_id is not None:
                catalog_stats, progress, profile = await asyncio.gather(
                    self.catalog_stats(),
                    self._read(self._store.get_progress, user_id, label="progress"),
                    self._read(self._store.get_profile, user_id, label="profile"),
                )
                if not isinstance(progress, Ok) or progress.value is None:
                    logger.info("dashboard_default user=%s reason=progress_unavailable", user_id)
                    return self.default_view()
                return self.compose_authenticated(
                    progress.value,
                    value_or(profile, None),
                    catalog_stats,
                )

            catalog_stats, attempts = await asyncio.gather(
                self.catalog_stats(),
                self._read(self._store.list_attempts, label="attempts"),
            )
            if not isinstance(attempts, Ok):
                logger.info("dashboard_default user=anonymous reason=attempts_unavailable")
                return self.default_view()
            return self.compose_anonymous(attempts.value, catalog_stats)
        except Exception:  # noqa: BLE001 - dashboards degrade to the default view
            logger.exception("dashboard_compose_failed user=%s", user_id or "anonymous")
            return self.default_view()

    def compose_authenticated(
        self,
        progress: UserProgress,
        profile: UserProfile | None,
        catalog_stats: CatalogStats,
    ) -> DashboardView:
        scores = progress.interview_scores
        # No personal history is a real 0 here, unlike the public stats.
        average = round(sum(entry.score for entry in scores) / len(scores)) if scores else 0
        window = int(get_scoring_value("dashboard.recent_window", 5))
        recent = list(reversed(scores[-window:])) if window > 0 else []
        today = self._clock().date()

        return DashboardView(
            stats=DashboardStats(
                resume_score=progress.resume_score,
                total_quizzes=progress.total_quizzes_taken,
                average_interview_score=average,
                skills_count=len(profile.skills) if profile else 0,
                available_questions=catalog_stats.total_questions,
                quiz_categories=len(catalog_stats.categories),
            ),
            recent_activity=[
                ActivityItem(
                    date=_day(entry.date),
                    score=entry.score,
                    type=f"{entry.category} Quiz",
                    category=entry.category,
                )
                for entry in recent
            ],
            quiz_overview=QuizOverview(
                total_questions=catalog_stats.total_questions,
                categories=catalog_stats.category_names,
                completed_today=sum(1 for entry in scores if entry.date.date() == today),
                average_score=average,
            ),
        )

    def compose_anonymous(
        self,
        global_attempts: Sequence[QuizAttempt],
        catalog_stats: CatalogStats,
    ) -> DashboardView:
        aggregated = aggregate(
            global_attempts,
            int(get_scoring_value("dashboard.recent_window", 5)),
            empty_average=_dashboard_default("average_interview_score", 0),
            today=self._clock().date(),
        )
        return DashboardView(
            stats=DashboardStats(
                resume_score=_dashboard_default("resume_score", 75),
                total_quizzes=aggregated.total_attempts,
                average_interview_score=aggregated.average_score,
                skills_count=_dashboard_default("skills_count", 8),
                available_questions=catalog_stats.total_questions,
                quiz_categories=len(catalog_stats.categories),
            ),
            recent_activity=[
                ActivityItem(
                    date=_day(sample.date),
                    score=sample.score,
                    type=f"{sample.category} Quiz",
                    category=sample.category,
                )
                for sample in aggregated.recent_samples
            ],
            quiz_overview=QuizOverview(
                total_questions=catalog_stats.total_questions,
                categories=catalog_stats.category_names,
                completed_today=aggregated.completed_today,
                average_score=aggregated.average_score,
            ),
        )

    @staticmethod
    def default_view() -> DashboardView:
        return DashboardView(
            stats=DashboardStats(
                resume_score=_dashboard_default("resume_score", 75),
                total_quizzes=0,
                average_interview_score=_dashboard_default("average_interview_score", 0),
                skills_count=_dashboard_default("skills_count", 8),
                available_questions=0,
                quiz_categories=0,
            ),
            recent_activity=[],
            quiz_overview=QuizOverview(total_questions=0, categories=[], completed_today=0, average_score=0),
        )

    async def _user_aggregate(self, user_id: str, window: int) -> AggregatedStats:
        attempts = await self._read(self._store.list_attempts, user_id, label="user_attempts")
        return aggregate(
            value_or(attempts, []),
            window,
            empty_average=0,
            today=self._clock().date(),
        )

    async def user_stats(self, user_id: str) -> UserQuizStatsResponse:
        aggregated = await self._user_aggregate(user_id, window=0)
        return UserQuizStatsResponse(
            total_attempts=aggregated.total_attempts,
            correct_answers=aggregated.correct_answers,
            category_stats={
                name: CategoryStat(total=tally.total, correct=tally.correct)
                for name, tally in aggregated.category_breakdown.items()
            },
        )

    async def performance(self, user_id: str) -> PerformanceResponse:
        window = int(get_scoring_value("quiz.performance_window", 10))
        aggregated = await self._user_aggregate(user_id, window=window)
        return PerformanceResponse(
            total_attempts=aggregated.total_attempts,
            correct_answers=aggregated.correct_answers,
            category_wise={
                name: CategoryStat(total=tally.total, correct=tally.correct)
                for name, tally in aggregated.category_breakdown.items()
            },
            recent_scores=[
                ScoreSample(date=sample.date, score=sample.score, category=sample.category)
                for sample in aggregated.recent_samples
            ],
        )
