from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Sequence

from careercoach.quiz.models import QuizAttempt


@dataclass(frozen=True)
class CategoryTally:
    total: int = 0
    correct: int = 0


@dataclass(frozen=True)
class RecentSample:
    date: datetime
    score: int
    category: str


@dataclass(frozen=True)
class AggregatedStats:
    total_attempts: int
    correct_answers: int
    category_breakdown: dict[str, CategoryTally] = field(default_factory=dict)
    recent_samples: list[RecentSample] = field(default_factory=list)
    average_score: int = 0
    completed_today: int = 0


def aggregate(
    attempts: Sequence[QuizAttempt],
    window_size: int,
    *,
    empty_average: int,
    today: date | None = None,
) -> AggregatedStats:
    """Summarise a sequence of attempts.

    ``empty_average`` is returned as ``average_score`` when there are no
    attempts; it stands for "no data yet" and is chosen by the caller.
    ``completed_today`` counts attempts submitted on ``today`` (UTC date of
    ``submitted_at``); it stays 0 when ``today`` is not given.
    """
    total = len(attempts)
    correct = 0
    breakdown: dict[str, CategoryTally] = {}
    completed_today = 0

    for attempt in attempts:
        tally = breakdown.get(attempt.category, CategoryTally())
        if attempt.is_correct:
            correct += 1
            breakdown[attempt.category] = CategoryTally(total=tally.total + 1, correct=tally.correct + 1)
        else:
            breakdown[attempt.category] = CategoryTally(total=tally.total + 1, correct=tally.correct)
        if today is not None and attempt.submitted_at.date() == today:
            completed_today += 1

    # Most recent first; among equal timestamps the later-inserted attempt wins.
    ordered = sorted(
        enumerate(attempts),
        key=lambda pair: (pair[1].submitted_at, pair[0]),
        reverse=True,
    )
    window = max(0, window_size)
    recent = [
        RecentSample(
            date=attempt.submitted_at,
            score=100 if attempt.is_correct else 0,
            category=attempt.category,
        )
        for _, attempt in ordered[:window]
    ]

    average = round(correct / total * 100) if total > 0 else empty_average

    return AggregatedStats(
        total_attempts=total,
        correct_answers=correct,
        category_breakdown=breakdown,
        recent_samples=recent,
        average_score=average,
        completed_today=completed_today,
    )
