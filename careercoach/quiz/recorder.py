from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from careercoach.core.errors import NotFoundError
from careercoach.quiz.models import InterviewScore, QuizAttempt
from careercoach.store.db import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    is_correct: bool
    correct_option_index: int
    explanation: str | None
    attempt_id: int | None = None
    progress_updated: bool = False


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AttemptRecorder:
    """Scores one submitted answer, stores the attempt, then updates progress.

    The attempt write and the progress update are separate store operations.
    When the progress update fails the attempt is kept and the submission
    still succeeds, so a user's history may count an attempt that their
    ``total_quizzes_taken`` does not.
    """

    def __init__(self, store: Store, *, clock: Callable[[], datetime] = _utc_now):
        self._store = store
        self._clock = clock

    async def submit(
        self,
        user_id: str | None,
        question_id: str,
        selected_option_index: int | None,
        time_spent_seconds: float | None,
    ) -> SubmissionResult:
        question = await asyncio.to_thread(self._store.get_question, question_id)
        if question is None:
            raise NotFoundError("Quiz not found")

        is_correct = question.is_correct(selected_option_index)
        submitted_at = self._clock()
        attempt = QuizAttempt(
            user_id=user_id,
            question_id=question.id,
            selected_option_index=selected_option_index,
            is_correct=is_correct,
            time_spent_seconds=time_spent_seconds,
            category=question.category,
            submitted_at=submitted_at,
        )
        stored = await asyncio.to_thread(self._store.insert_attempt, attempt)

        progress_updated = False
        if user_id is not None:
            entry = InterviewScore(date=submitted_at, score=100 if is_correct else 0, category=question.category)
            try:
                await asyncio.to_thread(self._store.record_quiz_progress, user_id, entry)
                progress_updated = True
            except Exception as exc:  # noqa: BLE001 - the attempt record stands
                logger.warning(
                    "quiz_submit_progress_failed user=%s attempt=%s: %s",
                    user_id,
                    stored.id,
                    exc,
                )

        logger.info(
            "quiz_submit user=%s question=%s correct=%s progress_updated=%s",
            user_id or "anonymous",
            question.id,
            is_correct,
            progress_updated,
        )
        return SubmissionResult(
            is_correct=is_correct,
            correct_option_index=question.correct_option_index,
            explanation=question.explanation,
            attempt_id=stored.id,
            progress_updated=progress_updated,
        )
