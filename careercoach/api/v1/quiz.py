import asyncio
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request

from careercoach.api.deps import get_attempt_recorder, get_dashboard_composer, get_store
from careercoach.core.rate_limit import rate_limit
from careercoach.core.scoring_config import get_scoring_value
from careercoach.core.security import get_current_user_id, get_optional_user_id
from careercoach.quiz.recorder import AttemptRecorder
from careercoach.schemas.quiz import (
    CategoriesResponse,
    QuestionListResponse,
    QuestionOut,
    QuizStatsResponse,
    QuizSubmitRequest,
    QuizSubmitResponse,
    UserQuizStatsResponse,
)
from careercoach.services.dashboard import DashboardComposer
from careercoach.store.db import Store

router = APIRouter()


@router.get("/quiz/categories", response_model=CategoriesResponse)
async def quiz_categories(composer: DashboardComposer = Depends(get_dashboard_composer)):
    return await composer.categories()


@router.get("/quiz/stats", response_model=QuizStatsResponse)
async def quiz_stats(composer: DashboardComposer = Depends(get_dashboard_composer)):
    return await composer.quiz_stats()


@router.get("/quiz/stats/user", response_model=UserQuizStatsResponse)
async def quiz_user_stats(
    user_id: str = Depends(get_current_user_id),
    composer: DashboardComposer = Depends(get_dashboard_composer),
):
    return await composer.user_stats(user_id)


@router.post("/quiz/submit", response_model=QuizSubmitResponse)
@rate_limit()
async def quiz_submit(
    request: Request,
    payload: QuizSubmitRequest,
    user_id: str | None = Depends(get_optional_user_id),
    recorder: AttemptRecorder = Depends(get_attempt_recorder),
):
    result = await recorder.submit(
        user_id,
        payload.quiz_id,
        payload.selected_answer,
        payload.time_spent,
    )
    return QuizSubmitResponse(
        is_correct=result.is_correct,
        correct_answer=result.correct_option_index,
        correct_option_index=result.correct_option_index,
        explanation=result.explanation,
    )


@router.get("/quiz/{category}", response_model=QuestionListResponse)
async def quiz_questions(
    category: str,
    difficulty: Literal["Easy", "Medium", "Hard"] | None = None,
    limit: int | None = Query(default=None, ge=1, le=50),
    store: Store = Depends(get_store),
):
    limit = limit or int(get_scoring_value("quiz.question_limit", 10))
    questions = await asyncio.to_thread(store.list_questions, category, difficulty, limit)
    items = [
        QuestionOut(
            id=question.id,
            category=question.category,
            difficulty=question.difficulty,
            question=question.prompt,
            options=question.options,
            tags=question.tags,
        )
        for question in questions
    ]
    return QuestionListResponse(questions=items, category=category, count=len(items))
