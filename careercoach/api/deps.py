from __future__ import annotations

from fastapi import Depends, Request

from careercoach.ai.types import AIClient
from careercoach.core.config import settings
from careercoach.core.errors import DependencyUnavailable
from careercoach.quiz.recorder import AttemptRecorder
from careercoach.services.cover_letter import CoverLetterWriter
from careercoach.services.dashboard import DashboardComposer
from careercoach.services.resume_scorer import ResumeScorer
from careercoach.store.db import Store


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_open:
        raise DependencyUnavailable("Store is not available.")
    return store


def get_read_store(request: Request) -> Store:
    # Read views degrade instead of failing, so a closed store is acceptable here.
    return getattr(request.app.state, "store", None) or Store(settings.store_path)


def get_ai(request: Request) -> AIClient | None:
    """The process-wide AI client created in the lifespan, or None when AI is disabled."""
    return getattr(request.app.state, "ai_client", None)


def get_attempt_recorder(store: Store = Depends(get_store)) -> AttemptRecorder:
    return AttemptRecorder(store)


def get_dashboard_composer(store: Store = Depends(get_read_store)) -> DashboardComposer:
    return DashboardComposer(store, read_timeout_s=settings.store_read_timeout_s)


def get_resume_scorer(client: AIClient | None = Depends(get_ai)) -> ResumeScorer:
    return ResumeScorer(client, timeout_s=settings.ai_timeout_s)


def get_cover_letter_writer(client: AIClient | None = Depends(get_ai)) -> CoverLetterWriter:
    return CoverLetterWriter(client, timeout_s=settings.ai_timeout_s)
