import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from careercoach.api.deps import get_resume_scorer, get_store
from careercoach.core.config import settings
from careercoach.core.errors import ValidationError
from careercoach.core.rate_limit import rate_limit
from careercoach.core.scoring_config import get_scoring_value
from careercoach.core.security import get_current_user_id
from careercoach.parsing.parse import SUPPORTED_EXTENSIONS, extension_of, extract_resume_text
from careercoach.quiz.models import ResumeHistoryEntry
from careercoach.schemas.resume import ResumeHistoryItem, ResumeUploadResponse
from careercoach.services.resume_scorer import ResumeScorer
from careercoach.store.db import Store

logger = logging.getLogger(__name__)

router = APIRouter()


def _preview(text: str) -> str:
    limit = int(get_scoring_value("resume.preview_chars", 500))
    return text[:limit] + "..."


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")
    return content


@router.post("/resume/upload", response_model=ResumeUploadResponse)
@rate_limit()
async def upload_resume(
    request: Request,
    file: UploadFile | None = File(default=None),
    job_description: str | None = Form(default=None, alias="jobDescription"),
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    scorer: ResumeScorer = Depends(get_resume_scorer),
):
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    filename = file.filename
    if extension_of(filename) not in SUPPORTED_EXTENSIONS:
        raise ValidationError("Only PDF and DOCX files are allowed")

    content = await _read_upload(file, settings.resume_max_upload_bytes)
    extracted = await asyncio.to_thread(extract_resume_text, filename, content)
    if extracted.is_empty:
        raise ValidationError("Could not extract any text from the uploaded resume")

    if settings.resume_analysis_delay_s > 0:
        await asyncio.sleep(settings.resume_analysis_delay_s)

    jd = (job_description or "").strip()
    analysis = await scorer.score(extracted.text, jd or None)
    analysis_date = datetime.now(timezone.utc)

    entry = ResumeHistoryEntry(
        filename=filename,
        upload_date=analysis_date,
        ats_score=analysis.ats_score,
        suggestions=analysis.suggestions,
    )
    await asyncio.to_thread(store.append_resume_history, user_id, entry)
    logger.info(
        "resume_uploaded user=%s type=%s score=%s source=%s",
        user_id,
        extracted.source_type,
        analysis.ats_score,
        analysis.source,
    )

    return ResumeUploadResponse(
        **analysis.model_dump(),
        resume_text=_preview(extracted.text),
        analysis_date=analysis_date,
        has_job_description=bool(jd),
    )


@router.get("/resume/history", response_model=list[ResumeHistoryItem])
async def resume_history(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    entries = await asyncio.to_thread(store.list_resume_history, user_id)
    return [ResumeHistoryItem(**entry.model_dump()) for entry in entries]
