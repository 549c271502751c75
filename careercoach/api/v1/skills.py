import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from careercoach.api.deps import get_cover_letter_writer, get_read_store
from careercoach.core.config import settings
from careercoach.core.rate_limit import rate_limit
from careercoach.core.security import get_current_user_id
from careercoach.core.timeouts import fetch_with_timeout, value_or
from careercoach.schemas.skills import (
    CareerTipsResponse,
    CoverLetterRequest,
    CoverLetterResponse,
    SkillDemand,
    SkillDemandResponse,
)
from careercoach.services.cover_letter import CoverLetterWriter
from careercoach.store.db import Store

logger = logging.getLogger(__name__)

router = APIRouter()

# Industry demand snapshot: (skill, demand %, yearly growth %, open jobs).
SKILL_DEMAND = (
    ("JavaScript", 95, 12, 45000),
    ("Python", 92, 18, 42000),
    ("React", 88, 25, 38000),
    ("Node.js", 85, 20, 35000),
    ("AWS", 90, 30, 40000),
    ("Docker", 82, 35, 28000),
    ("Kubernetes", 78, 40, 25000),
    ("Machine Learning", 85, 45, 32000),
    ("Data Science", 83, 38, 30000),
    ("DevOps", 80, 28, 27000),
)

CAREER_TIPS = (
    "Focus on learning in-demand skills like React, Python, and AWS",
    "Build projects that showcase your problem-solving abilities",
    "Contribute to open-source projects to build your portfolio",
    "Network with professionals in your target industry",
    "Keep your resume updated with quantifiable achievements",
    "Practice coding interviews regularly on platforms like LeetCode",
    "Stay updated with industry trends and technologies",
    "Consider getting relevant certifications in your field",
)
CAREER_TIPS_SHOWN = 5


@router.get("/skills/demand", response_model=SkillDemandResponse)
async def skills_demand():
    skills = [
        SkillDemand(skill=skill, demand=demand, growth=growth, jobs=jobs)
        for skill, demand, growth, jobs in SKILL_DEMAND
    ]
    return SkillDemandResponse(
        skills=skills,
        last_updated=datetime.now(timezone.utc),
        total_jobs=sum(item.jobs for item in skills),
    )


async def _stored_profile(store: Store, user_id: str):
    result = await fetch_with_timeout(
        store.get_profile,
        user_id,
        timeout_s=settings.store_read_timeout_s,
        label="skills_profile",
    )
    return value_or(result, None)


@router.post("/skills/cover-letter", response_model=CoverLetterResponse)
@rate_limit()
async def cover_letter(
    request: Request,
    payload: CoverLetterRequest,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_read_store),
    writer: CoverLetterWriter = Depends(get_cover_letter_writer),
):
    profile = payload.user_profile
    if profile is None:
        stored = await _stored_profile(store, user_id)
        if stored is not None:
            profile = stored.model_dump(exclude={"email", "phone", "avatar"}, exclude_none=True)

    letter = await writer.write(payload.job_title, payload.company, payload.job_description, profile)
    logger.info("cover_letter_served user=%s source=%s", user_id, letter.source)
    return CoverLetterResponse(
        cover_letter=letter.cover_letter,
        source=letter.source,
        generated_at=datetime.now(timezone.utc),
    )


@router.get("/skills/career-tips", response_model=CareerTipsResponse)
async def career_tips(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_read_store),
):
    profile = await _stored_profile(store, user_id)
    return CareerTipsResponse(
        tips=list(CAREER_TIPS[:CAREER_TIPS_SHOWN]),
        personalized_for=profile.name if profile is not None else None,
    )
