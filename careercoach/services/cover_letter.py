from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from careercoach.ai.types import AIClient, ChatMessage
from careercoach.schemas.skills import CoverLetter, CoverLetterPayload

logger = logging.getLogger(__name__)

_MAX_JOB_DESCRIPTION_PROMPT_CHARS = 6000

_SYSTEM_PROMPT = (
    "You are a career coach who writes cover letters. "
    "Reply with one JSON object only, no prose."
)


def build_messages(
    job_title: str,
    company: str,
    job_description: str | None,
    user_profile: Mapping[str, Any] | None,
) -> list[ChatMessage]:
    profile = json.dumps(dict(user_profile or {}), ensure_ascii=False, default=str)
    prompt = f"""
Generate a professional cover letter for:
Job Title: {job_title}
Company: {company}
Job Description: {(job_description or 'Not provided')[:_MAX_JOB_DESCRIPTION_PROMPT_CHARS]}
User Profile: {profile}

Make it ATS-friendly, professional, and personalized. Keep it under 300 words.
Return JSON of the form {{"coverLetter": "<the full letter>"}}.
""".strip()
    return [
        ChatMessage(role="system", content=_SYSTEM_PROMPT),
        ChatMessage(role="user", content=prompt),
    ]


def template_letter(job_title: str, company: str, user_profile: Mapping[str, Any] | None) -> str:
    name = str((user_profile or {}).get("name") or "").strip() or "Your Name"
    return (
        "Dear Hiring Manager,\n\n"
        f"I am writing to express my strong interest in the {job_title} position at {company}. "
        "With my background in software development and passion for technology, I am excited "
        "about the opportunity to contribute to your team.\n\n"
        "My experience includes working with modern technologies and frameworks that align well "
        f"with your requirements. I am particularly drawn to {company}'s mission and would love "
        "to bring my skills to help achieve your goals.\n\n"
        "I would welcome the opportunity to discuss how my background and enthusiasm can "
        "contribute to your team's success.\n\n"
        f"Best regards,\n{name}"
    )


class CoverLetterWriter:
    """AI-written cover letter; any AI problem yields the fixed template."""

    def __init__(self, client: AIClient | None, *, timeout_s: float):
        self._client = client
        self._timeout_s = timeout_s

    async def write(
        self,
        job_title: str,
        company: str,
        job_description: str | None = None,
        user_profile: Mapping[str, Any] | None = None,
    ) -> CoverLetter:
        if self._client is None:
            return self.fallback(job_title, company, user_profile, reason="missing_credential")

        try:
            raw = await asyncio.wait_for(
                self._client.complete(build_messages(job_title, company, job_description, user_profile)),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("cover_letter_ai_timeout timeout_s=%s", self._timeout_s)
            return self.fallback(job_title, company, user_profile, reason="timeout")
        except Exception as exc:  # noqa: BLE001 - every AI failure ends in the template
            logger.warning("cover_letter_ai_failed: %s", exc)
            return self.fallback(job_title, company, user_profile, reason="ai_error")

        try:
            payload = CoverLetterPayload.model_validate_json(raw or "")
        except PydanticValidationError as exc:
            logger.info("cover_letter_ai_malformed errors=%s", exc.error_count())
            return self.fallback(job_title, company, user_profile, reason="unparseable")

        letter = payload.cover_letter.strip()
        if not letter:
            return self.fallback(job_title, company, user_profile, reason="empty_response")
        logger.info("cover_letter_written source=ai chars=%s", len(letter))
        return CoverLetter(cover_letter=letter, source="ai")

    def fallback(
        self,
        job_title: str,
        company: str,
        user_profile: Mapping[str, Any] | None,
        *,
        reason: str,
    ) -> CoverLetter:
        logger.info("cover_letter_written source=fallback reason=%s", reason)
        return CoverLetter(cover_letter=template_letter(job_title, company, user_profile), source="fallback")
