from __future__ import annotations

import asyncio
import logging
import math
import random
import re
from typing import Sequence

from pydantic import ValidationError as PydanticValidationError

from careercoach.ai.types import AIClient, ChatMessage
from careercoach.core.errors import MalformedUpstreamResponse
from careercoach.core.scoring_config import get_scoring_value
from careercoach.schemas.resume import AIAnalysisPayload, ResumeAnalysis

logger = logging.getLogger(__name__)

_SCORE_RE = re.compile(r'"atsScore"\s*:\s*(\d+)')
_MAX_RESUME_PROMPT_CHARS = 12000
_DEFAULT_VOCABULARY = (
    "javascript", "react", "node", "python", "java", "aws",
    "docker", "kubernetes", "mongodb", "sql", "git",
)

_RECOVERED_SUGGESTIONS = [
    "Add more technical keywords relevant to the job description",
    "Include quantifiable achievements with specific metrics",
    "Optimize resume format for ATS compatibility",
    "Add relevant certifications and skills section",
]
_RECOVERED_STRENGTHS = ["Clear experience section", "Good technical skills listed"]
_GENERIC_MISSING_KEYWORDS = ["Node.js", "MongoDB", "AWS", "Docker", "TypeScript"]

_SYSTEM_PROMPT = (
    "You are an ATS (Applicant Tracking System) resume reviewer. "
    "Reply with one JSON object only, no prose."
)


def clamp_score(value: float) -> int:
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return 100 if value > 0 else 0
    return max(0, min(100, int(round(value))))


def build_messages(resume_text: str, job_description: str) -> list[ChatMessage]:
    resume = (resume_text or "")[:_MAX_RESUME_PROMPT_CHARS]
    prompt = f"""
Analyze this resume and provide an ATS score (0-100) and detailed feedback:

Resume Content:
{resume}

Job Description (if provided):
{job_description or 'General software development role'}

Please provide a JSON response with the following structure:
{{
  "atsScore": number (0-100),
  "suggestions": ["specific actionable suggestion 1", "specific actionable suggestion 2"],
  "missingKeywords": ["keyword1", "keyword2"],
  "strengths": ["strength1", "strength2"]
}}

Focus on:
1. ATS compatibility and keyword optimization
2. Quantifiable achievements and metrics
3. Technical skills alignment
4. Format and structure improvements
5. Industry-specific terminology
""".strip()
    return [
        ChatMessage(role="system", content=_SYSTEM_PROMPT),
        ChatMessage(role="user", content=prompt),
    ]


def _max_suggestions() -> int:
    return int(get_scoring_value("resume.max_suggestions", 5))


def parse_analysis(raw: str) -> ResumeAnalysis | MalformedUpstreamResponse:
    """Strict stage: the whole output must be the expected JSON object."""
    try:
        payload = AIAnalysisPayload.model_validate_json(raw)
    except PydanticValidationError as exc:
        return MalformedUpstreamResponse(f"AI output failed schema validation: {exc.error_count()} error(s)", raw=raw)
    return ResumeAnalysis(
        ats_score=clamp_score(payload.ats_score),
        suggestions=payload.suggestions[: _max_suggestions()],
        missing_keywords=payload.missing_keywords,
        strengths=payload.strengths,
        source="ai",
    )


def recover_analysis(raw: str) -> ResumeAnalysis | None:
    """Secondary stage: pull just the score out of otherwise unusable output."""
    match = _SCORE_RE.search(raw or "")
    if not match:
        return None
    return ResumeAnalysis(
        ats_score=clamp_score(float(match.group(1))),
        suggestions=_RECOVERED_SUGGESTIONS[: _max_suggestions()],
        missing_keywords=list(_GENERIC_MISSING_KEYWORDS),
        strengths=list(_RECOVERED_STRENGTHS),
        source="recovered",
    )


def match_vocabulary(job_description: str, vocabulary: Sequence[str] | None = None) -> list[str]:
    """Vocabulary terms found in the job description, lowercased, in order of first appearance."""
    terms = tuple(vocabulary or get_scoring_value("resume.fallback.vocabulary", _DEFAULT_VOCABULARY))
    if not job_description or not terms:
        return []
    pattern = re.compile(r"\b(" + "|".join(re.escape(term) for term in terms) + r")\b", re.IGNORECASE)
    found: list[str] = []
    for hit in pattern.findall(job_description):
        term = hit.lower()
        if term not in found:
            found.append(term)
    return found


def fallback_score_bounds(has_job_description: bool) -> tuple[int, int]:
    key = "with_job_description" if has_job_description else "without_job_description"
    default = (75, 94) if has_job_description else (70, 94)
    bounds = get_scoring_value(f"resume.fallback.{key}", list(default))
    low, high = int(bounds[0]), int(bounds[1])
    if low > high:
        low, high = high, low
    return clamp_score(low), clamp_score(high)


class ResumeScorer:
    def __init__(
        self,
        client: AIClient | None,
        *,
        timeout_s: float,
        rng: random.Random | None = None,
    ):
        self._client = client
        self._timeout_s = timeout_s
        self._rng = rng or random.Random()

    async def score(self, resume_text: str, job_description: str | None = None) -> ResumeAnalysis:
        jd = (job_description or "").strip()

        if self._client is None:
            return self.fallback(jd, reason="missing_credential")

        try:
            raw = await asyncio.wait_for(
                self._client.complete(build_messages(resume_text, jd)),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("resume_ai_timeout timeout_s=%s", self._timeout_s)
            return self.fallback(jd, reason="timeout")
        except Exception as exc:  # noqa: BLE001 - every AI failure ends in the fallback
            logger.warning("resume_ai_failed: %s", exc)
            return self.fallback(jd, reason="ai_error")

        if not raw or not raw.strip():
            return self.fallback(jd, reason="empty_response")

        parsed = parse_analysis(raw)
        if isinstance(parsed, ResumeAnalysis):
            logger.info("resume_scored source=ai score=%s", parsed.ats_score)
            return parsed

        logger.info("resume_ai_malformed raw_len=%s: %s", len(raw), parsed)
        recovered = recover_analysis(raw)
        if recovered is not None:
            logger.info("resume_scored source=recovered score=%s", recovered.ats_score)
            return recovered

        return self.fallback(jd, reason="unparseable")

    def fallback(self, job_description: str, *, reason: str) -> ResumeAnalysis:
        has_jd = len(job_description) > 0
        keywords = match_vocabulary(job_description) if has_jd else []
        limit = int(get_scoring_value("resume.fallback.max_missing_keywords", 4))
        low, high = fallback_score_bounds(has_jd)

        if has_jd and keywords:
            missing = keywords[:limit]
        else:
            missing = list(get_scoring_value("resume.fallback.default_missing_keywords", _GENERIC_MISSING_KEYWORDS))

        suggestions = [
            "Align your skills more closely with the job requirements"
            if has_jd
            else "Add more technical keywords to improve ATS compatibility",
            "Include quantifiable achievements (e.g., 'Improved performance by 30%')",
            "Use action verbs to start each bullet point (Built, Developed, Implemented)",
            "Add a professional summary section at the top",
            "Include relevant certifications and technical skills section",
        ]
        strengths = [
            "Clear professional experience section",
            "Good use of technical terminology",
            "Well-structured education background",
            "Shows relevant experience for the target role" if has_jd else "Demonstrates technical competency",
        ]

        analysis = ResumeAnalysis(
            ats_score=clamp_score(self._rng.randint(low, high)),
            suggestions=suggestions[: _max_suggestions()],
            missing_keywords=missing,
            strengths=strengths,
            source="fallback",
        )
        logger.info(
            "resume_scored source=fallback reason=%s score=%s has_jd=%s",
            reason,
            analysis.ats_score,
            has_jd,
        )
        return analysis
