from __future__ import annotations

from dataclasses import dataclass

from careercoach.core.config import settings


@dataclass(frozen=True)
class AIConfig:
    api_key: str | None
    model: str
    base_url: str | None
    timeout_s: float
    max_retries: int


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def load_ai_config() -> AIConfig:
    key = (settings.openai_api_key or "").strip()
    if key and _looks_like_placeholder(key):
        key = ""
    return AIConfig(
        api_key=key or None,
        model=settings.ai_model,
        base_url=settings.openai_base_url,
        timeout_s=settings.ai_timeout_s,
        max_retries=settings.openai_max_retries,
    )
