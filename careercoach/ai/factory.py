from __future__ import annotations

import logging

from careercoach.ai.config import load_ai_config
from careercoach.ai.providers.openai_provider import OpenAIProvider
from careercoach.ai.types import AIClient

logger = logging.getLogger(__name__)


def get_ai_client() -> AIClient | None:
    """Return the configured AI client, or None when no usable credential is set."""
    cfg = load_ai_config()
    if not cfg.api_key:
        logger.info("ai_client_disabled reason=missing_api_key")
        return None

    return OpenAIProvider(
        model=cfg.model,
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        timeout_s=cfg.timeout_s,
        max_retries=cfg.max_retries,
    )
