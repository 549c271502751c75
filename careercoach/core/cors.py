from __future__ import annotations

from careercoach.core.config import settings


def cors_allowed_origins() -> list[str]:
    return [origin for origin in settings.cors_allowed_origins if origin != "*"] or ["*"]


def cors_allow_credentials() -> bool:
    # Browsers reject credentialed requests against a wildcard origin.
    return cors_allowed_origins() != ["*"]
