from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    store_path: str
    store_read_timeout_s: float
    seed_on_startup: bool
    jwt_secret: str
    jwt_algorithm: str
    openai_api_key: str | None
    openai_base_url: str | None
    ai_model: str
    ai_timeout_s: float
    openai_max_retries: int
    resume_analysis_delay_s: float
    resume_max_upload_bytes: int
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    debug: bool
    cors_allowed_origins: tuple[str, ...]


def load_settings() -> Settings:
    return Settings(
        store_path=_get_env("STORE_PATH", "data/careercoach.db") or "data/careercoach.db",
        store_read_timeout_s=_get_env_float("STORE_READ_TIMEOUT_S", 3.0),
        seed_on_startup=_get_env_bool("SEED_ON_STARTUP", True),
        jwt_secret=(_get_env("JWT_SECRET", "") or "").strip(),
        jwt_algorithm=(_get_env("JWT_ALGORITHM", "HS256") or "HS256").strip(),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        ai_model=(_get_env("AI_MODEL", "gpt-4o-mini") or "gpt-4o-mini").strip(),
        ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 12.0),
        openai_max_retries=_get_env_int("OPENAI_MAX_RETRIES", 1),
        resume_analysis_delay_s=_get_env_float("RESUME_ANALYSIS_DELAY_S", 0.0),
        resume_max_upload_bytes=_get_env_int("RESUME_MAX_UPLOAD_BYTES", 5 * 1024 * 1024),
        rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        debug=_get_env_bool("DEBUG", False),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:5173",
            ],
        ),
    )


_MIN_JWT_SECRET_BYTES = 32


def validate_settings(cfg: Settings) -> Settings:
    if cfg.store_read_timeout_s <= 0:
        raise RuntimeError("STORE_READ_TIMEOUT_S must be a positive number of seconds.")

    if cfg.ai_timeout_s <= 0:
        raise RuntimeError("AI_TIMEOUT_S must be a positive number of seconds.")

    if cfg.jwt_algorithm not in {"HS256", "HS384", "HS512"}:
        raise RuntimeError("JWT_ALGORITHM must be one of HS256, HS384, HS512.")

    if not cfg.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set; tokens cannot be verified without it.")

    if len(cfg.jwt_secret.encode("utf-8")) < _MIN_JWT_SECRET_BYTES:
        raise RuntimeError(f"JWT_SECRET must be at least {_MIN_JWT_SECRET_BYTES} bytes long.")

    return cfg


settings = validate_settings(load_settings())
