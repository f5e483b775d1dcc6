from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(slots=True)
class Settings:
    app_name: str = "genai-mock"
    port: int = 3000
    log_level: str = "INFO"
    mock_delay_ms: int = 100
    enable_streaming: bool = True
    default_model: str = "gemini-1.5-pro"
    cors_origin: str = "*"
    enforce_project_id: str | None = None
    enforce_location: str | None = None
    default_project_id: str = "mock-project"
    default_location: str = "us-central1"
    include_safety_ratings: bool = True
    include_usage_metadata: bool = True
    default_system_instructions: bool = True
    batch_max_concurrency: int = 10
    batch_timeout_seconds: float = 300.0
    cache_sweep_interval_seconds: float = 60.0
    max_upload_bytes: int = 10 * 1024 * 1024
    random_seed: int | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        seed = _env_optional("MOCK_RANDOM_SEED")
        return cls(
            app_name=os.getenv("APP_NAME", "genai-mock"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            mock_delay_ms=int(os.getenv("MOCK_DELAY_MS", "100")),
            enable_streaming=_env_flag("ENABLE_STREAMING", True),
            default_model=os.getenv("DEFAULT_MODEL", "gemini-1.5-pro"),
            cors_origin=os.getenv("CORS_ORIGIN", "*"),
            enforce_project_id=_env_optional("GOOGLE_CLOUD_ENFORCE_PROJECT_ID"),
            enforce_location=_env_optional("GOOGLE_CLOUD_ENFORCE_LOCATION"),
            default_project_id=os.getenv("GOOGLE_CLOUD_DEFAULT_PROJECT_ID", "mock-project"),
            default_location=os.getenv("GOOGLE_CLOUD_DEFAULT_LOCATION", "us-central1"),
            include_safety_ratings=_env_flag("INCLUDE_SAFETY_RATINGS", True),
            include_usage_metadata=_env_flag("INCLUDE_USAGE_METADATA", True),
            default_system_instructions=_env_flag("DEFAULT_SYSTEM_INSTRUCTIONS", True),
            batch_max_concurrency=int(os.getenv("BATCH_MAX_CONCURRENCY", "10")),
            batch_timeout_seconds=float(os.getenv("BATCH_TIMEOUT_SECONDS", "300")),
            cache_sweep_interval_seconds=float(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", "60")),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            random_seed=int(seed) if seed is not None else None,
        )

    @property
    def mock_delay_seconds(self) -> float:
        return max(self.mock_delay_ms, 0) / 1000.0
