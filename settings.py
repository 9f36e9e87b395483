"""Configuration for the cover studio service."""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_ANALYSIS_MODEL = "google/gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "google/gemini-3-pro-image-preview"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Explicit service configuration.

    Built once at startup and handed to each component, so request handlers
    never read or mutate process environment.
    """

    api_key: Optional[str] = None
    offline_mode: bool = False
    base_url: str = DEFAULT_BASE_URL
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    image_size: str = "2048x2048"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 20 * 1024 * 1024
    request_timeout: float = 120.0
    keep_uploads: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    static_dir: str = "public"
    host: str = "0.0.0.0"
    port: int = 3000

    def __post_init__(self):
        # No credential means there is nothing to call
        if not self.api_key and not self.offline_mode:
            object.__setattr__(self, "offline_mode", True)

    @property
    def max_upload_mb(self) -> int:
        return self.max_upload_bytes // (1024 * 1024)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from environment variables."""
        env = os.environ if environ is None else environ

        api_key = env.get("OPENROUTER_API_KEY") or env.get("GOOGLE_API_KEY") or None
        cors_origin = env.get("CORS_ORIGIN") or env.get(
            "ALLOWED_ORIGINS", "http://localhost:3000"
        )

        return cls(
            api_key=api_key,
            offline_mode=_flag(env.get("USE_FAKE_ANALYSIS")),
            base_url=env.get("AI_BASE_URL", DEFAULT_BASE_URL),
            analysis_model=env.get("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL),
            image_model=env.get("IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            image_size=env.get("COVER_IMAGE_SIZE", "2048x2048"),
            upload_dir=env.get("UPLOAD_DIR", "uploads"),
            max_upload_bytes=int(env.get("MAX_UPLOAD_MB", "20")) * 1024 * 1024,
            request_timeout=float(env.get("REQUEST_TIMEOUT_SECONDS", "120")),
            keep_uploads=_flag(env.get("KEEP_UPLOADS")),
            cors_origins=[origin.strip() for origin in cors_origin.split(",")],
            static_dir=env.get("STATIC_DIR", "public"),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
        )
