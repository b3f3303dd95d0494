import os
from dataclasses import dataclass, field
from typing import List, Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_RAPIDAPI_HOST = "tiktok-video-downloader-api.p.rapidapi.com"


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _default_provider_url() -> str:
    host = os.getenv("RAPIDAPI_HOST", DEFAULT_RAPIDAPI_HOST)
    return os.getenv("PROVIDER_URL", f"https://{host}/media")


@dataclass(frozen=True)
class Settings:
    rapidapi_key: str = field(default_factory=lambda: os.getenv("RAPIDAPI_KEY", ""))
    rapidapi_host: str = field(default_factory=lambda: os.getenv("RAPIDAPI_HOST", DEFAULT_RAPIDAPI_HOST))
    provider_url: str = field(default_factory=_default_provider_url)
    # exact provider error strings meaning the upstream session expired
    session_error_messages: Tuple[str, ...] = field(
        default_factory=lambda: _csv(os.getenv("PROVIDER_SESSION_ERRORS", "Invalid Session"))
    )
    validate_urls: bool = field(default_factory=lambda: os.getenv("VALIDATE_TIKTOK_URLS", "1") != "0")
    cors_origins: Tuple[str, ...] = field(
        default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "http://localhost:3000"))
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def provider_configured(self) -> bool:
        return bool(self.rapidapi_key.strip())

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.provider_configured:
            missing.append("RAPIDAPI_KEY")
        return missing


settings = Settings()


def get_settings() -> Settings:
    return settings
