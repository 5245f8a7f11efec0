# Assumptions:
# - Configuration management using environment variables
# - Pydantic Settings for validation
# - Defaults mirror what a browser-side client would send

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpClientSettings(BaseSettings):
    """HTTP client settings"""

    model_config = SettingsConfigDict(
        env_prefix="SSRHTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Library defaults
    timeout: float = 30.0
    accept: str = "application/json, text/plain, */*"
    user_agent: str | None = None

    # Logging
    service_name: str = "ssrhttp"
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"


@lru_cache()
def get_settings() -> HttpClientSettings:
    """Get HTTP client settings singleton"""
    return HttpClientSettings()
