"""ASO_Scores - Application configuration via pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="ASO_", extra="ignore",
    )

    # Marketplace
    store: Literal["itunes", "gplay"] = Field(
        default="itunes", description="Marketplace adapter to use",
    )
    country: str = Field(default="us", description="Two-letter store country")
    lang: str = Field(default="en", description="Store language code")
    request_timeout: float = Field(
        default=10.0, description="HTTP timeout in seconds for store calls",
    )

    # Suggestions
    suggestion_count: int = Field(
        default=30, ge=1, description="Default number of suggested keywords",
    )

    # Monitoring
    log_level: str = Field(default="INFO", description="Logging level")
