from __future__ import annotations

import logging
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Layout configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TIMELINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_title: str = Field(default="Timeline Layout API", description="FastAPI application title")
    app_description: str = Field(
        default="Computes grouped, overlap-free timeline layouts for rendering clients",
        description="OpenAPI description",
    )
    allowed_origins: str = Field(
        default="*",
        description="Comma separated list of origins allowed by CORS",
    )
    log_level: str = Field(
        default="INFO",
        description="Application log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)",
    )
    enable_request_logging: bool = Field(
        default=True,
        description="Log every handled request",
    )
    cell_height: int = Field(
        default=40,
        ge=1,
        le=400,
        description="Height in pixels of one column row inside a group band",
    )
    group_gap: int = Field(
        default=16,
        ge=0,
        le=400,
        description="Vertical gap in pixels placed above every group band",
    )
    sidebar_width: int = Field(
        default=200,
        ge=0,
        le=2_000,
        description="Width in pixels of the group label rail",
    )
    zoom_owner: Literal["engine", "caller"] = Field(
        default="engine",
        description="engine: the service keeps the active zoom level; caller: every request names it",
    )
    invalid_item_policy: Literal["reject", "drop"] = Field(
        default="reject",
        description="What to do with malformed items: reject the whole input or drop them with a diagnostic",
    )

    @property
    def origins(self) -> List[str]:
        raw = self.allowed_origins.strip()
        if not raw or raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        candidate = value.upper()
        if candidate not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            logging.getLogger("timeline_layout.settings").warning(
                "Unknown log level '%s', falling back to INFO.", value
            )
            return "INFO"
        return candidate


settings = Settings()
