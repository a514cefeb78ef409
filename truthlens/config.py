"""Configuration management for TruthLens.

Uses pydantic-settings to load configuration from environment variables
(prefixed ``TRUTHLENS_``) and an optional ``.env`` file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRUTHLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # Environment
    # =========================
    environment: Literal["development", "staging", "production"] = "development"

    # =========================
    # Hosted model (Gemini)
    # =========================
    gemini_api_key: str = Field(default="", repr=False)
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_text_model: str = "gemini-3-flash-preview"
    gemini_image_model: str = "gemini-2.5-flash-image"
    gemini_timeout_seconds: float = 30.0
    gemini_max_retries: int = 2

    # =========================
    # Analysis
    # =========================
    analysis_sensitivity: Literal["low", "medium", "high"] = "medium"
    max_history: int = 10_000

    # =========================
    # Knowledge graph layout
    # =========================
    layout_width: float = 800.0
    layout_height: float = 600.0
    layout_max_ticks: int = 500
    layout_max_nodes: int = 150

    # =========================
    # Logging
    # =========================
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
