"""Configuration using Pydantic Settings v2.

Loads configuration from environment variables (prefix ``SEMFLOW_``) with
.env file support. All settings are validated on first access and
available as typed attributes.
"""

from __future__ import annotations

import functools
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """semflow settings.

    Configuration is loaded from environment variables.
    A .env file in the working directory is also read if present.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEMFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = "INFO"

    # ── Enrichment ───────────────────────────────────────────────
    # Origin of annotation indices stored in the ontology (slot selection
    # and function argument positions).
    index_origin: int = 0
    # What to do with a raw wire whose port vanished during expansion.
    dangling_wire_policy: Literal["drop", "raise"] = "drop"
    # Type semantic ports with full SemanticElem values instead of bare obs.
    elements: bool = True

    # ── Ontology ─────────────────────────────────────────────────
    ontology_path: str | None = None

    @field_validator("index_origin")
    @classmethod
    def check_index_origin(cls, v: int) -> int:
        """Only origin 0 and origin 1 conventions are meaningful."""
        if v not in (0, 1):
            raise ValueError(f"index_origin must be 0 or 1, got {v}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()


@functools.lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
