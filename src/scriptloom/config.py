"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `SCRIPTLOOM_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ScriptLoom settings.

    All fields are environment-configurable. Prefix is `SCRIPTLOOM_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTLOOM_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = Field(default="INFO")

    # Text editor synchronization
    # Quiescence window applied to raw-text edits before they are validated and rebuilt
    debounce_ms: int = Field(default=500, ge=0, le=60000)
    text_indent: int = Field(default=4, ge=0, le=8)

    # Identities
    identity_prefix: str = Field(default="action_", min_length=1)

    # Schema catalog (JSON file); the built-in catalog is used when unset
    catalog_path: Path | None = Field(default=None)

    # Change journal (JSONL); disabled when unset
    journal_dir: Path | None = Field(default=None)

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000.0


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("SCRIPTLOOM_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
