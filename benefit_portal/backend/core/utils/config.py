"""
Configuration Loading Utilities.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = "configs/default_config.yaml"

REQUIRED_SECTIONS = ("database", "session", "uploads", "cors", "seed")


class DatabaseSettings(BaseModel):
    url: str = "sqlite:///./benefit_portal.db"
    echo: bool = False


class SessionSettings(BaseModel):
    secret: str = "change-me"
    max_age_seconds: int = 60 * 60 * 24
    cookie_name: str = "portal_session"


class UploadSettings(BaseModel):
    directory: str = "uploads"
    max_bytes: int = 10 * 1024 * 1024
    allowed_extensions: list[str] = Field(default=["png", "jpg", "jpeg", "gif", "pdf"])


class CorsSettings(BaseModel):
    origins: list[str] = Field(default=["http://localhost:5173", "http://localhost:3000"])


class SeedSettings(BaseModel):
    enabled: bool = True
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"


class PortalSettings(BaseModel):
    """Validated runtime settings for the API, CLI and seeding."""

    database: DatabaseSettings = DatabaseSettings()
    session: SessionSettings = SessionSettings()
    uploads: UploadSettings = UploadSettings()
    cors: CorsSettings = CorsSettings()
    seed: SeedSettings = SeedSettings()

    @property
    def upload_dir(self) -> Path:
        return Path(self.uploads.directory)


def load_config(config_path: str) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    # Validate required sections
    for section in REQUIRED_SECTIONS:
        if config.get(section) is None:
            config[section] = {}

    return config


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Let deployment environment variables win over the YAML file."""
    if url := os.getenv("DATABASE_URL"):
        config["database"]["url"] = url
    if secret := os.getenv("SESSION_SECRET"):
        config["session"]["secret"] = secret
    if upload_dir := os.getenv("UPLOAD_DIR"):
        config["uploads"]["directory"] = upload_dir
    if origins := os.getenv("CORS_ORIGINS"):
        config["cors"]["origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    return config


def get_settings(config_path: str | None = None) -> PortalSettings:
    """
    Build :class:`PortalSettings` from YAML plus environment overrides.

    The path falls back to ``$PORTAL_CONFIG`` and then the shipped default
    config. A missing default file is not an error: built-in defaults apply.
    """
    path = config_path or os.getenv("PORTAL_CONFIG") or DEFAULT_CONFIG_PATH
    try:
        config = load_config(path)
    except FileNotFoundError:
        if config_path:
            raise
        config = {section: {} for section in REQUIRED_SECTIONS}

    return PortalSettings.model_validate(_apply_env_overrides(config))
