"""Configuration management for Adilla."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path(__file__).parent.parent / "config"

PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400.png"


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///adilla.db"
    echo: bool = False


class IntakeConfig(BaseModel):
    # Substituted at persistence time when a listing has no image
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL


class GeneratorConfig(BaseModel):
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 400


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseModel):
    database: DatabaseConfig = DatabaseConfig()
    intake: IntakeConfig = IntakeConfig()
    generator: GeneratorConfig = GeneratorConfig()
    server: ServerConfig = ServerConfig()

    def public_dump(self) -> dict:
        """Config as a dict with secrets masked."""
        data = self.model_dump()
        if data["generator"]["api_key"]:
            data["generator"]["api_key"] = "***"
        return data


class AppSettings(BaseSettings):
    """Environment overrides, e.g. ADILLA_GENERATOR_API_KEY."""

    model_config = SettingsConfigDict(env_prefix="ADILLA_")

    database_url: Optional[str] = None
    generator_api_key: Optional[str] = None
    generator_base_url: Optional[str] = None
    generator_model: Optional[str] = None

    def overrides(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.database_url:
            result.setdefault("database", {})["url"] = self.database_url
        generator = {
            "api_key": self.generator_api_key,
            "base_url": self.generator_base_url,
            "model": self.generator_model,
        }
        generator = {k: v for k, v in generator.items() if v}
        if generator:
            result["generator"] = generator
        return result


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None, use_env: bool = True) -> AppConfig:
    """Load configuration from TOML files and the environment.

    Loads default.toml first, merges local.toml or a custom path on top,
    then applies ADILLA_* environment variables.
    """
    default_path = CONFIG_DIR / "default.toml"
    data: dict[str, Any] = {}

    if default_path.exists():
        with open(default_path, "rb") as f:
            data = tomllib.load(f)

    local_path = config_path or CONFIG_DIR / "local.toml"
    if local_path.exists():
        with open(local_path, "rb") as f:
            overrides = tomllib.load(f)
        data = _deep_merge(data, overrides)

    if use_env:
        data = _deep_merge(data, AppSettings().overrides())

    return AppConfig(**data)
