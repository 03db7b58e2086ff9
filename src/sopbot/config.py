"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (SOPBOT__NOTION__API_KEY=secret_...)
  2. sopbot.yaml            (searched in cwd, then platform config dir)
  3. Hardcoded defaults

Credentials are normally supplied through the environment; everything else
has a sensible default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _find_config_file() -> str | None:
    """Return the path of the first sopbot.yaml found, or None."""
    candidates = [
        Path("sopbot.yaml"),
        Path(platformdirs.user_config_dir("sopbot")) / "sopbot.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class NotionSettings(BaseModel):
    api_key: str = ""
    base_url: str = "https://api.notion.com/v1"
    version: str = "2022-06-28"
    timeout_seconds: float = 30.0


class AnthropicSettings(BaseModel):
    # Empty means the SDK falls back to ANTHROPIC_API_KEY
    api_key: str = ""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024


class SlackSettings(BaseModel):
    bot_token: str = ""
    app_token: str = ""


class AssistantSettings(BaseModel):
    name: str = "SOP Assistant"
    organisation: str = "the company"
    # Name of the Notion integration users must share pages with
    integration_name: str = "SOP Bot"


class CacheSettings(BaseModel):
    ttl_minutes: int = 5


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: SOPBOT__CACHE__TTL_MINUTES=10
        env_prefix="SOPBOT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    notion: NotionSettings = NotionSettings()
    anthropic: AnthropicSettings = AnthropicSettings()
    slack: SlackSettings = SlackSettings()
    assistant: AssistantSettings = AssistantSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    def missing_credentials(self) -> list[str]:
        """Return the dotted names of required secrets that are not set."""
        required = {
            "notion.api_key": self.notion.api_key,
            "slack.bot_token": self.slack.bot_token,
            "slack.app_token": self.slack.app_token,
        }
        return [name for name, value in required.items() if not value]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
