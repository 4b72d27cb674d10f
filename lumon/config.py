"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class ConfigError(ValueError):
    pass


class DDCSettings(BaseModel):
    """ddcutil backend settings."""

    ddcutil: str = Field(default="ddcutil", description="ddcutil executable")
    retries: int = Field(default=2, ge=0, le=5)
    command_timeout: float = Field(default=10.0, ge=1.0, le=60.0)
    skip_models: list[str] = Field(default_factory=lambda: ["Generic PnP Monitor"])


class MemoryDisplay(BaseModel):
    """A display served by the in-memory backend."""

    id: str
    name: str
    brightness: int = Field(default=50, ge=0, le=100)


class MemorySettings(BaseModel):
    """In-memory backend settings."""

    displays: list[MemoryDisplay] = Field(
        default_factory=lambda: [
            MemoryDisplay(id="mem-1", name="Built-in Display", brightness=70),
            MemoryDisplay(id="mem-2", name="External Display", brightness=50),
        ]
    )


class UISettings(BaseModel):
    """Console surface settings."""

    title: str = Field(default="Welcome to Lumon")
    step: int = Field(default=5, ge=5, le=50, multiple_of=5)


class AppSettings(BaseModel):
    """Process-wide settings."""

    log_level: str = Field(default="INFO")


class Settings(BaseSettings):
    """Root configuration combining all settings."""

    model_config = SettingsConfigDict(
        env_prefix="LUMON_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    backend: Literal["ddc", "memory"] = "ddc"
    ddc: DDCSettings = Field(default_factory=DDCSettings)
    memory: MemorySettings = Field(default_factory=MemorySettings)
    ui: UISettings = Field(default_factory=UISettings)
    app: AppSettings = Field(default_factory=AppSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs, env vars must win over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from env vars and optional YAML file.

        Priority: Environment variables override YAML file values.
        """
        if config_path is None:
            # Check default locations
            default_paths = [
                Path.home() / ".config" / "lumon" / "config.yaml",
                Path.home() / ".config" / "lumon" / "config.yml",
                Path("config.yaml"),
                Path("config.yml"),
            ]
            config_path = next((p for p in default_paths if p.exists()), None)

        yaml_data: dict = {}
        if config_path is not None and config_path.exists():
            try:
                with open(config_path) as f:
                    yaml_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(yaml_data, dict):
            raise ConfigError(f"Top-level config in {config_path} must be a mapping")

        # pydantic-settings overlays env vars on top of these
        return cls(**yaml_data)
