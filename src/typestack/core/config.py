"""Configuration management for the font-stack typography system."""

from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigurationError,
    EmptyConfigFileError,
    InvalidYamlError,
)
from .models import ExportOptions

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TypographySettings(BaseSettings):
    """Document-level typography defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TYPOGRAPHY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_font_size: float = Field(60.0, gt=0.0, description="Base font size in px")
    line_height: float = Field(1.2, gt=0.0, description="Base line height")
    base_font_weight: int = Field(400, ge=1, le=1000, description="Requested body weight")
    global_fallback_scale: float = Field(
        100.0, gt=0.0, description="Default scale (percent) for fallback fonts"
    )
    default_primary_language: str = Field(
        "en-US", min_length=1, description="Primary language used when none is configured"
    )
    fallback_family: str = Field(
        "sans-serif", min_length=1, description="Generic family closing every stack"
    )


class CSSExportSettings(BaseSettings):
    """Stylesheet export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CSS_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    include_font_face: bool = Field(False, description="Emit @font-face rules")
    use_css_variables: bool = Field(True, description="Emit :root custom properties")
    include_comments: bool = Field(True, description="Emit comments")
    pretty_print: bool = Field(True, description="Keep newlines and indentation")
    app_name: str = Field("Localize Type", description="Name written in the header comment")

    def to_options(self) -> ExportOptions:
        return ExportOptions(
            include_font_face=self.include_font_face,
            use_css_variables=self.use_css_variables,
            include_comments=self.include_comments,
            pretty_print=self.pretty_print,
        )


class ParserSettings(BaseSettings):
    """Font file parsing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_workers: int = Field(4, ge=1, le=64, description="Parallel parse workers")
    max_file_bytes: int = Field(
        50 * 1024 * 1024, gt=0, description="Largest font file accepted"
    )


class AppConfig(BaseSettings):
    """Main application configuration that loads from multiple sources."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Application log level")

    typography: TypographySettings = Field(default_factory=TypographySettings)
    css_export: CSSExportSettings = Field(default_factory=CSSExportSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def load_from_env(cls, env_file: str | Path | None = ".env") -> "AppConfig":
        """Load configuration from environment variables and .env file."""
        if env_file:
            env_file = Path(env_file)
            if env_file.exists():
                return cls(_env_file=env_file)
        return cls()


def load_config_from_yaml(config_path: str | Path, config_class: type) -> BaseSettings:
    """Load configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(str(config_path))

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidYamlError(str(config_path), str(e)) from e

    if config_data is None:
        raise EmptyConfigFileError(str(config_path))

    try:
        if issubclass(config_class, BaseSettings):
            # YAML values win; do not read .env for this instance
            class TempConfig(config_class):
                model_config = SettingsConfigDict(
                    env_file=None,
                    case_sensitive=False,
                    extra="ignore",
                )

            return TempConfig(**config_data)
        return config_class(**config_data)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigLoadError(str(e)) from e


def _add_yaml_methods():
    """Add YAML loading methods to configuration classes."""

    @classmethod
    def from_yaml(cls, config_path: str | Path):
        """Load configuration from YAML file."""
        return load_config_from_yaml(config_path, cls)

    @classmethod
    def from_env_and_yaml(cls, yaml_path: str | Path | None = None, env_file: str = ".env"):
        """Load configuration from environment variables and optionally override with YAML."""
        if yaml_path and Path(yaml_path).exists():
            return cls.from_yaml(yaml_path)
        return cls(_env_file=env_file if Path(env_file).exists() else None)

    for config_class in [
        TypographySettings,
        CSSExportSettings,
        ParserSettings,
        AppConfig,
    ]:
        config_class.from_yaml = from_yaml
        config_class.from_env_and_yaml = from_env_and_yaml


_add_yaml_methods()
