"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from bintext.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("~/.bintext/config.yaml")


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.bintext/config.yaml (default location)
    3. Empty dict if no file exists

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH.expanduser()

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        if "conversion" in yaml_data:
            conversion = yaml_data["conversion"]
            if "chunk_size" in conversion:
                flattened["chunk_size"] = conversion["chunk_size"]
            if "delimiter" in conversion:
                flattened["delimiter"] = conversion["delimiter"]
            if "output_encoding" in conversion:
                flattened["output_encoding"] = conversion["output_encoding"]

        if "logging" in yaml_data:
            logging = yaml_data["logging"]
            if "level" in logging:
                flattened["log_level"] = logging["level"]
            if "format" in logging:
                flattened["log_format"] = logging["format"]

        return flattened

    except Exception as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that loads configuration from YAML file.

    This allows YAML config to be loaded with proper priority in the settings chain.
    """

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        return load_yaml_config(_config_path)


class Settings(BaseSettings):
    """
    bintext configuration settings.

    Configuration priority (highest to lowest):
    1. Environment variables (e.g., BINTEXT_CHUNK_SIZE=4)
    2. YAML configuration file (~/.bintext/config.yaml)
    3. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="BINTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(
        default=1, ge=1, description="Default chunk size in bytes"
    )
    delimiter: str = Field(
        default="", description="Default delimiter written after full chunks"
    )
    output_encoding: str = Field(
        default="utf-8", description="Text encoding of the destination file"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text", description="Log format"
    )

    @field_validator("output_encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Ensure the output encoding is known to Python."""
        import codecs

        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown output encoding: {v}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - for testing and programmatic config
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Configuration loading order (highest to lowest priority):
    1. Environment variables (e.g., BINTEXT_CHUNK_SIZE=4)
    2. YAML configuration file (~/.bintext/config.yaml)
    3. .env file
    4. Default values defined in Settings class

    Args:
        config_path: Optional path to YAML config file (defaults to ~/.bintext/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration

    Raises:
        ConfigurationError: If a source provides an invalid value
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        try:
            _settings = Settings()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                config_path=str(config_path) if config_path else None,
            ) from e
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings, _config_path
    _settings = None
    _config_path = None
