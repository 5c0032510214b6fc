"""gleaner configuration settings using Pydantic.

Values come from ``GLEANER_*`` environment variables or a ``.env`` file.
Filter and compat-version rules live in a separate property table, loaded by
:func:`load_properties` from an optional YAML file plus ``-D`` overrides.
"""

from pathlib import Path
from typing import Literal, Mapping

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gleaner.utils import ConfigurationError


class GleanerSettings(BaseSettings):
    """Central configuration for a gleaner run."""

    model_config = SettingsConfigDict(
        env_prefix="GLEANER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # --- Output ---
    output_file: Path | None = None
    namespace: str = ""

    # --- Build ---
    goals: list[str] = Field(default_factory=lambda: ["verify"])
    repository: Path = Field(default_factory=lambda: Path.home() / ".m2" / "repository")

    # --- Rules ---
    properties_file: Path | None = None

    # --- Logging ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def load_properties(
    properties_file: Path | str | None = None,
    overrides: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge a YAML property file with explicit overrides (overrides win).

    The file must hold a flat mapping, e.g.::

        gleaner.filter.01: 'junit:junit'
        gleaner.version.01: 'org\\.ow2\\.asm:.*=9'
    """
    properties: dict[str, str] = {}
    if properties_file is not None:
        path = Path(properties_file)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read property file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Property file {path} must contain a mapping")
        properties.update({str(key): str(value) for key, value in data.items()})
    if overrides:
        properties.update(overrides)
    return properties


# Singleton instance
settings = GleanerSettings()


def get_settings() -> GleanerSettings:
    """Return the module-level settings instance"""
    return settings
