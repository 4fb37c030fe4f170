"""
Settings management.

Loads scanner and reporting settings from a YAML file and applies
environment overrides on top of it.

Expected YAML format:
```yaml
scan:
  walk_workers: 8
  check_workers: 1
  queue_size: 1024

origins:
  image: [0x33, 0x34, 0x37, 0x38, 0x42, 0x43, 0x44, 0x45, 0x46, 0x47]
  science: [0x35, 0x36, 0x39, 0x40, 0x41, 0x51]

logging:
  level: INFO
  format: json

report:
  format: column
  time_format: rfc3339
```
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from upifinder.core.decoder.origins import IMAGE_ORIGINS, SCIENCE_ORIGINS, OriginTable
from upifinder.utils.validation import ConfigurationError

ENV_PREFIX = "UPIFINDER_"
CONFIG_ENV = ENV_PREFIX + "CONFIG"

# environment variable -> (section, key)
ENV_OVERRIDES = {
    "WALK_WORKERS": ("scan", "walk_workers"),
    "CHECK_WORKERS": ("scan", "check_workers"),
    "QUEUE_SIZE": ("scan", "queue_size"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "FORMAT": ("report", "format"),
    "TIME_FORMAT": ("report", "time_format"),
}


class ScanSettings(BaseModel):
    """Scanner concurrency settings."""

    walk_workers: int = Field(8, ge=1)
    check_workers: int = Field(1, ge=1)
    queue_size: int = Field(1024, ge=1)


class OriginSettings(BaseModel):
    """Accepted origin codes per class of product."""

    image: list[int] = Field(default_factory=lambda: list(IMAGE_ORIGINS))
    science: list[int] = Field(default_factory=lambda: list(SCIENCE_ORIGINS))

    @field_validator("image", "science")
    @classmethod
    def check_codes(cls, v):
        """Validate that every code fits a signed 8-bit source field."""
        for code in v:
            if not 0 <= code <= 0x7F:
                raise ValueError(f"origin code {code} out of range")
        return sorted(set(v))

    @model_validator(mode="after")
    def check_disjoint(self):
        """Validate that no code is listed in both tables."""
        overlap = set(self.image) & set(self.science)
        if overlap:
            raise ValueError(f"origin codes listed as both image and science: {sorted(overlap)}")
        return self

    def table(self) -> OriginTable:
        return OriginTable(image=self.image, science=self.science)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "json"

    @field_validator("level", "format", mode="before")
    @classmethod
    def normalize_case(cls, v, info):
        if isinstance(v, str):
            return v.upper() if info.field_name == "level" else v.lower()
        return v


class ReportSettings(BaseModel):
    format: Literal["column", "summary", "csv", "json"] = "column"
    time_format: Literal["rfc3339", "unix", "gps"] = "rfc3339"


class AuditSettings(BaseModel):
    """
    Complete upifinder settings.

    Attributes:
        scan: Worker counts and queue bound of the archive scanner
        origins: Accepted origin codes
        logging: Log level and format
        report: Default output and time formats
    """

    scan: ScanSettings = Field(default_factory=ScanSettings)
    origins: OriginSettings = Field(default_factory=OriginSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)

    class Config:
        json_schema_extra = {
            "example": {
                "scan": {"walk_workers": 8, "check_workers": 1, "queue_size": 1024},
                "origins": {"image": [0x33, 0x34], "science": [0x39, 0x40]},
                "logging": {"level": "INFO", "format": "json"},
                "report": {"format": "column", "time_format": "rfc3339"},
            }
        }


class SettingsLoader:
    """
    Loads AuditSettings from a YAML file and the environment.

    Usage:
        settings = SettingsLoader("upifinder.yaml").load()
    """

    def __init__(self, config_path: str | Path | None = None, environ: dict[str, str] | None = None):
        """
        Initialize the settings loader.

        Args:
            config_path: Path to the YAML file (falls back to UPIFINDER_CONFIG, then defaults)
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        path = config_path or self.environ.get(CONFIG_ENV)
        self.config_path = Path(path) if path else None
        if self.config_path is not None and not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

    def load(self) -> AuditSettings:
        """
        Load settings.

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If the YAML is malformed or a value is invalid
        """
        data = self._read_file()
        for name, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(ENV_PREFIX + name)
            if value:
                data.setdefault(section, {})[key] = value

        try:
            return AuditSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e

    def _read_file(self) -> dict[str, Any]:
        if self.config_path is None:
            return {}
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")
        for section, values in config.items():
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{section}' in {self.config_path} must be a mapping")
        return config


def load_settings(config_path: str | Path | None = None) -> AuditSettings:
    """
    Load settings the way the CLI does: YAML file, then UPIFINDER_* variables.

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    return SettingsLoader(config_path).load()
