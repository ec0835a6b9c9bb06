"""Configuration file loading for the uptime monitor."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the config file is missing or malformed."""


class MonitorConfig(BaseModel):
    """Endpoints to probe plus webhook notification settings."""

    slack_url: str = Field(default="", description="Incoming webhook URL; empty disables alerting")
    slack_msg: str = Field(default="", description="Suffix appended to every alert message")
    email: str = Field(default="", description="Contact address (informational only)")
    servers: list[str] = Field(..., description="Endpoint URLs, checked in this order")

    @field_validator("slack_url", "slack_msg", "email", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("servers")
    @classmethod
    def _servers_not_empty(cls, value: list[str]) -> list[str]:
        servers = [s.strip() for s in value if s and s.strip()]
        if not servers:
            raise ValueError("servers must be a non-empty list of URLs")
        return servers


def load_config(path: Path | str) -> MonitorConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    try:
        return MonitorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
