"""
Exporter configuration.

Values come from the environment (optionally through a .env file) or from
a YAML/JSON file, and are frozen once loaded.
"""

import os
import re
import json
import logging
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

ENV_COLLECTOR_HOST = "CUBE_COLLECTOR_HOST"
ENV_COLLECTOR_PORT = "CUBE_COLLECTOR_PORT"
ENV_EXPORT_INTERVAL = "CUBE_EXPORT_INTERVAL"
ENV_EXPORT_ENABLED = "CUBE_EXPORT"
ENV_REQUEST_TIMEOUT = "CUBE_REQUEST_TIMEOUT"

_ENV_FIELDS = {
    ENV_COLLECTOR_HOST: "collector_host",
    ENV_COLLECTOR_PORT: "collector_port",
    ENV_EXPORT_INTERVAL: "export_interval",
    ENV_EXPORT_ENABLED: "enabled",
    ENV_REQUEST_TIMEOUT: "request_timeout",
}

PUT_PATH = "/1.0/event/put"

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_TERM = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


class ConfigurationError(ValueError):
    """The exporter cannot start with the given configuration."""


def parse_duration(text: str) -> float:
    """
    Parse a duration string such as '10s', '1m30s', '1.5h' or '300ms' into seconds.

    A duration is an optional sign followed by one or more decimal numbers,
    each with a unit suffix. '0' is accepted on its own.
    """
    if not isinstance(text, str) or not text:
        raise ConfigurationError(f"Invalid duration {text!r}")

    rest = text
    sign = 1.0
    if rest[0] in "+-":
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]

    if rest == "0":
        return 0.0
    if not rest:
        raise ConfigurationError(f"Invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_TERM.match(rest, pos)
        if not match:
            raise ConfigurationError(f"Invalid duration {text!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    return sign * total


def parse_interval(text: str) -> float:
    """Parse an export interval, which must be a positive duration."""
    seconds = parse_duration(text)
    if seconds <= 0:
        raise ConfigurationError(f"Export interval must be positive, got {text!r}")
    return seconds


class ExportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    collector_host: str = "localhost"
    collector_port: int = Field(1080, ge=1, le=65535)
    export_interval: str = "10s"
    enabled: bool = True
    request_timeout: float = Field(10.0, gt=0)

    @property
    def put_url(self) -> str:
        return f"http://{self.collector_host}:{self.collector_port}{PUT_PATH}"

    @property
    def interval_seconds(self) -> float:
        return parse_interval(self.export_interval)

    @classmethod
    def build(cls, **values: Any) -> "ExportConfig":
        """Build a config, turning validation failures into ConfigurationError."""
        values = {k: v for k, v in values.items() if v is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid exporter configuration: {e}") from e

    @classmethod
    def from_env(cls, dotenv: bool = True, **overrides: Any) -> "ExportConfig":
        """Load settings from CUBE_* environment variables; explicit overrides win."""
        if dotenv:
            load_dotenv()

        values: Dict[str, Any] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            value = os.getenv(env_name)
            if value is not None and value != "":
                values[field_name] = value

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)

    @classmethod
    def from_file(cls, path: str, **overrides: Any) -> "ExportConfig":
        """Load settings from a YAML or JSON mapping keyed by field name."""
        if not os.path.exists(path):
            raise ConfigurationError(f"Config file '{path}' not found")

        try:
            with open(path) as f:
                if path.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not parse config file '{path}': {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file '{path}' must contain a mapping")

        data.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Loaded exporter configuration from {path}")
        return cls.build(**data)
