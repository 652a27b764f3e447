"""Config Loader - loads a RequestConfig from a YAML file.

Strings may reference environment variables as ${ENV_VAR}, so credentials
can stay out of the file:

    url: https://api.example.com/items?page=1
    username: ${API_USER}
    password: ${API_PASSWORD}
    timeout_ms: 5000
    proxy:
      url: http://proxy.internal:3128
    headers:
      User-Agent: request-builder
    values:
      q: widgets
      tag: [a, b]
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from request_builder.errors import RequestBuilderError
from request_builder.models import RequestConfig, RequestStoreSections

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(RequestBuilderError):
    """Raised when configuration loading fails."""


def load_request_config(config_path: Path) -> RequestConfig:
    """Load a request configuration from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    return build_request_config(_expand_env(raw_config))


def build_request_config(raw_config: dict[str, Any]) -> RequestConfig:
    """Validate a config mapping and fill the header/value stores."""
    raw_config = dict(raw_config)
    raw_sections = {
        key: raw_config.pop(key) for key in ("headers", "values") if key in raw_config
    }

    try:
        sections = RequestStoreSections.model_validate(raw_sections)
        config = RequestConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e

    for name, value in sections.headers.items():
        config.header().add(name, value)

    for name, value in sections.values.items():
        items = value if isinstance(value, list) else [value]
        for item in items:
            config.values().add(name, item)

    return config


def _expand_env(node: Any, where: str = "") -> Any:
    """Return node with every ${NAME} in its strings replaced from os.environ.

    where is the dotted key path of node, used to say which setting
    referenced a missing variable.
    """
    if isinstance(node, dict):
        return {
            key: _expand_env(value, f"{where}.{key}" if where else str(key))
            for key, value in node.items()
        }
    if isinstance(node, list):
        return [_expand_env(item, f"{where}[{i}]") for i, item in enumerate(node)]
    if not isinstance(node, str):
        return node

    missing = [name for name in _ENV_VAR_PATTERN.findall(node) if name not in os.environ]
    if missing:
        raise ConfigError(
            f"{where or 'config'}: environment variable(s) not set: {', '.join(missing)}"
        )
    return _ENV_VAR_PATTERN.sub(lambda match: os.environ[match.group(1)], node)
