"""Layered settings manager (defaults + user + project + explicit file)."""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ValidationError
from ..apply.executor import RetryPolicy
from ..resources.base import ResourceTypePolicy
from ..utils.errors import ConfigurationError
from ..utils.logging import get_logger
from .paths import get_defaults_path, get_project_config_path, get_user_config_path

logger = get_logger("config.manager")

STATE_PATH_ENV = "INFRAGRAPH_STATE"


class StateSettings(BaseModel):
    path: str = Field(default="infragraph.state.json", description="State file location")


class ApplySettings(BaseModel):
    concurrency: int = Field(default=4, ge=1, description="Maximum concurrent provider operations")


class ProviderSettings(BaseModel):
    class_path: str = Field(
        default="infragraph.providers.local:LocalProvider",
        alias="class",
        description="Provider as 'module:Class'"
    )
    options: Dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the provider")


class Settings(BaseModel):
    """Validated settings tree."""
    state: StateSettings = Field(default_factory=StateSettings)
    apply: ApplySettings = Field(default_factory=ApplySettings)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    resource_types: Dict[str, ResourceTypePolicy] = Field(default_factory=dict, description="Policy table")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a dictionary")
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings: packaged defaults, then user config, then project config,
    then `config_path`; later layers override earlier ones key by key.

    INFRAGRAPH_STATE overrides state.path.

    Raises:
        ConfigurationError: If any layer is unreadable or the result is invalid
    """
    config = _read_yaml(get_defaults_path())

    layers = [get_user_config_path(), get_project_config_path()]
    if config_path is not None:
        explicit = Path(config_path)
        if not explicit.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        layers.append(explicit)

    for layer in layers:
        if layer is None or not layer.exists():
            continue
        _deep_merge(config, _read_yaml(layer))
        logger.info(f"Loaded config from {layer}")

    state_override = os.getenv(STATE_PATH_ENV)
    if state_override:
        config.setdefault("state", {})["path"] = state_override

    try:
        return Settings(**config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
