"""Configuration module: layered YAML settings and the resource policy table."""

from .manager import Settings, load_settings
from .paths import get_defaults_path, get_project_config_path, get_user_config_path

__all__ = [
    "Settings",
    "get_defaults_path",
    "get_project_config_path",
    "get_user_config_path",
    "load_settings",
]
