"""Config path resolution for the layered settings system."""

from pathlib import Path
from typing import Optional


def get_defaults_path() -> Path:
    """Packaged defaults shipped with infragraph."""
    return Path(__file__).parent / "defaults.yaml"


def get_user_config_path() -> Path:
    """Get user config path: ~/.infragraph/config.yaml"""
    home = Path.home()
    return home / ".infragraph" / "config.yaml"


def get_project_config_path() -> Optional[Path]:
    """Get project config path: .infragraph/config.yaml (from current working directory)"""
    cwd = Path.cwd()
    project_config = cwd / ".infragraph" / "config.yaml"
    if project_config.exists():
        return project_config
    return None
