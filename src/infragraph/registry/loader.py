"""Desired-state loader - load resource definitions from YAML."""

import re
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError
from ..utils.errors import ConfigurationError, InfraGraphError
from ..utils.logging import get_logger
from .registry import ResourceRegistry

logger = get_logger("registry.loader")

VARIABLE_PATTERN = re.compile(r"\$\{var\.([A-Za-z_][A-Za-z0-9_]*)\}")


class ResourceDefinition(BaseModel):
    """One entry of the 'resources' list."""
    type: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$", description="Resource type tag")
    name: str = Field(..., pattern=r"^[A-Za-z0-9_-]+$", description="Resource name")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Declared attributes")
    depends_on: List[str] = Field(default_factory=list, description="Explicit dependency addresses")


class DesiredStateDocument(BaseModel):
    """Top-level desired-state document."""
    variables: Dict[str, Any] = Field(default_factory=dict, description="Values for ${var.<name>}")
    resources: List[ResourceDefinition] = Field(default_factory=list, description="Resource definitions")


def substitute_variables(value: Any, variables: Dict[str, Any]) -> Any:
    """
    Replace ${var.<name>} occurrences.

    A string that is exactly one variable takes the variable's value as-is
    (keeping its type); otherwise the value is interpolated as text.

    Raises:
        ConfigurationError: If a variable is not defined
    """
    if isinstance(value, dict):
        return {k: substitute_variables(v, variables) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_variables(v, variables) for v in value]
    if not isinstance(value, str):
        return value

    def lookup(name: str) -> Any:
        if name not in variables:
            raise ConfigurationError(f"Undefined variable: var.{name}")
        return variables[name]

    whole = VARIABLE_PATTERN.fullmatch(value.strip())
    if whole:
        return lookup(whole.group(1))
    return VARIABLE_PATTERN.sub(lambda m: str(lookup(m.group(1))), value)


def parse_document(data: Any, variables: Optional[Dict[str, Any]] = None) -> ResourceRegistry:
    """
    Build a registry from an already-parsed document.

    Args:
        data: Parsed YAML/JSON document
        variables: Overrides for the document's variables

    Returns:
        Populated ResourceRegistry

    Raises:
        ConfigurationError: If the document is malformed
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Desired-state document must contain a dictionary")

    try:
        document = DesiredStateDocument(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid desired-state document: {e}")

    merged_variables = dict(document.variables)
    merged_variables.update(variables or {})

    registry = ResourceRegistry()
    for definition in document.resources:
        registry.register(
            definition.type,
            definition.name,
            substitute_variables(definition.attributes, merged_variables),
            definition.depends_on
        )
    return registry


def load_desired_state(path: str, variables: Optional[Dict[str, Any]] = None) -> ResourceRegistry:
    """
    Load a desired-state YAML document into a registry.

    Args:
        path: Path to the document
        variables: Overrides for the document's variables

    Returns:
        Populated ResourceRegistry

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    document_path = Path(path)

    if not document_path.exists():
        raise ConfigurationError(f"Desired-state document not found: {path}")

    if not document_path.is_file():
        raise ConfigurationError(f"Path is not a file: {path}")

    try:
        with open(document_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in desired-state document: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error reading desired-state document: {e}")

    try:
        registry = parse_document(data, variables)
    except InfraGraphError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Error parsing desired-state document: {e}")

    logger.info(f"Loaded {len(registry)} resources from {path}")
    return registry
