"""CLI utilities package."""

import sys
from typing import Dict, Optional, Tuple
import click
import yaml
from ...utils.errors import ConfigurationError, InfraGraphError
from ...utils.logging import get_logger
from .file_resolver import resolve_file_path

logger = get_logger("cli.utils")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_CONFIG = 2


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.
    
    Args:
        message: Error message
        suggestion: Optional suggestion or help text
        
    Returns:
        Formatted error string
    """
    error = f"❌ Error: {message}"
    if suggestion:
        error += f"\n💡 Tip: {suggestion}"
    return error


def exit_code_for(error: Exception) -> int:
    """0 success, 1 plan/apply error, 2 invalid configuration."""
    if isinstance(error, ConfigurationError):
        return EXIT_INVALID_CONFIG
    return EXIT_ERROR


def fail(error: Exception, suggestion: Optional[str] = None) -> None:
    """Print an error and exit with the matching code."""
    click.echo(format_error(str(error), suggestion), err=True)
    sys.exit(exit_code_for(error))


def parse_variables(pairs: Tuple[str, ...]) -> Dict[str, object]:
    """
    Parse repeated --var key=value options.
    
    Values are parsed as YAML scalars, so 'count=3' yields an int.
    
    Raises:
        ConfigurationError: If a pair has no '='
    """
    variables = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Invalid --var '{pair}', expected key=value")
        try:
            variables[key.strip()] = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            variables[key.strip()] = raw
    return variables


def resolve_document(document: str) -> str:
    """Resolve a document path, raising ConfigurationError when missing."""
    try:
        return str(resolve_file_path(document))
    except FileNotFoundError as e:
        raise ConfigurationError(str(e))


__all__ = [
    "EXIT_ERROR",
    "EXIT_INVALID_CONFIG",
    "EXIT_OK",
    "InfraGraphError",
    "exit_code_for",
    "fail",
    "format_error",
    "parse_variables",
    "resolve_document",
    "resolve_file_path",
]
