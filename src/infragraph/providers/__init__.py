"""Provider interface, built-in local provider and provider loading."""

import importlib
from typing import Any, Dict, Optional
from ..utils.errors import ConfigurationError
from ..utils.logging import get_logger
from .base import Provider
from .local import LocalProvider

logger = get_logger("providers")


def load_provider(class_path: str, options: Optional[Dict[str, Any]] = None) -> Provider:
    """
    Instantiate a provider from a 'module:Class' import path.
    
    Raises:
        ConfigurationError: If the class cannot be imported or is not a Provider
    """
    module_name, _, class_name = class_path.partition(":")
    if not module_name or not class_name:
        raise ConfigurationError(f"Provider class must be 'module:Class', got '{class_path}'")
    
    try:
        module = importlib.import_module(module_name)
        provider_cls = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load provider '{class_path}': {e}")
    
    if not isinstance(provider_cls, type) or not issubclass(provider_cls, Provider):
        raise ConfigurationError(f"'{class_path}' is not a Provider subclass")
    
    try:
        provider = provider_cls(**(options or {}))
    except TypeError as e:
        raise ConfigurationError(f"Invalid options for provider '{class_path}': {e}")
    
    logger.info(f"Using provider {class_path}")
    return provider


__all__ = ["LocalProvider", "Provider", "load_provider"]
