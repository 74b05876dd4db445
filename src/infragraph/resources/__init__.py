"""Resource type handlers and the policy table they follow."""

from .base import ResourceType, ResourceTypePolicy
from .catalog import ResourceTypeRegistry
from .types import BUILTIN_TYPES

__all__ = ["BUILTIN_TYPES", "ResourceType", "ResourceTypePolicy", "ResourceTypeRegistry"]
