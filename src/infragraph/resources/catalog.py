"""Resource type registry: dispatch by type tag, configured by the policy table."""

from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from ..registry.registry import ResourceRegistry
from ..utils.errors import ConfigurationError, ResourceValidationError
from ..utils.logging import get_logger
from .base import ResourceType, ResourceTypePolicy
from .types import BUILTIN_TYPES

logger = get_logger("resources.catalog")


class ResourceTypeRegistry:
    """Maps type tags to ResourceType handlers."""

    def __init__(self, policy_table: Optional[Dict[str, Any]] = None):
        self._types: Dict[str, ResourceType] = {}
        for type_name, row in (policy_table or {}).items():
            try:
                policy = row if isinstance(row, ResourceTypePolicy) else ResourceTypePolicy(**(row or {}))
            except (ValidationError, TypeError) as e:
                raise ConfigurationError(f"Invalid policy for resource type '{type_name}': {e}")
            handler_cls = BUILTIN_TYPES.get(type_name)
            if handler_cls is None:
                handler = ResourceType(policy)
                handler.type_name = type_name
            else:
                handler = handler_cls(policy)
            self._types[type_name] = handler
        logger.debug(f"Resource types: {sorted(self._types)}")

    def get(self, type_name: str) -> ResourceType:
        """Get handler for a type tag, raising ConfigurationError if unknown."""
        handler = self._types.get(type_name)
        if handler is None:
            raise ConfigurationError(
                f"Unsupported resource type '{type_name}'. "
                f"Known types: {', '.join(sorted(self._types))}"
            )
        return handler

    def type_names(self) -> List[str]:
        return sorted(self._types)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._types

    def validate_registry(self, registry: ResourceRegistry) -> None:
        """
        Validate every registered node against its type.

        Checks type support, per-type attribute rules, and that every reference
        targets an attribute the referenced type can provide. References to
        undeclared resources are left to the graph builder.

        Raises:
            ConfigurationError: On the first invalid node
        """
        for node in registry.nodes():
            handler = self.get(node.type)
            problems = handler.validate(node.attributes)

            for path, ref in node.references():
                if ref.address not in registry:
                    continue
                target = registry.get(ref.resource_type, ref.name)
                if not self.get(target.type).exposes(ref.attribute, target.attributes):
                    problems.append(
                        f"attribute '{path}' references unknown output "
                        f"'{ref.attribute}' of {ref.address}"
                    )

            if problems:
                raise ResourceValidationError(node.address, problems)

        logger.info(f"Validated {len(registry)} resources")
