"""Resource type capability interface."""

from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field
from ..providers.base import Provider
from ..utils.logging import get_logger

logger = get_logger("resources.base")


class ResourceTypePolicy(BaseModel):
    """Mutability rules for one resource type (one row of the policy table)."""
    required: List[str] = Field(default_factory=list, description="Attributes that must be declared")
    force_new: List[str] = Field(default_factory=list, description="Attributes whose change forces recreation")
    outputs: List[str] = Field(default_factory=list, description="Attributes the provider exposes after apply")


class ResourceType:
    """
    Capability interface implemented per resource type.

    Dispatched by type tag through ResourceTypeRegistry. Subclasses extend
    validate() with type-specific checks; diff() and apply() are driven by the
    policy table.
    """

    type_name: str = ""

    def __init__(self, policy: Optional[ResourceTypePolicy] = None):
        self.policy = policy or ResourceTypePolicy()

    def validate(self, attributes: Dict[str, Any]) -> List[str]:
        """
        Validate declared attributes.

        Args:
            attributes: Declared attributes (References allowed as values)

        Returns:
            List of problems (empty when valid)
        """
        return [
            f"missing required attribute '{name}'"
            for name in self.policy.required
            if name not in attributes or attributes[name] is None
        ]

    def diff(self, old: Dict[str, Any], new: Dict[str, Any]) -> Tuple[List[str], bool]:
        """
        Compare two declared attribute snapshots.

        Returns:
            (sorted changed attribute names, whether any change forces recreation)
        """
        changed = sorted(
            key for key in set(old) | set(new)
            if old.get(key) != new.get(key)
        )
        return changed, self.is_destructive(changed)

    def is_destructive(self, changed: List[str]) -> bool:
        return any(name in self.policy.force_new for name in changed)

    def exposes(self, attribute: str, declared: Dict[str, Any]) -> bool:
        """Whether a reference to `attribute` can be satisfied after apply."""
        return attribute == "id" or attribute in self.policy.outputs or attribute in declared

    def apply(
        self,
        provider: Provider,
        action: str,
        provider_id: Optional[str],
        attributes: Dict[str, Any]
    ) -> Tuple[Optional[str], Dict[str, Any]]:
        """
        Run one provider operation for this type.

        Args:
            provider: Provider to call
            action: 'create', 'update' or 'delete'
            provider_id: Existing identifier (update/delete)
            attributes: Fully resolved attributes

        Returns:
            (provider_id, output attributes)
        """
        if action == "create":
            new_id, outputs = provider.create(self.type_name, attributes)
            return new_id, dict(outputs or {})
        if action == "update":
            outputs = provider.update(self.type_name, provider_id, attributes)
            return provider_id, dict(outputs or {})
        if action == "delete":
            provider.delete(self.type_name, provider_id)
            return provider_id, {}
        raise ValueError(f"Unsupported provider action: {action}")
