"""Resource registry: in-memory bookkeeping of desired resources."""

from typing import Any, Dict, Iterable, List, Optional
from ..utils.errors import DuplicateResourceError, UnknownResourceError
from ..utils.logging import get_logger
from .models import ResourceNode, make_address, parse_attributes, split_address

logger = get_logger("registry")


class ResourceRegistry:
    """Typed resource definitions keyed by (type, name), in registration order."""
    
    def __init__(self):
        self._nodes: Dict[str, ResourceNode] = {}
    
    def register(
        self,
        resource_type: str,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        depends_on: Optional[Iterable[str]] = None
    ) -> ResourceNode:
        """
        Register a resource definition.
        
        Reference strings ('${type.name.attr}') in attributes are parsed into
        Reference values.
        
        Raises:
            DuplicateResourceError: If (type, name) is already registered
        """
        address = make_address(resource_type, name)
        if address in self._nodes:
            raise DuplicateResourceError(resource_type, name)
        
        node = ResourceNode(
            type=resource_type,
            name=name,
            attributes=parse_attributes(dict(attributes or {})),
            depends_on=list(depends_on or [])
        )
        self._nodes[address] = node
        logger.debug(f"Registered {address}")
        return node
    
    def get(self, resource_type: str, name: str) -> ResourceNode:
        """Get a resource by type and name, raising UnknownResourceError if absent."""
        node = self._nodes.get(make_address(resource_type, name))
        if node is None:
            raise UnknownResourceError(resource_type, name)
        return node
    
    def get_by_address(self, address: str) -> ResourceNode:
        resource_type, name = split_address(address)
        return self.get(resource_type, name)
    
    def nodes(self) -> List[ResourceNode]:
        """All nodes in registration order."""
        return list(self._nodes.values())
    
    def addresses(self) -> List[str]:
        return list(self._nodes.keys())
    
    def index_of(self, address: str) -> int:
        """Registration position of an address."""
        for idx, key in enumerate(self._nodes):
            if key == address:
                return idx
        resource_type, name = split_address(address)
        raise UnknownResourceError(resource_type, name)
    
    def __contains__(self, address: str) -> bool:
        return address in self._nodes
    
    def __len__(self) -> int:
        return len(self._nodes)
