"""Abstract base class for providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple


class Provider(ABC):
    """
    Abstract interface for the external system that performs resource changes.
    
    Providers are called only by the apply executor, never while planning.
    Every method may raise ProviderError; errors flagged retryable are retried
    by the executor with bounded exponential backoff.
    """
    
    @abstractmethod
    def create(self, resource_type: str, attributes: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Create a resource.
        
        Args:
            resource_type: Resource type tag
            attributes: Fully resolved attributes
            
        Returns:
            (provider_id, output attributes)
        """
        pass
    
    @abstractmethod
    def update(self, resource_type: str, provider_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update a resource in place.
        
        Returns:
            Output attributes
        """
        pass
    
    @abstractmethod
    def delete(self, resource_type: str, provider_id: str) -> None:
        """Delete a resource."""
        pass
