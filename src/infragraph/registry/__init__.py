"""Resource registry and desired-state document loading."""

from .models import Reference, ResourceNode, make_address, split_address
from .registry import ResourceRegistry
from .loader import load_desired_state

__all__ = [
    "Reference",
    "ResourceNode",
    "ResourceRegistry",
    "load_desired_state",
    "make_address",
    "split_address",
]
