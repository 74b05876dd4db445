"""Resource node and reference models."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, Field

REFERENCE_PATTERN = re.compile(
    r"^\$\{(?P<type>[a-z][a-z0-9_]*)\.(?P<name>[A-Za-z0-9_-]+)\.(?P<attribute>[A-Za-z0-9_]+)\}$"
)


def make_address(resource_type: str, name: str) -> str:
    """Build the canonical '<type>.<name>' address."""
    return f"{resource_type}.{name}"


def split_address(address: str) -> Tuple[str, str]:
    """Split an address into (type, name)."""
    resource_type, _, name = address.partition(".")
    return resource_type, name


@dataclass(frozen=True)
class Reference:
    """Pointer from one resource's attribute to another resource's output."""
    resource_type: str
    name: str
    attribute: str

    @property
    def address(self) -> str:
        return make_address(self.resource_type, self.name)

    def __str__(self) -> str:
        return f"${{{self.resource_type}.{self.name}.{self.attribute}}}"


def parse_reference(value: Any) -> Optional[Reference]:
    """Return a Reference if value is a whole-string '${type.name.attr}'."""
    if not isinstance(value, str):
        return None
    match = REFERENCE_PATTERN.match(value.strip())
    if not match:
        return None
    return Reference(match.group("type"), match.group("name"), match.group("attribute"))


def parse_attributes(value: Any) -> Any:
    """Recursively turn reference strings into Reference objects."""
    if isinstance(value, dict):
        return {k: parse_attributes(v) for k, v in value.items()}
    if isinstance(value, list):
        return [parse_attributes(v) for v in value]
    ref = parse_reference(value)
    return ref if ref is not None else value


def iter_references(value: Any, path: str = "") -> Iterator[Tuple[str, Reference]]:
    """Yield (attribute path, Reference) for every reference nested in value."""
    if isinstance(value, Reference):
        yield path, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from iter_references(item, f"{path}.{key}" if path else str(key))
    elif isinstance(value, list):
        for idx, item in enumerate(value):
            yield from iter_references(item, f"{path}[{idx}]")


def to_declared(value: Any) -> Any:
    """Serializable declared form: references rendered back as strings."""
    if isinstance(value, Reference):
        return str(value)
    if isinstance(value, dict):
        return {k: to_declared(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_declared(v) for v in value]
    return value


class ResourceNode(BaseModel):
    """A typed resource definition held by the registry."""
    type: str = Field(..., description="Resource type tag (e.g. 'compute_network')")
    name: str = Field(..., description="Resource name, unique per type")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Attribute values or References")
    depends_on: List[str] = Field(default_factory=list, description="Explicit dependency addresses")
    provider_id: Optional[str] = Field(None, description="Provider-assigned identifier once applied")

    @property
    def address(self) -> str:
        return make_address(self.type, self.name)

    def references(self) -> List[Tuple[str, Reference]]:
        """All (attribute path, Reference) pairs in this node's attributes."""
        return list(iter_references(self.attributes))

    def top_level_attribute(self, path: str) -> str:
        """Top-level attribute name of a nested attribute path."""
        return re.split(r"[.\[]", path, maxsplit=1)[0]

    def declared_attributes(self) -> Dict[str, Any]:
        return to_declared(self.attributes)
