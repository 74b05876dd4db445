"""Pydantic models for persisted state."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

STATE_FORMAT_VERSION = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ResourceState(BaseModel):
    """Last-applied snapshot of one resource."""
    type: str = Field(..., description="Resource type tag")
    name: str = Field(..., description="Resource name")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Declared attributes at last apply")
    outputs: Dict[str, Any] = Field(default_factory=dict, description="Provider output attributes")
    provider_id: Optional[str] = Field(None, description="Provider-assigned identifier")
    dependencies: List[str] = Field(default_factory=list, description="Addresses this resource depended on")
    last_applied: datetime = Field(default_factory=utc_now, description="Timestamp of last successful apply")

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"


class StateFile(BaseModel):
    """On-disk state document."""
    version: int = Field(default=STATE_FORMAT_VERSION, description="State format version")
    serial: int = Field(default=0, ge=0, description="Incremented on every write")
    resources: Dict[str, ResourceState] = Field(default_factory=dict, description="Entries keyed by address")
