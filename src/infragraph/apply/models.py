"""Pydantic models for apply results."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class NodeStatus(str, Enum):
    """Per-step status during and after an apply run."""
    PENDING = "pending"
    APPLYING = "applying"
    APPLIED = "applied"
    FAILED = "failed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


SUCCESS_STATUSES = (NodeStatus.APPLIED, NodeStatus.SKIPPED)
FAILURE_STATUSES = (NodeStatus.FAILED, NodeStatus.BLOCKED, NodeStatus.CANCELLED)


class StepResult(BaseModel):
    """Outcome of one plan step."""
    address: str = Field(..., description="Resource address")
    action: str = Field(..., description="Planned action")
    status: NodeStatus = Field(..., description="Terminal status")
    reason: Optional[str] = Field(None, description="Failure reason")
    upstream: Optional[str] = Field(None, description="Upstream address that blocked this step")
    provider_id: Optional[str] = Field(None, description="Provider identifier after apply")
    attempts: int = Field(default=0, ge=0, description="Provider call attempts made")


class ApplyReport(BaseModel):
    """Per-node status report of an apply run, in plan order."""
    results: List[StepResult] = Field(default_factory=list, description="Step results in plan order")

    def status_of(self, address: str) -> Optional[NodeStatus]:
        for result in self.results:
            if result.address == address:
                return result.status
        return None

    def _with_status(self, status: NodeStatus) -> List[str]:
        return [r.address for r in self.results if r.status == status]

    def applied(self) -> List[str]:
        return self._with_status(NodeStatus.APPLIED)

    def failed(self) -> List[str]:
        return self._with_status(NodeStatus.FAILED)

    def blocked(self) -> List[str]:
        return self._with_status(NodeStatus.BLOCKED)

    def skipped(self) -> List[str]:
        return self._with_status(NodeStatus.SKIPPED)

    def cancelled(self) -> List[str]:
        return self._with_status(NodeStatus.CANCELLED)

    @property
    def ok(self) -> bool:
        return all(r.status in SUCCESS_STATUSES for r in self.results)

    def summary(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in NodeStatus if status not in (NodeStatus.PENDING, NodeStatus.APPLYING)}
        for result in self.results:
            counts[result.status.value] += 1
        return counts
