"""Pydantic models for plans."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class PlanAction(str, Enum):
    """Action the executor takes for one resource."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NO_OP = "no-op"


class PlanStep(BaseModel):
    """One resource and the action planned for it."""
    address: str = Field(..., description="Resource address '<type>.<name>'")
    type: str = Field(..., description="Resource type tag")
    name: str = Field(..., description="Resource name")
    action: PlanAction = Field(..., description="Planned action")
    destructive: bool = Field(default=False, description="Update forces delete + recreate")
    changed_attributes: List[str] = Field(default_factory=list, description="Attributes that differ from state")
    depends_on: List[str] = Field(default_factory=list, description="Steps that must succeed first")

    class Config:
        use_enum_values = True


class Plan(BaseModel):
    """Ordered, read-only list of plan steps."""
    steps: List[PlanStep] = Field(default_factory=list, description="Steps in execution order")

    def get(self, address: str) -> Optional[PlanStep]:
        for step in self.steps:
            if step.address == address:
                return step
        return None

    def actions(self) -> List[tuple]:
        """(address, action) pairs in order."""
        return [(step.address, step.action) for step in self.steps]

    def changes(self) -> List[PlanStep]:
        return [step for step in self.steps if step.action != PlanAction.NO_OP]

    @property
    def has_changes(self) -> bool:
        return bool(self.changes())

    def summary(self) -> Dict[str, int]:
        """Count of steps per action, plus replacements."""
        counts = {action.value: 0 for action in PlanAction}
        counts["replace"] = 0
        for step in self.steps:
            counts[step.action] += 1
            if step.destructive:
                counts["replace"] += 1
        return counts
