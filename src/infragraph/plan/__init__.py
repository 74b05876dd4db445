"""Desired-state vs. last-applied diffing."""

from .engine import PlanEngine
from .models import Plan, PlanAction, PlanStep

__all__ = ["Plan", "PlanAction", "PlanEngine", "PlanStep"]
