"""Plan execution against a provider."""

from .executor import ApplyExecutor, RetryPolicy
from .models import ApplyReport, NodeStatus, StepResult

__all__ = ["ApplyExecutor", "ApplyReport", "NodeStatus", "RetryPolicy", "StepResult"]
