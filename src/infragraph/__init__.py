"""infragraph - Declarative resource graph compiler and applier."""

from typing import Any, Dict, Optional
from .apply.models import ApplyReport
from .plan.models import Plan
from .registry.registry import ResourceRegistry
from .utils.errors import InfraGraphError
from .utils.logging import get_logger
from .workspace import Workspace

__version__ = "0.1.0"

__all__ = ["ResourceRegistry", "Workspace", "apply", "destroy", "plan"]

logger = get_logger("api")


def plan(
    document_path: str,
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    variables: Optional[Dict[str, Any]] = None
) -> Plan:
    """Compute the plan for a desired-state document without applying it."""
    workspace = Workspace.from_config(config_path, state_path)
    registry, graph = workspace.load(document_path, variables)
    return workspace.plan(registry, graph)


def apply(
    document_path: str,
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    variables: Optional[Dict[str, Any]] = None,
    concurrency: Optional[int] = None
) -> ApplyReport:
    """Compute and execute the plan for a desired-state document."""
    try:
        workspace = Workspace.from_config(config_path, state_path)
        registry, graph = workspace.load(document_path, variables)
        return workspace.apply(workspace.plan(registry, graph), registry, concurrency)
    except InfraGraphError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during apply: {e}", exc_info=True)
        raise InfraGraphError(f"Apply failed: {e}") from e


def destroy(
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    concurrency: Optional[int] = None
) -> ApplyReport:
    """Delete everything recorded in state, dependents first."""
    workspace = Workspace.from_config(config_path, state_path)
    return workspace.apply(workspace.plan_destroy(), concurrency=concurrency)
