"""Workspace: wires settings, registry, graph, planner, state and provider together."""

from typing import Any, Dict, Optional, Tuple
from .apply.executor import ApplyExecutor
from .apply.models import ApplyReport
from .config.manager import Settings, load_settings
from .graph.dependency_graph import DependencyGraph
from .plan.engine import PlanEngine
from .plan.models import Plan
from .providers import load_provider
from .providers.base import Provider
from .registry.loader import load_desired_state
from .registry.registry import ResourceRegistry
from .resources.catalog import ResourceTypeRegistry
from .state.store import StateStore
from .utils.logging import get_logger

logger = get_logger("workspace")


class Workspace:
    """
    One desired-state workflow against one state file.

    Registry -> graph -> plan -> apply -> state. The provider is created
    lazily, so validating and planning never contact it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        state: Optional[StateStore] = None,
        provider: Optional[Provider] = None
    ):
        self.settings = settings or load_settings()
        self.types = ResourceTypeRegistry(self.settings.resource_types)
        self.state = state if state is not None else StateStore(self.settings.state.path)
        self.planner = PlanEngine(self.types)
        self._provider = provider
        self._executor: Optional[ApplyExecutor] = None

    @classmethod
    def from_config(cls, config_path: Optional[str] = None, state_path: Optional[str] = None) -> "Workspace":
        """Create a workspace from layered settings, optionally overriding the state file."""
        settings = load_settings(config_path)
        if state_path:
            settings.state.path = state_path
        return cls(settings=settings)

    @property
    def provider(self) -> Provider:
        if self._provider is None:
            self._provider = load_provider(self.settings.provider.class_path, self.settings.provider.options)
        return self._provider

    def load(
        self,
        document_path: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> Tuple[ResourceRegistry, DependencyGraph]:
        """Load, validate and graph a desired-state document."""
        registry = load_desired_state(document_path, variables)
        return registry, self.compile(registry)

    def compile(self, registry: ResourceRegistry) -> DependencyGraph:
        """
        Build the dependency graph and validate every node against its type.

        Raises:
            ConfigurationError: Before any provider call, on any invalid input
        """
        graph = DependencyGraph.from_registry(registry)
        self.types.validate_registry(registry)
        return graph

    def plan(self, registry: ResourceRegistry, graph: DependencyGraph) -> Plan:
        return self.planner.plan(registry, graph, self.state.snapshot())

    def plan_destroy(self) -> Plan:
        return self.planner.plan_destroy(self.state.snapshot())

    def executor(self, concurrency: Optional[int] = None) -> ApplyExecutor:
        """Executor for this workspace; kept so a caller can abort() it."""
        self._executor = ApplyExecutor(
            self.provider,
            self.types,
            self.state,
            concurrency=concurrency or self.settings.apply.concurrency,
            retry_policy=self.settings.retry
        )
        return self._executor

    def apply(
        self,
        plan: Plan,
        registry: Optional[ResourceRegistry] = None,
        concurrency: Optional[int] = None
    ) -> ApplyReport:
        """
        Execute a plan.

        Raises:
            PartialApplyError: If any step failed, was blocked or cancelled
        """
        return self.executor(concurrency).execute(plan, registry)

    def abort(self) -> None:
        if self._executor is not None:
            self._executor.abort()
