"""Plan engine - diff desired state against the last-applied snapshot."""

from typing import Dict, List, Mapping, Set
from ..graph.dependency_graph import DependencyGraph
from ..registry.registry import ResourceRegistry
from ..resources.catalog import ResourceTypeRegistry
from ..state.models import ResourceState
from ..utils.logging import get_logger
from .models import Plan, PlanAction, PlanStep

logger = get_logger("plan.engine")


class PlanEngine:
    """
    Computes create/update/delete/no-op plans.

    Never calls a provider and never mutates state; the baseline is a
    snapshot taken from the state store.
    """

    def __init__(self, types: ResourceTypeRegistry):
        self.types = types

    def plan(
        self,
        registry: ResourceRegistry,
        graph: DependencyGraph,
        baseline: Mapping[str, ResourceState]
    ) -> Plan:
        """
        Plan the changes that move `baseline` to the registry's desired state.

        Create/update/no-op steps follow the graph's topological order;
        deletions follow, dependents before dependencies.
        """
        steps: List[PlanStep] = []
        replaced: Set[str] = set()

        for address in graph.topological_order():
            node = registry.get_by_address(address)
            handler = self.types.get(node.type)
            prior = baseline.get(address)

            if prior is None:
                action, changed, destructive = PlanAction.CREATE, [], False
            else:
                changed, destructive = handler.diff(prior.attributes, node.declared_attributes())
                # Upstream replacement changes the referenced value even when the
                # declared form is identical.
                for path, ref in node.references():
                    if ref.address not in replaced:
                        continue
                    attribute = node.top_level_attribute(path)
                    if attribute not in changed:
                        changed.append(attribute)
                    if handler.is_destructive([attribute]):
                        destructive = True
                changed.sort()
                action = PlanAction.UPDATE if changed else PlanAction.NO_OP

            if destructive:
                replaced.add(address)

            steps.append(PlanStep(
                address=address,
                type=node.type,
                name=node.name,
                action=action,
                destructive=destructive,
                changed_attributes=changed,
                depends_on=graph.dependencies(address)
            ))

        orphans = {address for address in baseline if address not in registry}
        steps.extend(self._deletions(baseline, orphans))

        plan = Plan(steps=steps)
        logger.info(f"Plan: {_format_summary(plan.summary())}")
        return plan

    def plan_destroy(self, baseline: Mapping[str, ResourceState]) -> Plan:
        """Plan deletion of every resource in the baseline."""
        plan = Plan(steps=self._deletions(baseline, set(baseline)))
        logger.info(f"Destroy plan: {_format_summary(plan.summary())}")
        return plan

    def _deletions(self, baseline: Mapping[str, ResourceState], targets: Set[str]) -> List[PlanStep]:
        """Delete steps for `targets`, ordered by the dependency graph recorded in state."""
        if not targets:
            return []

        state_graph = DependencyGraph.from_dependencies(
            {address: entry.dependencies for address, entry in baseline.items()}
        )
        steps = []
        for address in state_graph.reverse_topological_order():
            if address not in targets:
                continue
            entry = baseline[address]
            steps.append(PlanStep(
                address=address,
                type=entry.type,
                name=entry.name,
                action=PlanAction.DELETE,
                depends_on=state_graph.dependents(address)
            ))
        return steps


def _format_summary(summary: Dict[str, int]) -> str:
    return (
        f"{summary['create']} to create, {summary['update']} to update "
        f"({summary['replace']} replacements), {summary['delete']} to delete, "
        f"{summary['no-op']} unchanged"
    )
