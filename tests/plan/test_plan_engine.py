"""Tests for the plan engine."""

from infragraph.graph.dependency_graph import DependencyGraph
from infragraph.plan.engine import PlanEngine
from infragraph.plan.models import PlanAction
from infragraph.registry.registry import ResourceRegistry
from infragraph.state.models import ResourceState


def _entry(resource_type, name, attributes=None, dependencies=None):
    return ResourceState(
        type=resource_type,
        name=name,
        attributes=attributes or {},
        provider_id=f"{resource_type}/{name}",
        dependencies=dependencies or []
    )


class TestPlanEngine:
    """Test diffing desired state against a baseline."""
    
    def test_empty_state_creates_in_dependency_order(self, make_plan, network_registry):
        plan = make_plan(network_registry)
        
        assert plan.actions() == [
            ("compute_network.main", PlanAction.CREATE),
            ("compute_subnetwork.app", PlanAction.CREATE),
        ]
        assert plan.get("compute_subnetwork.app").depends_on == ["compute_network.main"]
        assert plan.has_changes
    
    def test_unchanged_state_is_no_op(self, make_plan, network_registry, state):
        for node in network_registry.nodes():
            state.put(_entry(node.type, node.name, node.declared_attributes()))
        
        plan = make_plan(network_registry)
        
        assert [action for _, action in plan.actions()] == [PlanAction.NO_OP, PlanAction.NO_OP]
        assert not plan.has_changes
    
    def test_in_place_update(self, types):
        registry = ResourceRegistry()
        registry.register("cloudfunctions_function", "fn", {
            "name": "fn", "runtime": "python312", "entry_point": "new_handler"
        })
        baseline = {"cloudfunctions_function.fn": _entry(
            "cloudfunctions_function", "fn",
            {"name": "fn", "runtime": "python312", "entry_point": "old_handler"}
        )}
        
        plan = PlanEngine(types).plan(registry, DependencyGraph.from_registry(registry), baseline)
        
        step = plan.get("cloudfunctions_function.fn")
        assert step.action == PlanAction.UPDATE
        assert step.destructive is False
        assert step.changed_attributes == ["entry_point"]
    
    def test_destructive_update(self, make_plan, network_registry, state, factory):
        for node in network_registry.nodes():
            state.put(_entry(node.type, node.name, node.declared_attributes()))
        
        registry = ResourceRegistry()
        factory.network(registry)
        factory.subnet(registry, ip_cidr_range="10.9.0.0/24")
        plan = make_plan(registry)
        
        step = plan.get("compute_subnetwork.app")
        assert step.action == PlanAction.UPDATE
        assert step.destructive is True
        assert plan.summary()["replace"] == 1
    
    def test_replacement_propagates_to_dependents(self, make_plan, network_registry, state, factory):
        for node in network_registry.nodes():
            state.put(_entry(node.type, node.name, node.declared_attributes()))
        
        registry = ResourceRegistry()
        factory.network(registry, routing_mode="GLOBAL")
        factory.subnet(registry)
        plan = make_plan(registry)
        
        network_step = plan.get("compute_network.main")
        subnet_step = plan.get("compute_subnetwork.app")
        assert network_step.destructive is True
        assert subnet_step.action == PlanAction.UPDATE
        assert subnet_step.changed_attributes == ["network"]
        assert subnet_step.destructive is True
    
    def test_removed_resource_is_deleted(self, make_plan, network_registry, state, factory):
        state.put(_entry("compute_network", "main", network_registry.get("compute_network", "main").declared_attributes()))
        state.put(_entry(
            "compute_subnetwork", "app",
            network_registry.get("compute_subnetwork", "app").declared_attributes(),
            ["compute_network.main"]
        ))
        
        registry = ResourceRegistry()
        factory.network(registry)
        plan = make_plan(registry)
        
        assert [(s.address, s.action) for s in plan.changes()] == [("compute_subnetwork.app", PlanAction.DELETE)]
        assert plan.get("compute_network.main").action == PlanAction.NO_OP
    
    def test_deletions_follow_reverse_order(self, types, state):
        state.put(_entry("compute_network", "main"))
        state.put(_entry("compute_subnetwork", "app", dependencies=["compute_network.main"]))
        state.put(_entry("container_cluster", "gke", dependencies=["compute_subnetwork.app"]))
        
        plan = PlanEngine(types).plan_destroy(state.snapshot())
        
        assert plan.actions() == [
            ("container_cluster.gke", PlanAction.DELETE),
            ("compute_subnetwork.app", PlanAction.DELETE),
            ("compute_network.main", PlanAction.DELETE),
        ]
        assert plan.get("compute_network.main").depends_on == ["compute_subnetwork.app"]
    
    def test_deletions_come_after_updates_of_former_dependents(self, make_plan, state, factory):
        state.put(_entry("compute_network", "old", {"name": "old"}))
        state.put(_entry("compute_subnetwork", "app", {"network": "${compute_network.old.self_link}"}, ["compute_network.old"]))
        
        registry = ResourceRegistry()
        factory.network(registry)
        factory.subnet(registry)
        plan = make_plan(registry)
        
        addresses = [s.address for s in plan.steps]
        assert addresses.index("compute_subnetwork.app") < addresses.index("compute_network.old")
        assert plan.get("compute_network.old").depends_on == ["compute_subnetwork.app"]
    
    def test_plan_does_not_touch_state(self, make_plan, network_registry, state):
        make_plan(network_registry)
        
        assert len(state) == 0
        assert state.serial == 0
