"""Shared fixtures."""

import pytest
import yaml
from infragraph.apply.executor import ApplyExecutor, RetryPolicy
from infragraph.config.paths import get_defaults_path
from infragraph.graph.dependency_graph import DependencyGraph
from infragraph.plan.engine import PlanEngine
from infragraph.providers.local import LocalProvider
from infragraph.registry.registry import ResourceRegistry
from infragraph.resources.catalog import ResourceTypeRegistry
from infragraph.state.store import StateStore


def default_policy_table():
    with open(get_defaults_path(), 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)["resource_types"]


class ResourceFactory:
    """Builders for the resources most tests use."""

    def network(self, registry, **overrides):
        attributes = {"name": "main", "auto_create_subnetworks": False}
        attributes.update(overrides)
        return registry.register("compute_network", "main", attributes)

    def subnet(self, registry, **overrides):
        attributes = {
            "name": "app",
            "network": "${compute_network.main.self_link}",
            "ip_cidr_range": "10.0.0.0/24",
            "region": "us-central1",
        }
        attributes.update(overrides)
        return registry.register("compute_subnetwork", "app", attributes)

    def cluster(self, registry):
        return registry.register("container_cluster", "gke", {
            "name": "gke",
            "location": "us-central1",
            "subnetwork": "${compute_subnetwork.app.self_link}",
            "initial_node_count": 1,
        })

    def topic(self, registry, name="events"):
        return registry.register("pubsub_topic", name, {"name": name})


@pytest.fixture
def factory():
    return ResourceFactory()


@pytest.fixture
def types():
    return ResourceTypeRegistry(default_policy_table())


@pytest.fixture
def provider():
    return LocalProvider()


@pytest.fixture
def state():
    return StateStore()


@pytest.fixture
def fast_retry():
    return RetryPolicy(max_attempts=3, multiplier=0, min_wait=0, max_wait=0)


@pytest.fixture
def network_registry(factory):
    """Network A plus subnet B referencing A."""
    registry = ResourceRegistry()
    factory.network(registry)
    factory.subnet(registry)
    return registry


@pytest.fixture
def make_plan(types, state):
    """Plan a registry against the shared state store."""
    def _plan(registry):
        graph = DependencyGraph.from_registry(registry)
        types.validate_registry(registry)
        return PlanEngine(types).plan(registry, graph, state.snapshot())
    return _plan


@pytest.fixture
def make_executor(provider, types, state, fast_retry):
    def _executor(concurrency=1, retry_policy=None):
        return ApplyExecutor(provider, types, state, concurrency=concurrency, retry_policy=retry_policy or fast_retry)
    return _executor
