"""Tests for the resource registry."""

import pytest
from infragraph.registry.models import Reference
from infragraph.registry.registry import ResourceRegistry
from infragraph.utils.errors import DuplicateResourceError, UnknownResourceError


class TestResourceRegistry:
    """Test registration and lookup."""
    
    def test_register_and_get(self):
        registry = ResourceRegistry()
        node = registry.register("compute_network", "main", {"name": "main"})
        
        assert node.address == "compute_network.main"
        assert registry.get("compute_network", "main") is node
        assert "compute_network.main" in registry
        assert len(registry) == 1
    
    def test_duplicate_registration_fails(self):
        registry = ResourceRegistry()
        registry.register("compute_network", "main", {})
        
        with pytest.raises(DuplicateResourceError, match="compute_network.main"):
            registry.register("compute_network", "main", {"name": "other"})
    
    def test_same_name_different_type_is_allowed(self):
        registry = ResourceRegistry()
        registry.register("compute_network", "main", {})
        registry.register("pubsub_topic", "main", {})
        
        assert registry.addresses() == ["compute_network.main", "pubsub_topic.main"]
    
    def test_get_unknown_fails(self):
        registry = ResourceRegistry()
        
        with pytest.raises(UnknownResourceError):
            registry.get("compute_network", "missing")
    
    def test_reference_strings_become_references(self):
        registry = ResourceRegistry()
        node = registry.register("compute_subnetwork", "app", {
            "network": "${compute_network.main.self_link}",
            "labels": {"owner": "${pubsub_topic.events.id}"},
            "plain": "not ${a reference",
        })
        
        assert node.attributes["network"] == Reference("compute_network", "main", "self_link")
        assert node.attributes["plain"] == "not ${a reference"
        assert [path for path, _ in node.references()] == ["network", "labels.owner"]
        assert node.declared_attributes()["network"] == "${compute_network.main.self_link}"
    
    def test_registration_order_is_kept(self):
        registry = ResourceRegistry()
        for name in ["c", "a", "b"]:
            registry.register("pubsub_topic", name, {})
        
        assert [n.name for n in registry.nodes()] == ["c", "a", "b"]
        assert registry.index_of("pubsub_topic.a") == 1
