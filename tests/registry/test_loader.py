"""Tests for desired-state document loading."""

from pathlib import Path
import pytest
from infragraph.registry.loader import load_desired_state, parse_document, substitute_variables
from infragraph.registry.models import Reference
from infragraph.utils.errors import ConfigurationError, DuplicateResourceError

SAMPLE_STACK = Path(__file__).parents[2] / "samples" / "stack.yaml"


class TestVariables:
    """Test ${var.*} substitution."""
    
    def test_whole_value_keeps_type(self):
        assert substitute_variables("${var.count}", {"count": 3}) == 3
    
    def test_embedded_value_is_interpolated(self):
        assert substitute_variables("${var.prefix}-vpc", {"prefix": "demo"}) == "demo-vpc"
    
    def test_nested_values(self):
        value = {"a": ["${var.x}", {"b": "${var.x}-y"}]}
        assert substitute_variables(value, {"x": "v"}) == {"a": ["v", {"b": "v-y"}]}
    
    def test_undefined_variable_fails(self):
        with pytest.raises(ConfigurationError, match="var.missing"):
            substitute_variables("${var.missing}", {})


class TestParseDocument:
    """Test building a registry from parsed data."""
    
    def test_parse_document(self):
        registry = parse_document({
            "variables": {"region": "europe-west1"},
            "resources": [
                {"type": "compute_network", "name": "vpc", "attributes": {"name": "vpc"}},
                {
                    "type": "compute_subnetwork",
                    "name": "app",
                    "attributes": {
                        "network": "${compute_network.vpc.self_link}",
                        "region": "${var.region}",
                    },
                },
            ],
        })
        
        subnet = registry.get("compute_subnetwork", "app")
        assert subnet.attributes["region"] == "europe-west1"
        assert subnet.attributes["network"] == Reference("compute_network", "vpc", "self_link")
    
    def test_variable_overrides(self):
        registry = parse_document(
            {
                "variables": {"name": "default"},
                "resources": [{"type": "pubsub_topic", "name": "t", "attributes": {"name": "${var.name}"}}],
            },
            variables={"name": "override"}
        )
        
        assert registry.get("pubsub_topic", "t").attributes["name"] == "override"
    
    def test_empty_document(self):
        assert len(parse_document(None)) == 0
    
    def test_non_dict_document_fails(self):
        with pytest.raises(ConfigurationError, match="dictionary"):
            parse_document(["not", "a", "dict"])
    
    def test_invalid_resource_fails(self):
        with pytest.raises(ConfigurationError, match="Invalid desired-state document"):
            parse_document({"resources": [{"name": "missing-type"}]})
    
    def test_duplicate_resource_fails(self):
        with pytest.raises(DuplicateResourceError):
            parse_document({"resources": [
                {"type": "pubsub_topic", "name": "t"},
                {"type": "pubsub_topic", "name": "t"},
            ]})


class TestLoadDesiredState:
    """Test loading documents from disk."""
    
    def test_missing_file(self):
        with pytest.raises(ConfigurationError, match="not found"):
            load_desired_state("nonexistent.yaml")
    
    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("resources: [unclosed", encoding="utf-8")
        
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_desired_state(str(path))
    
    def test_sample_stack_loads(self):
        registry = load_desired_state(str(SAMPLE_STACK))
        
        assert len(registry) == 9
        network = registry.get("compute_network", "vpc")
        assert network.attributes["name"] == "demo-vpc"
