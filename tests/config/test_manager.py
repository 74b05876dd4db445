"""Tests for layered settings."""

import pytest
from infragraph.config.manager import STATE_PATH_ENV, load_settings
from infragraph.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run with an empty home and working directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(STATE_PATH_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadSettings:
    """Test settings layering."""

    def test_defaults(self):
        settings = load_settings()

        assert settings.state.path == "infragraph.state.json"
        assert settings.apply.concurrency == 4
        assert settings.retry.max_attempts == 5
        assert settings.provider.class_path == "infragraph.providers.local:LocalProvider"
        assert "compute_subnetwork" in settings.resource_types
        assert "ip_cidr_range" in settings.resource_types["compute_subnetwork"].force_new

    def test_layers_override_in_order(self, isolated):
        write(isolated / "home" / ".infragraph" / "config.yaml", "apply:\n  concurrency: 2\nstate:\n  path: user.json\n")
        write(isolated / ".infragraph" / "config.yaml", "apply:\n  concurrency: 3\n")

        settings = load_settings()

        assert settings.apply.concurrency == 3
        assert settings.state.path == "user.json"

    def test_explicit_file_wins(self, isolated):
        write(isolated / ".infragraph" / "config.yaml", "apply:\n  concurrency: 3\n")
        explicit = write(isolated / "ci.yaml", "apply:\n  concurrency: 8\n")

        assert load_settings(str(explicit)).apply.concurrency == 8

    def test_deep_merge_keeps_sibling_keys(self, isolated):
        explicit = write(isolated / "ci.yaml", "retry:\n  max_attempts: 2\n")

        settings = load_settings(str(explicit))

        assert settings.retry.max_attempts == 2
        assert settings.retry.max_wait == 30.0

    def test_extra_resource_type(self, isolated):
        explicit = write(
            isolated / "ci.yaml",
            "resource_types:\n  storage_bucket:\n    required: [name, location]\n    force_new: [name]\n"
        )

        settings = load_settings(str(explicit))

        assert settings.resource_types["storage_bucket"].required == ["name", "location"]
        assert "pubsub_topic" in settings.resource_types

    def test_state_path_env_override(self, monkeypatch):
        monkeypatch.setenv(STATE_PATH_ENV, "/tmp/override.json")

        assert load_settings().state.path == "/tmp/override.json"


class TestInvalidSettings:
    """Test configuration errors."""

    def test_missing_explicit_file(self):
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings("missing.yaml")

    def test_invalid_concurrency(self, isolated):
        explicit = write(isolated / "ci.yaml", "apply:\n  concurrency: 0\n")

        with pytest.raises(ConfigurationError, match="Invalid settings"):
            load_settings(str(explicit))

    def test_non_mapping(self, isolated):
        explicit = write(isolated / "ci.yaml", "- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="must contain a dictionary"):
            load_settings(str(explicit))

    def test_invalid_yaml(self, isolated):
        explicit = write(isolated / "ci.yaml", "apply: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(str(explicit))
