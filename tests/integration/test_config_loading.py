"""Integration tests for configuration loading."""

import pytest
from pathlib import Path

from logquartz.config import load_config


@pytest.fixture
def graph_dir(tmp_path):
    graph = tmp_path / "logseq-graph"
    graph.mkdir()
    return graph


class TestConfigLoading:
    """Integration tests for YAML, environment and option layering."""

    def test_load_complete_config_from_file(self, tmp_path, graph_dir):
        """Test loading complete configuration from YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"""
graph_path: {graph_dir}
output_dir: {tmp_path / "content"}
include_private: true
workers: 3
site:
  title: My Garden
  favorites:
    - Dune
""")

        config = load_config(config_file)

        assert config.graph_path == graph_dir
        assert config.output_dir == tmp_path / "content"
        assert config.include_private is True
        assert config.create_stubs is False
        assert config.workers == 3
        assert config.site.title == "My Garden"
        assert config.site.favorites == ["Dune"]

    def test_missing_default_config_is_fine(self, graph_dir):
        """Test that options alone are enough when no config file exists."""
        config = load_config(graph_path=graph_dir)
        assert config.graph_path == graph_dir

    def test_missing_explicit_config_file(self, tmp_path):
        """Test that an explicitly given config path must exist."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "nope.yaml")

    def test_no_graph_path_anywhere(self):
        """Test helpful error when no source names a graph."""
        with pytest.raises(FileNotFoundError, match="No graph path configured"):
            load_config()

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is reported as a ValueError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("graph_path: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_file)

    def test_non_mapping_yaml(self, tmp_path):
        """Test that a YAML list is rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(config_file)

    def test_validation_error_wrapped(self, tmp_path):
        """Test that model validation failures become ValueError."""
        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(graph_path=tmp_path / "missing-graph")


class TestOverrides:
    """Environment variables override the file; options override both."""

    def test_env_overrides_file(self, tmp_path, graph_dir, monkeypatch):
        """Test LOGQUARTZ_* variables win over YAML values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"graph_path: {graph_dir}\nworkers: 2\n")
        monkeypatch.setenv("LOGQUARTZ_WORKERS", "5")
        monkeypatch.setenv("LOGQUARTZ_CREATE_STUBS", "yes")
        monkeypatch.setenv("LOGQUARTZ_OUTPUT_DIR", str(tmp_path / "out"))

        config = load_config(config_file)

        assert config.workers == 5
        assert config.create_stubs is True
        assert config.output_dir == tmp_path / "out"

    def test_env_graph_path(self, graph_dir, monkeypatch):
        """Test the graph path can come from the environment alone."""
        monkeypatch.setenv("LOGQUARTZ_GRAPH_PATH", str(graph_dir))
        assert load_config().graph_path == graph_dir

    def test_options_override_env(self, tmp_path, graph_dir, monkeypatch):
        """Test that non-None overrides beat environment variables."""
        monkeypatch.setenv("LOGQUARTZ_GRAPH_PATH", str(tmp_path / "elsewhere"))
        monkeypatch.setenv("LOGQUARTZ_INCLUDE_PRIVATE", "false")

        config = load_config(graph_path=graph_dir, include_private=True, workers=None)

        assert config.graph_path == graph_dir
        assert config.include_private is True

    def test_invalid_bool_env(self, graph_dir, monkeypatch):
        """Test that an unparseable boolean variable is an error."""
        monkeypatch.setenv("LOGQUARTZ_INCLUDE_PRIVATE", "maybe")

        with pytest.raises(ValueError, match="LOGQUARTZ_INCLUDE_PRIVATE"):
            load_config(graph_path=graph_dir)

    def test_invalid_workers_env(self, graph_dir, monkeypatch):
        """Test that a non-integer worker count is an error."""
        monkeypatch.setenv("LOGQUARTZ_WORKERS", "many")

        with pytest.raises(ValueError, match="must be an integer"):
            load_config(graph_path=graph_dir)
