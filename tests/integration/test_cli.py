"""Integration tests for CLI module."""

import pytest
from click.testing import CliRunner

from logquartz import __version__
from logquartz.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def graph(make_graph):
    return make_graph({
        "pages/Dune.md": "tags:: book\nicon:: 📚\nrating:: 5\n- A desert planet\n",
        "pages/Emma.md": "tags:: book\nrating:: 4\n- A matchmaker\n",
        "pages/Cyber Valley.md": "alias:: CV\n- home\n",
        "pages/cyber valley___districts.md": "- north and south\n",
        "journals/2024_08_16.md": "- DONE finished [[Dune]]\n",
    })


class TestCLIGroup:
    """Top-level options."""

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"logquartz, version {__version__}" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("build", "query", "resolve"):
            assert command in result.output


class TestBuildCommand:
    """Integration tests for CLI build command."""

    def test_build_writes_output(self, runner, graph, tmp_path):
        """Test a build publishes pages and prints the summary."""
        out = tmp_path / "out"

        result = runner.invoke(cli, ["build", "--input", str(graph), "--output", str(out), "--workers", "1"])

        assert result.exit_code == 0, result.output
        assert "Preprocessing complete" in result.output
        assert (out / "Dune.md").exists()
        assert (out / "cyber valley" / "districts.md").exists()
        assert (out / "journals" / "2024-08-16.md").exists()
        assert (out / "index.md").exists()

    def test_build_from_config_file(self, runner, graph, tmp_path):
        """Test graph and output can come from --config."""
        out = tmp_path / "site"
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"graph_path: {graph}\noutput_dir: {out}\ncreate_stubs: true\n")

        result = runner.invoke(cli, ["build", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert (out / "Emma.md").exists()

    def test_build_without_graph(self, runner):
        """Test a helpful error when no graph is configured."""
        result = runner.invoke(cli, ["build"])

        assert result.exit_code == 1
        assert "No graph path configured" in result.output

    def test_build_rejects_non_graph(self, runner, tmp_path):
        """Test a directory without pages/ is reported, not crashed on."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(cli, ["build", "--input", str(empty), "--output", str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "no pages/ directory" in result.output

    def test_build_invalid_workers(self, runner, graph):
        result = runner.invoke(cli, ["build", "--input", str(graph), "--workers", "0"])
        assert result.exit_code == 2


class TestQueryCommand:
    """Integration tests for CLI query command."""

    def test_query_list(self, runner, graph):
        """Test --list renders a bullet list of links."""
        result = runner.invoke(cli, ["query", "(page-tags [[book]])", "--input", str(graph), "--list"])

        assert result.exit_code == 0, result.output
        assert "- [[Dune|📚 Dune]]\n- [[Emma|Emma]]" in result.output

    def test_query_table_sorted(self, runner, graph):
        """Test table output with explicit columns and descending sort."""
        result = runner.invoke(cli, [
            "query", "{{query (page-tags [[book]])}}",
            "--input", str(graph),
            "--properties", "page, rating",
            "--sort-by", "rating",
            "--desc",
        ])

        assert result.exit_code == 0, result.output
        assert "| Page | Rating |" in result.output
        assert result.output.index("| 5 |") < result.output.index("| 4 |")

    def test_query_journals_by_date(self, runner, graph):
        """Test journal entries are queryable under their ISO names."""
        result = runner.invoke(cli, [
            "query", "(between [[2024-08-01]] [[2024-08-31]])", "--input", str(graph), "--list",
        ])

        assert result.exit_code == 0, result.output
        assert "[[journals/2024-08-16|" in result.output

    def test_query_without_matches(self, runner, graph):
        result = runner.invoke(cli, ["query", "(page-tags [[poetry]])", "--input", str(graph)])

        assert result.exit_code == 0
        assert "No pages match this query." in result.output


class TestResolveCommand:
    """Integration tests for CLI resolve command."""

    @pytest.mark.parametrize("link, expected", [
        ("[[cv]]", "Cyber Valley"),
        ("cv/districts", "cyber valley/districts"),
        ("Dune", "Dune"),
        ("Unknown Page", "Unknown Page"),
    ])
    def test_resolve(self, runner, graph, link, expected):
        result = runner.invoke(cli, ["resolve", link, "--input", str(graph)])

        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == expected
