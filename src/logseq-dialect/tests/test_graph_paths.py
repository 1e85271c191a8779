"""Tests for Logseq graph path operations."""

import pytest

from logseq_dialect.graph import GraphPaths


@pytest.fixture
def temp_graph(tmp_path):
    """Create a temporary Logseq graph structure."""
    graph_path = tmp_path / "test-graph"
    (graph_path / "journals").mkdir(parents=True)
    (graph_path / "pages").mkdir()
    return graph_path


class TestGraphPathsInitialization:
    """Tests for GraphPaths initialization."""

    def test_init_with_valid_path(self, temp_graph):
        graph = GraphPaths(temp_graph)
        assert graph.graph_path == temp_graph

    def test_init_with_nonexistent_path_raises_error(self, tmp_path):
        with pytest.raises(ValueError, match="Graph path does not exist"):
            GraphPaths(tmp_path / "does-not-exist")

    def test_init_with_file_raises_error(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("content")
        with pytest.raises(ValueError, match="Graph path is not a directory"):
            GraphPaths(file_path)


class TestGraphPathsProperties:
    """Tests for the directory properties."""

    def test_directories(self, temp_graph):
        graph = GraphPaths(temp_graph)
        assert graph.pages_dir == temp_graph / "pages"
        assert graph.journals_dir == temp_graph / "journals"
        assert graph.assets_dir == temp_graph / "assets"

    def test_config_edn_path(self, temp_graph):
        graph = GraphPaths(temp_graph)
        assert graph.config_edn == temp_graph / "logseq" / "config.edn"


class TestListing:
    """Tests for page and journal enumeration."""

    def test_list_pages_is_recursive_and_sorted(self, temp_graph):
        pages = temp_graph / "pages"
        (pages / "b.md").write_text("b")
        (pages / "a.md").write_text("a")
        (pages / "nested").mkdir()
        (pages / "nested" / "c.md").write_text("c")
        (pages / "notes.txt").write_text("not markdown")

        graph = GraphPaths(temp_graph)

        assert graph.list_pages() == [pages / "a.md", pages / "b.md", pages / "nested" / "c.md"]

    def test_list_journals_chronological(self, temp_graph):
        journals = temp_graph / "journals"
        for stem in ("2024_03_01", "2023_12_31", "2024_01_15"):
            (journals / f"{stem}.md").write_text("- entry")

        graph = GraphPaths(temp_graph)

        assert [p.stem for p in graph.list_journals()] == ["2023_12_31", "2024_01_15", "2024_03_01"]

    def test_missing_directories_list_nothing(self, tmp_path):
        graph = GraphPaths(tmp_path)
        assert graph.list_pages() == []
        assert graph.list_journals() == []


class TestLoadSources:
    """Tests for load_sources."""

    def test_sources_carry_graph_relative_paths(self, temp_graph):
        (temp_graph / "pages" / "Reading List.md").write_text("tags:: books\n")

        sources = list(GraphPaths(temp_graph).load_sources())

        assert len(sources) == 1
        assert sources[0].rel_path == "pages/Reading List.md"
        assert sources[0].text is None
        assert sources[0].read_text() == "tags:: books\n"

    def test_journal_sources(self, temp_graph):
        (temp_graph / "journals" / "2024_08_16.md").write_text("- hello")

        graph = GraphPaths(temp_graph)
        sources = list(graph.load_sources(graph.journals_dir))

        assert [s.rel_path for s in sources] == ["journals/2024_08_16.md"]
        assert sources[0].stem == "2024_08_16"
