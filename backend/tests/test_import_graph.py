"""
Tests for the Import Graph and Path Resolver.

Requires Python 3.11+.
"""

import os
from pathlib import Path

import pytest

from compiler.path_resolver import has_extension, normalize_source_path, resolve_import
from graph.import_graph import ImportGraph


class TestPathResolver:
    """Test cases for import path resolution."""

    def test_appends_default_extension(self):
        """Test a reference without extension gets .less."""
        assert resolve_import("/site/less", "buttons") == "/site/less/buttons.less"

    def test_keeps_existing_extension(self):
        """Test references with an extension are left alone."""
        assert resolve_import("/site/less", "reset.css") == "/site/less/reset.css"
        assert resolve_import("/site/less", "theme.less") == "/site/less/theme.less"

    def test_collapses_dot_segments(self):
        """Test ./ and ../ are normalized away."""
        assert resolve_import("/site/less/pages", "../shared/./mixins") == "/site/less/shared/mixins.less"

    def test_absolute_reference(self):
        """Test absolute references ignore the importer directory."""
        assert resolve_import("/site/less", "/vendor/grid.less") == "/vendor/grid.less"

    def test_missing_target_does_not_raise(self, tmp_path: Path):
        """Test resolution is lexical and never checks the disk."""
        resolved = resolve_import(tmp_path, "nope/never")
        assert resolved == os.path.join(str(tmp_path), "nope", "never.less")
        assert not os.path.exists(resolved)

    def test_custom_default_extension(self):
        """Test the inferred extension can be changed."""
        assert resolve_import("/a", "b", default_extension=".lessx") == "/a/b.lessx"

    def test_has_extension(self):
        """Test extension detection."""
        assert has_extension("a.less")
        assert not has_extension("a")
        assert not has_extension("dir.v2/a")

    def test_normalize_source_path(self):
        """Test filesystem paths get the same inference as references."""
        assert normalize_source_path("/a/./b") == "/a/b.less"
        assert normalize_source_path(Path("/a/b.less")) == "/a/b.less"


class TestImportGraph:
    """Test cases for ImportGraph."""

    @pytest.fixture
    def graph(self) -> ImportGraph:
        """Create an empty graph."""
        return ImportGraph()

    def test_record_and_query(self, graph: ImportGraph):
        """Test importers are found for their resolved imports."""
        graph.record_imports("/src/A.less", ["B", "sub/C.less"])

        assert graph.dependents_of("/src/B.less") == {"/src/A.less"}
        assert graph.dependents_of("/src/sub/C.less") == {"/src/A.less"}
        assert graph.dependents_of("/src/A.less") == set()

    def test_resolution_is_relative_to_importer(self, graph: ImportGraph):
        """Test references resolve against the importer's folder, not the root."""
        graph.record_imports("/src/sub/a.less", ["b"])

        assert graph.dependents_of("/src/sub/b.less") == {"/src/sub/a.less"}
        assert graph.dependents_of("/src/b.less") == set()

    def test_changed_path_without_extension(self, graph: ImportGraph):
        """Test the changed path gets the default extension before matching."""
        graph.record_imports("/src/A.less", ["B"])

        assert graph.dependents_of("/src/B") == {"/src/A.less"}
        assert graph.dependents_of(Path("/src/x/../B.less")) == {"/src/A.less"}

    def test_record_replaces_wholesale(self, graph: ImportGraph):
        """Test re-recording drops edges from the previous version."""
        graph.record_imports("/src/A.less", ["B"])
        graph.record_imports("/src/A.less", ["C"])

        assert graph.dependents_of("/src/B.less") == set()
        assert graph.dependents_of("/src/C.less") == {"/src/A.less"}
        assert graph.imports_of("/src/A.less") == frozenset({"/src/C.less"})

    def test_multiple_importers(self, graph: ImportGraph):
        """Test every importer of a shared file is returned."""
        graph.record_imports("/src/A.less", ["_vars"])
        graph.record_imports("/src/B.less", ["./_vars.less"])
        graph.record_imports("/src/C.less", [])

        assert graph.dependents_of("/src/_vars.less") == {"/src/A.less", "/src/B.less"}

    def test_forget_keeps_inbound_edges(self, graph: ImportGraph):
        """Test forgetting a file drops its own entry only."""
        graph.record_imports("/src/A.less", ["B"])
        graph.record_imports("/src/B.less", ["C"])

        assert graph.forget("/src/B.less") is True
        assert "/src/B.less" not in graph
        assert graph.dependents_of("/src/C.less") == set()
        assert graph.dependents_of("/src/B.less") == {"/src/A.less"}
        assert graph.forget("/src/B.less") is False

    def test_dangling_edges_are_harmless(self, graph: ImportGraph):
        """Test imports of files that never existed just never match."""
        graph.record_imports("/src/A.less", ["ghost"])

        assert graph.dependents_of("/src/other.less") == set()
        assert graph.transitive_dependents_of("/src/other.less") == set()

    def test_transitive_dependents(self, graph: ImportGraph):
        """Test importer chains are followed, including cycles."""
        graph.record_imports("/src/main.less", ["layout"])
        graph.record_imports("/src/layout.less", ["_vars"])
        graph.record_imports("/src/_vars.less", ["layout"])

        assert graph.transitive_dependents_of("/src/_vars.less") == {
            "/src/layout.less",
            "/src/main.less",
            "/src/_vars.less",
        }

    def test_stats_and_len(self, graph: ImportGraph):
        """Test graph statistics."""
        graph.record_imports("/src/A.less", ["B", "C"])
        graph.record_imports("/src/B.less", [])

        assert len(graph) == 2
        assert graph.stats() == {"tracked_files": 2, "total_edges": 2}

        graph.clear()
        assert len(graph) == 0
