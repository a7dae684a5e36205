"""Tests for aggregating coverage facts into the namespace tree."""

from coverage_treemap.config import TreemapConfig
from coverage_treemap.coverage import CoverageAccumulator, CoverageAggregator, build_tree

from conftest import BILLING, EMAIL, MAIN, USER


def _by_name(nodes):
    return {n.name: n for n in nodes}


def _check_sums(namespace):
    """Every namespace's totals equal the sum over its direct children."""
    coverable = sum(ns.coverable for ns in namespace.namespaces) + sum(f.coverable for f in namespace.files)
    covered = sum(ns.covered for ns in namespace.namespaces) + sum(f.covered for f in namespace.files)
    assert namespace.coverable == coverable, namespace.full_name
    assert namespace.covered == covered, namespace.full_name
    for ns in namespace.namespaces:
        _check_sums(ns)


class TestTreeShape:
    """Test namespace placement of files."""

    def test_top_level_sorted(self, tree):
        assert [ns.name for ns in tree] == ["app", "root"]

    def test_nested_namespaces(self, tree):
        app = tree[0]
        assert [ns.full_name for ns in app.namespaces] == ["app/models", "app/services"]
        assert app.files == []

    def test_files_in_source_root_use_default_namespace(self, tree):
        root = tree[1]
        assert [f.full_path for f in root.files] == [MAIN]

    def test_custom_default_namespace(self, accumulator):
        cfg = TreemapConfig(project_root="/repo", default_namespace="toplevel")
        tree = CoverageAggregator(cfg).build_from(accumulator, scan_sources=False)
        assert [ns.name for ns in tree] == ["app", "toplevel"]

    def test_every_file_appears_once(self, tree):
        paths = [f.full_path for ns in tree for f in ns.iter_files()]
        assert sorted(paths) == sorted([USER, BILLING, EMAIL, MAIN])


class TestTotals:
    """Test line counts at every level."""

    def test_file_totals(self, tree):
        files = {f.full_path: f for ns in tree for f in ns.iter_files()}
        assert (files[USER].coverable, files[USER].covered) == (6, 2)
        assert (files[BILLING].coverable, files[BILLING].covered) == (10, 4)
        assert (files[EMAIL].coverable, files[EMAIL].covered) == (3, 0)
        assert (files[MAIN].coverable, files[MAIN].covered) == (2, 1)

    def test_namespace_totals(self, tree):
        app, root = tree
        assert (app.coverable, app.covered) == (19, 6)
        assert (root.coverable, root.covered) == (2, 1)
        subs = _by_name(app.namespaces)
        assert (subs["models"].coverable, subs["models"].covered) == (6, 2)
        assert (subs["services"].coverable, subs["services"].covered) == (13, 4)

    def test_namespace_sums_hold_everywhere(self, tree):
        for ns in tree:
            _check_sums(ns)

    def test_covered_never_exceeds_coverable(self, tree):
        for ns in tree:
            for node in ns.walk():
                assert node.covered <= node.coverable
            for f in ns.iter_files():
                assert f.covered <= f.coverable
                for m in f.methods:
                    assert m.covered <= m.coverable

    def test_hits_on_non_coverable_lines_ignored(self, tree):
        # test_refund reports line 20 of billing.py, which is not coverable
        billing = next(f for ns in tree for f in ns.iter_files() if f.full_path == BILLING)
        assert billing.covered == 4

    def test_zero_hit_counts_are_not_coverage(self, tree):
        user = next(f for ns in tree for f in ns.iter_files() if f.full_path == USER)
        name = user.methods[0]
        assert name.name == "User::name"
        assert name.covered == 2


class TestMethods:
    """Test per-method coverage and test attribution."""

    def _methods(self, tree, path):
        file_node = next(f for ns in tree for f in ns.iter_files() if f.full_path == path)
        return {m.name: m for m in file_node.methods}

    def test_method_counts(self, tree):
        methods = self._methods(tree, BILLING)
        assert (methods["Billing::charge"].coverable, methods["Billing::charge"].covered) == (5, 3)
        assert (methods["Billing::refund"].coverable, methods["Billing::refund"].covered) == (5, 1)

    def test_tests_in_recording_order(self, tree):
        methods = self._methods(tree, BILLING)
        assert methods["Billing::charge"].tests == [
            "tests/test_user.py::test_name",
            "tests/test_billing.py::test_refund",
        ]
        assert methods["Billing::refund"].tests == ["tests/test_billing.py::test_refund"]

    def test_untested_method(self, tree):
        methods = self._methods(tree, USER)
        assert methods["User::save"].covered == 0
        assert methods["User::save"].tests == []

    def test_file_without_spans_has_no_methods(self, tree):
        assert self._methods(tree, EMAIL) == {}


class TestSources:
    """Test including files that have no coverage data."""

    def test_explicit_source_files(self, accumulator, config):
        extra = "/repo/src/app/util/strings.py"
        tree = CoverageAggregator(config).build_from(accumulator, source_files=[extra])
        app = tree[0]
        util = _by_name(app.namespaces)["util"]
        assert [f.name for f in util.files] == ["strings.py"]
        assert (util.coverable, util.covered) == (0, 0)
        assert app.coverable == 19

    def test_scanned_source_files(self, tmp_path):
        root = tmp_path.resolve()
        (root / "src" / "pkg").mkdir(parents=True)
        (root / "src" / "pkg" / "mod.py").write_text("x = 1\n")
        (root / "src" / "pkg" / "notes.txt").write_text("ignored\n")
        (root / "src" / "top.py").write_text("y = 2\n")

        acc = CoverageAccumulator()
        mod = (root / "src" / "pkg" / "mod.py").as_posix()
        acc.set_coverable_lines({mod: [1]})
        acc.add_test_coverage("t", {mod: {1: 1}})

        cfg = TreemapConfig(project_root=str(root))
        tree = build_tree(acc, cfg)

        names = _by_name(tree)
        assert set(names) == {"pkg", "root"}
        assert (names["pkg"].coverable, names["pkg"].covered) == (1, 1)
        assert [f.name for f in names["root"].files] == ["top.py"]

    def test_empty_input(self, config):
        tree = CoverageAggregator(config).build({}, {}, {})
        assert tree == []


class TestSingleFileScenario:
    """One file, one test, one method."""

    def test_file_and_method_counts(self):
        acc = CoverageAccumulator()
        acc.set_coverable_lines({"/repo/src/fileA.py": [1, 2, 3, 4]})
        acc.add_test_coverage("T1", {"/repo/src/fileA.py": {1: 1, 2: 1}})
        acc.set_method_map("/repo/src/fileA.py", {"M::f": [1, 2]})

        cfg = TreemapConfig(project_root="/repo")
        (root,) = CoverageAggregator(cfg).build_from(acc, scan_sources=False)

        (file_a,) = root.files
        assert (file_a.coverable, file_a.covered) == (4, 2)
        (method,) = file_a.methods
        assert method.name == "M::f"
        assert (method.coverable, method.covered) == (2, 2)
        assert method.tests == ["T1"]
        assert (root.coverable, root.covered) == (4, 2)
