"""Fold raw coverage facts into a namespace -> file -> method tree.

Every file known to any source (coverable-line data, method spans or the
source scan) becomes a :class:`FileNode`. Inserting a file adds its counts
to every namespace on its path, so namespace totals always equal the sum of
their descendants without a second pass.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Mapping
from typing import Optional

from ..config import TreemapConfig
from ..logging_config import get_logger
from .accumulator import CoverageAccumulator
from .discovery import SourceLayout
from .models import FileNode, MethodNode, NamespaceNode

logger = get_logger(__name__)


class CoverageAggregator:
    """Builds the coverage tree once a test run has finished."""

    def __init__(self, config: Optional[TreemapConfig] = None, layout: Optional[SourceLayout] = None):
        self.config = config or TreemapConfig()
        self.layout = layout or SourceLayout.from_config(self.config)

    def build_from(
        self,
        accumulator: CoverageAccumulator,
        source_files: Optional[Iterable[str]] = None,
        scan_sources: bool = True,
    ) -> list[NamespaceNode]:
        """Build the tree from an accumulator, scanning source roots unless told not to."""
        if source_files is None and scan_sources:
            source_files = self.layout.discover()
        return self.build(
            accumulator.coverable_lines,
            accumulator.test_coverage,
            accumulator.method_spans,
            source_files=source_files,
        )

    def build(
        self,
        coverable_lines: Mapping[str, Iterable[int]],
        test_coverage: Mapping[str, Mapping[str, Mapping[int, int]]],
        method_spans: Mapping[str, Mapping[str, tuple[int, int]]],
        source_files: Optional[Iterable[str]] = None,
        default_namespace: Optional[str] = None,
    ) -> list[NamespaceNode]:
        """Aggregate coverage facts into top-level namespaces sorted by name.

        Args:
            coverable_lines: file -> executable line numbers
            test_coverage: test id -> file -> {line -> hit count}
            method_spans: file -> qualified method name -> (start, end), inclusive
            source_files: Extra files to include even without coverage data
            default_namespace: Namespace for files directly in a source root

        Returns:
            Top-level namespace nodes
        """
        default_namespace = default_namespace or self.config.default_namespace
        hits_by_file = _index_hits(test_coverage)

        all_files = set(coverable_lines) | set(method_spans)
        if source_files is not None:
            all_files.update(source_files)

        roots: dict[str, NamespaceNode] = {}

        for path in sorted(all_files):
            file_node = self._build_file(
                path,
                set(coverable_lines.get(path, ())),
                hits_by_file.get(path, []),
                method_spans.get(path, {}),
            )

            namespace = self.layout.namespace_for(path)
            parts = namespace.split("/") if namespace else [default_namespace]

            top = parts[0]
            if top not in roots:
                roots[top] = NamespaceNode(name=top, full_name=top)
            node = roots[top]
            _add_totals(node, file_node)
            for part in parts[1:]:
                node = node.child(part)
                _add_totals(node, file_node)
            node.files.append(file_node)

        result = sorted(roots.values(), key=lambda ns: ns.name)

        total_coverable = sum(ns.coverable for ns in result)
        total_covered = sum(ns.covered for ns in result)
        logger.info(
            f"Built coverage tree: {len(all_files)} files in {len(result)} top-level "
            f"namespaces, {total_covered}/{total_coverable} lines covered"
        )
        return result

    @staticmethod
    def _build_file(
        path: str,
        coverable: set[int],
        test_hits: list[tuple[str, set[int]]],
        spans: Mapping[str, tuple[int, int]],
    ) -> FileNode:
        covered_lines: set[int] = set()
        for _, hit_lines in test_hits:
            covered_lines |= hit_lines

        methods = []
        for name, (start, end) in spans.items():
            method_coverable = {line for line in coverable if start <= line <= end}
            method_covered = method_coverable & covered_lines
            tests = [test_id for test_id, hit_lines in test_hits if method_coverable & hit_lines]
            methods.append(
                MethodNode(
                    name=name,
                    coverable=len(method_coverable),
                    covered=len(method_covered),
                    tests=tests,
                )
            )

        return FileNode(
            name=posixpath.basename(path.replace("\\", "/")),
            full_path=path,
            coverable=len(coverable),
            covered=len(coverable & covered_lines),
            methods=methods,
        )


def _index_hits(
    test_coverage: Mapping[str, Mapping[str, Mapping[int, int]]],
) -> dict[str, list[tuple[str, set[int]]]]:
    """file -> [(test id, lines that test executed)], tests in recording order."""
    index: dict[str, list[tuple[str, set[int]]]] = {}
    for test_id, files in test_coverage.items():
        for path, hits in files.items():
            executed = {int(line) for line, count in hits.items() if count > 0}
            if executed:
                index.setdefault(path, []).append((test_id, executed))
    return index


def _add_totals(namespace: NamespaceNode, file_node: FileNode) -> None:
    namespace.coverable += file_node.coverable
    namespace.covered += file_node.covered


def build_tree(
    accumulator: CoverageAccumulator,
    config: Optional[TreemapConfig] = None,
    source_files: Optional[Iterable[str]] = None,
    scan_sources: bool = True,
) -> list[NamespaceNode]:
    """Convenience wrapper: aggregate an accumulator with the given config."""
    return CoverageAggregator(config).build_from(
        accumulator, source_files=source_files, scan_sources=scan_sources
    )
