"""Caller-owned store for coverage facts gathered during a test run.

The accumulator is created by whoever drives the test run, filled as tests
finish, and handed to :class:`~coverage_treemap.coverage.aggregator.CoverageAggregator`
once the run is complete. Nothing here is global; two runs never share state.

Structure:
    test_coverage:  test_id -> {file -> {line -> hit_count}}
    coverable_lines: file -> {line numbers}
    method_spans:   file -> {qualified_name -> (start_line, end_line)}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional

from ..exceptions import CoverageDataError
from ..logging_config import get_logger

logger = get_logger(__name__)

LineHits = dict[int, int]
Span = tuple[int, int]


class CoverageAccumulator:
    """Collects per-test line hits, coverable lines and method spans."""

    def __init__(self) -> None:
        self._test_coverage: dict[str, dict[str, LineHits]] = {}
        self._coverable_lines: dict[str, set[int]] = {}
        self._method_spans: dict[str, dict[str, Span]] = {}

    # ── Recording ──────────────────────────────────────────────

    def add_test_coverage(self, test_id: str, lines: Mapping[str, Mapping[int, int]]) -> None:
        """Record the lines one test executed, replacing any earlier record for it."""
        self._test_coverage[test_id] = {
            path: {int(line): int(hits) for line, hits in hits_by_line.items()}
            for path, hits_by_line in lines.items()
        }

    def set_coverable_lines(self, coverable: Mapping[str, Any]) -> None:
        """Replace the coverable-line sets for all files."""
        self._coverable_lines = {path: {int(n) for n in lines} for path, lines in coverable.items()}

    def set_method_map(self, path: str, methods: Mapping[str, Any]) -> None:
        """Replace the method spans recorded for one file."""
        spans: dict[str, Span] = {}
        for name, span in methods.items():
            start, end = (int(v) for v in span)
            if start > end:
                logger.debug(f"Reversed span for {name} in {path}: {start}-{end}")
                start, end = end, start
            spans[name] = (start, end)
        self._method_spans[path] = spans

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self._test_coverage.clear()
        self._coverable_lines.clear()
        self._method_spans.clear()

    # ── Access ─────────────────────────────────────────────────

    @property
    def test_coverage(self) -> dict[str, dict[str, LineHits]]:
        return self._test_coverage

    @property
    def coverable_lines(self) -> dict[str, set[int]]:
        return self._coverable_lines

    @property
    def method_spans(self) -> dict[str, dict[str, Span]]:
        return self._method_spans

    @property
    def test_count(self) -> int:
        return len(self._test_coverage)

    def __len__(self) -> int:
        return len(set(self._coverable_lines) | set(self._method_spans))

    # ── Serialization ──────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible form of the recorded facts."""
        return {
            "coverable": {path: sorted(lines) for path, lines in self._coverable_lines.items()},
            "tests": {
                test_id: {
                    path: {str(line): hits for line, hits in sorted(hits_by_line.items())}
                    for path, hits_by_line in files.items()
                }
                for test_id, files in self._test_coverage.items()
            },
            "methods": {
                path: {name: [start, end] for name, (start, end) in spans.items()}
                for path, spans in self._method_spans.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[Path] = None) -> CoverageAccumulator:
        """Rebuild an accumulator from :meth:`to_dict` output.

        Raises:
            CoverageDataError: If a section has the wrong shape
        """
        if not isinstance(data, Mapping):
            raise CoverageDataError("top level must be an object", source)

        acc = cls()
        try:
            acc.set_coverable_lines(data.get("coverable", {}))
            for test_id, files in data.get("tests", {}).items():
                acc.add_test_coverage(test_id, files)
            for path, methods in data.get("methods", {}).items():
                acc.set_method_map(path, methods)
        except (AttributeError, TypeError, ValueError) as e:
            raise CoverageDataError(f"malformed coverage facts: {e}", source)

        logger.debug(
            f"Loaded coverage facts: {len(acc.coverable_lines)} files, "
            f"{acc.test_count} tests, {len(acc.method_spans)} files with methods"
        )
        return acc

    @classmethod
    def load(cls, path: Path) -> CoverageAccumulator:
        """Read a coverage facts JSON document.

        Raises:
            CoverageDataError: If the file is missing or not valid JSON
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise CoverageDataError(f"cannot read file: {e}", path)
        except json.JSONDecodeError as e:
            raise CoverageDataError(f"not valid JSON: {e}", path)
        return cls.from_dict(data, source=path)
