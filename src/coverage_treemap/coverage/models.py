"""Data models for the coverage tree.

Hierarchy levels:
  Namespace: directory-derived grouping, totals are sums over descendants
  File:      one source file, totals from its coverable/covered line sets
  Method:    a line span inside a file, a derived view of the file's lines
"""

from dataclasses import dataclass, field
from typing import Iterator, Union


def coverage_percent(covered: int, coverable: int) -> int:
    """Whole-number coverage percentage; nothing coverable counts as 0%."""
    if coverable <= 0:
        return 0
    # Round half up rather than Python's banker's rounding
    return int(covered * 100 / coverable + 0.5)


@dataclass
class MethodNode:
    """A method span with its coverage and the tests that reach it."""

    name: str
    coverable: int = 0
    covered: int = 0
    tests: list[str] = field(default_factory=list)

    @property
    def short_name(self) -> str:
        """``Class::method`` -> ``method``."""
        return self.name.split("::")[-1]

    @property
    def percent(self) -> int:
        return coverage_percent(self.covered, self.coverable)


@dataclass
class FileNode:
    """A source file; totals are independent of its methods."""

    name: str
    full_path: str
    coverable: int = 0
    covered: int = 0
    methods: list[MethodNode] = field(default_factory=list)

    @property
    def percent(self) -> int:
        return coverage_percent(self.covered, self.coverable)


@dataclass
class NamespaceNode:
    """A namespace whose totals equal the sum over all descendant files."""

    name: str
    full_name: str
    coverable: int = 0
    covered: int = 0
    namespaces: list["NamespaceNode"] = field(default_factory=list)
    files: list[FileNode] = field(default_factory=list)

    @property
    def percent(self) -> int:
        return coverage_percent(self.covered, self.coverable)

    def child(self, name: str) -> "NamespaceNode":
        """Return the child namespace called *name*, creating it if needed."""
        for ns in self.namespaces:
            if ns.name == name:
                return ns
        full_name = f"{self.full_name}/{name}" if self.full_name else name
        created = NamespaceNode(name=name, full_name=full_name)
        self.namespaces.append(created)
        return created

    def walk(self) -> Iterator["NamespaceNode"]:
        """Yield this namespace and every nested namespace, depth first."""
        yield self
        for ns in self.namespaces:
            yield from ns.walk()

    def iter_files(self) -> Iterator[FileNode]:
        """Yield every file in this namespace and below."""
        for ns in self.walk():
            yield from ns.files

    def nesting_depth(self) -> int:
        """Levels of namespace nesting below this one (0 = no sub-namespaces)."""
        if not self.namespaces:
            return 0
        return 1 + max(ns.nesting_depth() for ns in self.namespaces)

    def has_files(self) -> bool:
        return any(True for _ in self.iter_files())

    def has_methods(self) -> bool:
        return any(f.methods for f in self.iter_files())


TreeNode = Union[NamespaceNode, FileNode, MethodNode]
