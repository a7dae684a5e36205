"""Depth-limited views of the coverage tree, ready for one layout pass.

A view starts at the children of whatever is being looked at (the project's
top-level namespaces, one namespace, or one file) and spends a depth budget
walking down: each level of nested namespaces costs one unit, revealing a
namespace's files costs one, and revealing a file's methods costs one more.
Depth 0 is always the flat list of immediate children.
"""

from typing import Optional, Sequence, Union

from ..coverage.models import FileNode, MethodNode, NamespaceNode
from .models import LayoutItem

ViewTarget = Union[NamespaceNode, FileNode, Sequence[NamespaceNode]]

KIND_NAMESPACE = "namespace"
KIND_FILE = "file"
KIND_METHOD = "method"


def subtree_depth(namespace: NamespaceNode) -> int:
    """Deepest useful budget for a namespace shown as an item.

    ``nesting + (1 if any files) + (1 if any methods)``.
    """
    depth = namespace.nesting_depth()
    if namespace.has_files():
        depth += 1
    if namespace.has_methods():
        depth += 1
    return depth


class HierarchyProjector:
    """Turns tree nodes into nested :class:`LayoutItem` lists."""

    def __init__(self, zero_weight: float = 0.5):
        if zero_weight <= 0:
            raise ValueError("zero_weight must be positive")
        self.zero_weight = zero_weight

    def _weight(self, coverable: int) -> float:
        # Nothing coverable would collapse to no area at all
        return float(coverable) if coverable > 0 else self.zero_weight

    # ── Items ──────────────────────────────────────────────────

    def _method_item(self, file_node: FileNode, method: MethodNode, tag: int) -> LayoutItem:
        return LayoutItem(
            id=f"{file_node.full_path}#{method.name}",
            weight=self._weight(method.coverable),
            payload=method,
            label=method.short_name,
            kind=KIND_METHOD,
            depth=tag,
        )

    def _file_item(self, file_node: FileNode, budget: int, tag: int) -> LayoutItem:
        children = None
        if budget > 0 and file_node.methods:
            children = tuple(self._method_item(file_node, m, tag + 1) for m in file_node.methods)
        return LayoutItem(
            id=file_node.full_path,
            weight=self._weight(file_node.coverable),
            payload=file_node,
            label=file_node.name,
            kind=KIND_FILE,
            depth=tag,
            children=children,
        )

    def _namespace_item(self, namespace: NamespaceNode, budget: int, tag: int) -> LayoutItem:
        children: list[LayoutItem] = []
        if budget > 0:
            children.extend(self._namespace_item(ns, budget - 1, tag + 1) for ns in namespace.namespaces)
            children.extend(self._file_item(f, budget - 1, tag + 1) for f in namespace.files)
        return LayoutItem(
            id=namespace.full_name,
            weight=self._weight(namespace.coverable),
            payload=namespace,
            label=namespace.name,
            kind=KIND_NAMESPACE,
            depth=tag,
            children=tuple(children) if children else None,
        )

    # ── Views ──────────────────────────────────────────────────

    def project_roots(self, namespaces: Sequence[NamespaceNode], depth: int = 0) -> list[LayoutItem]:
        """Project-level view: one item per top-level namespace."""
        depth = max(0, depth)
        return [self._namespace_item(ns, depth, 0) for ns in namespaces]

    def project_namespace(self, namespace: NamespaceNode, depth: int = 0) -> list[LayoutItem]:
        """Inside one namespace: its sub-namespaces followed by its own files."""
        depth = max(0, depth)
        items = [self._namespace_item(ns, depth, 0) for ns in namespace.namespaces]
        items.extend(self._file_item(f, depth, 0) for f in namespace.files)
        return items

    def project_file(self, file_node: FileNode, depth: int = 0) -> list[LayoutItem]:
        """Inside one file: its methods. Methods are leaves, so depth has no effect."""
        return [self._method_item(file_node, m, 0) for m in file_node.methods]

    def project(self, target: ViewTarget, depth: int = 0) -> list[LayoutItem]:
        """Dispatch on what is being viewed."""
        if isinstance(target, NamespaceNode):
            return self.project_namespace(target, depth)
        if isinstance(target, FileNode):
            return self.project_file(target, depth)
        return self.project_roots(target, depth)

    # ── Depth queries ──────────────────────────────────────────

    @staticmethod
    def max_depth(target: ViewTarget) -> int:
        """Largest depth that still reveals something new for *target*'s view."""
        if isinstance(target, FileNode):
            return 0
        if isinstance(target, NamespaceNode):
            own_methods = 1 if any(f.methods for f in target.files) else 0
            nested = [subtree_depth(ns) for ns in target.namespaces]
            return max([own_methods, *nested])
        return max((subtree_depth(ns) for ns in target), default=0)

    def clamp_depth(self, target: ViewTarget, requested: Optional[int]) -> int:
        """Bring a requested depth into ``[0, max_depth(target)]``."""
        if requested is None or requested < 0:
            return 0
        return min(requested, self.max_depth(target))


def count_items(items: Sequence[LayoutItem]) -> int:
    """Number of items in *items* including every nested child."""
    total = 0
    for item in items:
        total += 1
        if item.children:
            total += count_items(item.children)
    return total
