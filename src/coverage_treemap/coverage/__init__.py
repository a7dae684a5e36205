"""Coverage aggregation: facts in, namespace -> file -> method tree out."""

from .accumulator import CoverageAccumulator
from .aggregator import CoverageAggregator, build_tree
from .discovery import SourceLayout
from .models import FileNode, MethodNode, NamespaceNode, TreeNode, coverage_percent
from .serialization import dumps_tree, tree_from_dict, tree_to_dict

__all__ = [
    "CoverageAccumulator",
    "CoverageAggregator",
    "build_tree",
    "SourceLayout",
    "NamespaceNode",
    "FileNode",
    "MethodNode",
    "TreeNode",
    "coverage_percent",
    "tree_to_dict",
    "tree_from_dict",
    "dumps_tree",
]
