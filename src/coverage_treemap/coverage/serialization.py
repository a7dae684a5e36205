"""Convert the coverage tree to and from plain JSON-compatible structures.

Field names match what the presentation shell reads::

    {
        "namespaces": [
            {
                "name": "services",
                "fullName": "app/services",
                "coverable": 120,
                "covered": 90,
                "files": [
                    {
                        "name": "billing.py",
                        "fullPath": "/repo/src/app/services/billing.py",
                        "coverable": 40,
                        "covered": 30,
                        "methods": [
                            {"name": "Billing::charge", "coverable": 8,
                             "covered": 8, "tests": ["tests/test_billing.py::test_charge"]}
                        ]
                    }
                ],
                "namespaces": []
            }
        ]
    }
"""

import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import CoverageDataError
from .models import FileNode, MethodNode, NamespaceNode


def method_to_dict(method: MethodNode) -> dict[str, Any]:
    return {
        "name": method.name,
        "coverable": method.coverable,
        "covered": method.covered,
        "tests": list(method.tests),
    }


def file_to_dict(file_node: FileNode) -> dict[str, Any]:
    return {
        "name": file_node.name,
        "fullPath": file_node.full_path,
        "coverable": file_node.coverable,
        "covered": file_node.covered,
        "methods": [method_to_dict(m) for m in file_node.methods],
    }


def namespace_to_dict(namespace: NamespaceNode) -> dict[str, Any]:
    return {
        "name": namespace.name,
        "fullName": namespace.full_name,
        "coverable": namespace.coverable,
        "covered": namespace.covered,
        "files": [file_to_dict(f) for f in namespace.files],
        "namespaces": [namespace_to_dict(ns) for ns in namespace.namespaces],
    }


def tree_to_dict(namespaces: list[NamespaceNode]) -> dict[str, Any]:
    """Serializable form of a whole tree."""
    return {"namespaces": [namespace_to_dict(ns) for ns in namespaces]}


def _method_from_dict(data: dict[str, Any]) -> MethodNode:
    return MethodNode(
        name=data["name"],
        coverable=int(data.get("coverable", 0)),
        covered=int(data.get("covered", 0)),
        tests=list(data.get("tests", [])),
    )


def _file_from_dict(data: dict[str, Any]) -> FileNode:
    return FileNode(
        name=data["name"],
        full_path=data.get("fullPath", data["name"]),
        coverable=int(data.get("coverable", 0)),
        covered=int(data.get("covered", 0)),
        methods=[_method_from_dict(m) for m in data.get("methods", [])],
    )


def _namespace_from_dict(data: dict[str, Any], parent: str = "") -> NamespaceNode:
    name = data["name"]
    full_name = data.get("fullName") or (f"{parent}/{name}" if parent else name)
    return NamespaceNode(
        name=name,
        full_name=full_name,
        coverable=int(data.get("coverable", 0)),
        covered=int(data.get("covered", 0)),
        files=[_file_from_dict(f) for f in data.get("files", [])],
        namespaces=[_namespace_from_dict(ns, full_name) for ns in data.get("namespaces", [])],
    )


def tree_from_dict(data: dict[str, Any], source: Optional[Path] = None) -> list[NamespaceNode]:
    """Rebuild a tree from :func:`tree_to_dict` output.

    Raises:
        CoverageDataError: If required fields are missing or mistyped
    """
    try:
        return [_namespace_from_dict(ns) for ns in data["namespaces"]]
    except (KeyError, TypeError, ValueError) as e:
        raise CoverageDataError(f"malformed tree: {e!r}", source)


def dumps_tree(namespaces: list[NamespaceNode], indent: Optional[int] = 2) -> str:
    return json.dumps(tree_to_dict(namespaces), indent=indent)
