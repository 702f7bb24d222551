"""Dependency graph construction from ``cargo metadata`` output."""

from __future__ import annotations

import networkx as nx

from rootpkgws.cargo import MetadataError


def build_graph(metadata: dict) -> nx.DiGraph:
    """Build the resolved dependency graph.

    Nodes are package identifiers, added in the order cargo lists them, each
    with a ``repr`` attribute holding the raw identifier. An edge from A to
    B means A depends on B; today edges only serve to reject dependencies
    on packages missing from the resolve section.

    Args:
        metadata: Decoded ``cargo metadata --format-version 1`` document.

    Returns:
        The dependency graph.

    Raises:
        MetadataError: If there is no resolve section, or an edge points at
            a package missing from it.
    """
    resolve = metadata.get("resolve")
    if not resolve:
        raise MetadataError("cargo metadata has no resolved dependency graph")

    nodes = resolve.get("nodes") or []
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node["id"], repr=node["id"])

    for node in nodes:
        for dep_id in _node_dependencies(node):
            if dep_id not in graph:
                raise MetadataError(
                    f"{node['id']} depends on unresolved package {dep_id}"
                )
            graph.add_edge(node["id"], dep_id)

    return graph


def package_ids(graph: nx.DiGraph) -> list[str]:
    """Return the raw identifiers of all packages in insertion order."""
    return [data["repr"] for _, data in graph.nodes(data=True)]


def _node_dependencies(node: dict) -> list[str]:
    if "dependencies" in node:
        return list(node["dependencies"])
    return [dep["pkg"] for dep in node.get("deps", [])]
