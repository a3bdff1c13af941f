"""Causal Graph - directed "X contributes to Y" relations between identifiers.

Nodes are event, variable or pattern ids. The graph only grows during a
run; cycles are allowed, so every traversal tracks the nodes on its current
path.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import networkx as nx

logger = logging.getLogger(__name__)


class CausalGraph:
    """Append-only directed graph backed by networkx."""

    def __init__(self):
        self.graph = nx.DiGraph()

    def add_node(self, node_id: str) -> bool:
        """Add a node. Returns False if it already existed."""
        if node_id in self.graph:
            return False
        self.graph.add_node(node_id)
        return True

    def add_chain(self, chain: Sequence[str]) -> int:
        """
        Ensure every id is a node and every consecutive pair an edge.

        Re-adding an existing edge is a no-op.

        Returns:
            Number of edges that were new
        """
        for node_id in chain:
            self.add_node(node_id)

        added = 0
        for cause, effect in zip(chain, chain[1:]):
            if self.graph.has_edge(cause, effect):
                continue
            self.graph.add_edge(cause, effect)
            added += 1

        if added:
            logger.debug("Causal chain %s added %d edges", " -> ".join(chain), added)
        return added

    def has_edge(self, cause: str, effect: str) -> bool:
        return self.graph.has_edge(cause, effect)

    def successors(self, node_id: str) -> List[str]:
        if node_id not in self.graph:
            return []
        return list(self.graph.successors(node_id))

    def paths_from(
        self,
        start: str,
        max_depth: int = 16,
        max_paths: int = 32,
    ) -> List[List[str]]:
        """
        Enumerate maximal outgoing paths from start.

        A path ends when its last node has no successor off the path, or
        when it reaches max_depth nodes. Successors are visited in the
        order their edges were added.
        """
        if start not in self.graph:
            return []

        paths: List[List[str]] = []
        stack = [[start]]

        while stack and len(paths) < max_paths:
            path = stack.pop()
            on_path = set(path)
            nexts = [] if len(path) >= max_depth else [
                s for s in self.graph.successors(path[-1]) if s not in on_path
            ]
            if not nexts:
                paths.append(path)
                continue
            # Reverse so the first-added successor is explored first
            for succ in reversed(nexts):
                stack.append(path + [succ])

        return paths

    def reachable(self, start: str) -> List[str]:
        """All nodes reachable from start, breadth-first, start excluded."""
        if start not in self.graph:
            return []
        seen = {start}
        order = []
        frontier = [start]
        while frontier:
            nxt = []
            for node in frontier:
                for succ in self.graph.successors(node):
                    if succ not in seen:
                        seen.add(succ)
                        order.append(succ)
                        nxt.append(succ)
            frontier = nxt
        return order

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self.graph)

    @property
    def number_of_nodes(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def number_of_edges(self) -> int:
        return self.graph.number_of_edges()

    def nodes(self) -> List[str]:
        return list(self.graph.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.graph

    def extend(self, chains: Iterable[Sequence[str]]) -> int:
        return sum(self.add_chain(chain) for chain in chains)
