# -----------------------------------------------------------------------------
# Graph: directed, weighted unit graph with BFS shortest paths
# Purpose:
#   Store the units of one category as nodes and the conversions between them
#   as directed edges, and find the fewest-hop route between two units.
# Notes:
#   - Hop count, not weight, is minimized: every hop is a conversion step, so
#     fewer hops means less compounded float error and fewer formula calls.
#   - Node values are deduplicated; a value → index dict sits beside the
#     ordered node list so lookups stay O(1) and iteration keeps insertion order.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

N = TypeVar("N", bound=Hashable)
E = TypeVar("E")

log = logging.getLogger(__name__)


class NodeMissingError(IndexError):
    """An edge referenced a node index that is not in the graph."""


@dataclass
class NodeData(Generic[N]):
    value: N
    edges: List[int] = field(default_factory=list)  # indices into Graph.edges


@dataclass
class EdgeData(Generic[E]):
    target: int
    weight: E


class Graph(Generic[N, E]):
    def __init__(self, id: str = ""):
        # `id` names the graph (the unit category it holds)
        self.id = id
        self.nodes: List[NodeData[N]] = []
        self.edges: List[EdgeData[E]] = []
        self._index: Dict[N, int] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, value: N) -> int:
        """Insert `value` and return its index; an existing equal value returns its index."""
        existing = self._index.get(value)
        if existing is not None:
            return existing
        index = len(self.nodes)
        log.debug("Inserting new node for value %r at index %d", value, index)
        self.nodes.append(NodeData(value))
        self._index[value] = index
        return index

    def add_edge(self, source: int, target: int, weight: E) -> None:
        """Add a directed edge source → target. Raises NodeMissingError for unknown indices."""
        if not (0 <= source < len(self.nodes)) or not (0 <= target < len(self.nodes)):
            log.warning(
                "Failed to create edge; at least one node does not exist (source: %d, target: %d)",
                source, target,
            )
            raise NodeMissingError(f"Node does not exist (source: {source}, target: {target})")
        self.nodes[source].edges.append(len(self.edges))
        self.edges.append(EdgeData(target, weight))

    def get_node_index(self, value: N) -> Optional[int]:
        return self._index.get(value)

    def node_value(self, index: int) -> N:
        return self.nodes[index].value

    def get_edge_weight(self, source: int, target: int) -> Optional[E]:
        """Weight of the first edge source → target, or None when there is none."""
        if not (0 <= source < len(self.nodes)) or not (0 <= target < len(self.nodes)):
            log.warning("Edge weight requested for out-of-bounds node (%d, %d)", source, target)
            return None
        for edge_index in self.nodes[source].edges:
            edge = self.edges[edge_index]
            if edge.target == target:
                return edge.weight
        return None

    def shortest_path(self, source: int, target: int) -> List[Tuple[N, E]]:
        """
        Breadth-first search from `source` to `target`.
        Returns [(node_value, edge_weight), ...] in traversal order, where each
        entry is the node reached and the weight of the edge used to reach it.
        Empty when source == target or when target is unreachable.
        """
        if source == target:
            return []

        # predecessor[node] = (previous node, edge index used to reach node)
        predecessor: Dict[int, Tuple[int, int]] = {}
        visited = {source}
        queue = deque([source])

        while queue and target not in visited:
            node = queue.popleft()
            for edge_index in self.nodes[node].edges:
                nxt = self.edges[edge_index].target
                if nxt in visited:
                    continue
                visited.add(nxt)
                predecessor[nxt] = (node, edge_index)
                if nxt == target:
                    break
                queue.append(nxt)

        if target not in predecessor:
            return []

        path: List[Tuple[N, E]] = []
        node = target
        while node != source:
            prev, edge_index = predecessor[node]
            path.append((self.nodes[node].value, self.edges[edge_index].weight))
            node = prev
        path.reverse()
        return path
