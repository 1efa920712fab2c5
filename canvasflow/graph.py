# canvasflow/graph.py
"""Dependency graph over a workflow's nodes and edges.

Builds successor, in-degree and incoming-edge indexes once, then answers the
structural questions the engine asks before running anything: is there a cycle,
and what is a valid execution order.
"""
from collections import deque
from typing import Dict, Iterable, List, Optional

from .errors import DanglingEdgeError, DuplicateNodeError
from .models import Edge


class DependencyGraph:
    def __init__(self, node_ids: Iterable[str], edges: Iterable[Edge]):
        self.successors: Dict[str, List[str]] = {}
        self.in_degree: Dict[str, int] = {}
        self.incoming_edges: Dict[str, List[Edge]] = {}

        for node_id in node_ids:
            if node_id in self.successors:
                raise DuplicateNodeError(node_id)
            self.successors[node_id] = []
            self.in_degree[node_id] = 0
            self.incoming_edges[node_id] = []

        for edge in edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in self.successors:
                    raise DanglingEdgeError(edge.id, endpoint)
            # one entry per edge, so parallel edges are counted twice on purpose
            self.successors[edge.source].append(edge.target)
            self.in_degree[edge.target] += 1
            self.incoming_edges[edge.target].append(edge)

    @property
    def node_ids(self) -> List[str]:
        return list(self.successors)

    def get_successors(self, node_id: str) -> List[str]:
        return self.successors.get(node_id, [])

    def get_in_degree(self, node_id: str) -> int:
        return self.in_degree.get(node_id, 0)

    def get_incoming_edges(self, node_id: str) -> List[Edge]:
        return self.incoming_edges.get(node_id, [])

    def detect_cycle(self) -> Optional[List[str]]:
        """Return the nodes of the first cycle found, in edge order, or None.

        Iterative DFS with an explicit recursion stack so deep chains do not hit
        the interpreter's recursion limit. Every component is visited.
        """
        visited = set()
        on_stack = set()
        path: List[str] = []

        for root in self.successors:
            if root in visited:
                continue
            # each frame is (node, iterator over its successors)
            stack = [(root, iter(self.successors[root]))]
            visited.add(root)
            on_stack.add(root)
            path.append(root)
            while stack:
                node, children = stack[-1]
                advanced = False
                for child in children:
                    if child in on_stack:
                        return path[path.index(child):]
                    if child not in visited:
                        visited.add(child)
                        on_stack.add(child)
                        path.append(child)
                        stack.append((child, iter(self.successors[child])))
                        advanced = True
                        break
                if not advanced:
                    stack.pop()
                    on_stack.discard(node)
                    path.pop()
        return None

    def topological_sort(self) -> List[str]:
        """Kahn's algorithm. Nodes on a cycle are left out of the result."""
        in_degree = dict(self.in_degree)
        queue = deque(n for n, d in in_degree.items() if d == 0)
        order: List[str] = []
        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for succ in self.successors[node_id]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    queue.append(succ)
        return order

    def descendants(self, node_id: str) -> List[str]:
        """Every node reachable from node_id, excluding itself, breadth first."""
        seen = {node_id}
        order: List[str] = []
        queue = deque(self.get_successors(node_id))
        while queue:
            nid = queue.popleft()
            if nid in seen:
                continue
            seen.add(nid)
            order.append(nid)
            queue.extend(self.successors[nid])
        return order
