# canvasflow/errors.py
from typing import List


class StructuralError(Exception):
    """The node/edge set cannot be run at all. Raised before any node executes."""


class EmptyWorkflowError(StructuralError):
    def __init__(self):
        super().__init__("No nodes to execute")


class CycleError(StructuralError):
    def __init__(self, path: List[str]):
        self.path = list(path)
        super().__init__("Cycle detected: " + " → ".join(self.path))


class DanglingEdgeError(StructuralError):
    def __init__(self, edge_id: str, node_id: str):
        self.edge_id = edge_id
        self.node_id = node_id
        super().__init__(f"Edge {edge_id} references unknown node {node_id}")


class DuplicateNodeError(StructuralError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate node id {node_id}")


class ProviderError(Exception):
    """A generative provider failed or answered with success=false."""
