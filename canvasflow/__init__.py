# canvasflow/__init__.py
from .engine import WorkflowEngine
from .errors import (
    CycleError,
    DanglingEdgeError,
    DuplicateNodeError,
    EmptyWorkflowError,
    ProviderError,
    StructuralError,
)
from .documents import WorkflowDocument, load_workflow, parse_workflow
from .executors import Executor, ExecutorRegistry, PassThroughExecutor, default_registry
from .graph import DependencyGraph
from .models import (
    Edge,
    ExecutionResult,
    Node,
    NodeStatus,
    PortSlot,
    PortType,
    UpstreamFailurePolicy,
)
from .variables import substitute, substitute_in_object

__version__ = "0.1.0"

__all__ = [
    "WorkflowEngine",
    "DependencyGraph",
    "Executor",
    "ExecutorRegistry",
    "PassThroughExecutor",
    "default_registry",
    "Edge",
    "ExecutionResult",
    "Node",
    "NodeStatus",
    "PortSlot",
    "PortType",
    "UpstreamFailurePolicy",
    "StructuralError",
    "EmptyWorkflowError",
    "CycleError",
    "DanglingEdgeError",
    "DuplicateNodeError",
    "ProviderError",
    "substitute",
    "substitute_in_object",
    "WorkflowDocument",
    "parse_workflow",
    "load_workflow",
]
