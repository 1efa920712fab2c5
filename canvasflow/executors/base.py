# canvasflow/executors/base.py
import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

ExecutorInputs = Dict[str, Any]
ExecutorOutputs = Dict[str, Any]


class Executor(ABC):
    """Performs one node's work.

    Receives the node's resolved input values (keyed by input port) and its
    variable-substituted meta, and returns values keyed by output port. Raising
    marks the node as failed; the message becomes the node's error.
    """

    @abstractmethod
    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        ...


class PassThroughExecutor(Executor):
    """Default for node types with no registered executor.

    Returns nothing, so the node publishes the output values it already holds.
    """

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        return {}


class FunctionExecutor(Executor):
    """Adapts a plain sync or async callable (inputs, meta) -> outputs."""

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        if inspect.iscoroutinefunction(self.fn):
            res = await self.fn(inputs, meta)
        else:
            res = self.fn(inputs, meta)
            if inspect.iscoroutine(res):
                res = await res
        if res is None:
            return {}
        if not isinstance(res, dict):
            raise TypeError(f"executor returned {type(res).__name__}, expected dict")
        return res

    def __repr__(self) -> str:
        return f"FunctionExecutor({getattr(self.fn, '__name__', self.fn)!r})"


class ExecutorRegistry:
    def __init__(self, default: Optional[Executor] = None):
        self._executors: Dict[str, Executor] = {}
        self.default = default or PassThroughExecutor()

    def register(self, node_type: str, executor: Union[Executor, Callable[..., Any]]) -> Executor:
        if not isinstance(executor, Executor):
            if not callable(executor):
                raise TypeError(f"cannot register {executor!r} for {node_type}: not an Executor or callable")
            executor = FunctionExecutor(executor)
        self._executors[node_type] = executor
        return executor

    def executor(self, node_type: str):
        """Decorator form of register() for plain functions."""
        def decorator(fn):
            self.register(node_type, fn)
            return fn
        return decorator

    def get(self, node_type: str) -> Executor:
        return self._executors.get(node_type, self.default)

    def types(self) -> List[str]:
        return sorted(self._executors)

    def __contains__(self, node_type: str) -> bool:
        return node_type in self._executors
