# canvasflow/executors/inputs.py
from typing import Any, Dict

from .base import Executor, ExecutorInputs, ExecutorOutputs


class InputExecutor(Executor):
    # input nodes carry user-supplied values in their output ports already
    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        return {}


class VariableExecutor(Executor):
    """Emits meta["value"], falling back to the in_value input, then ""."""

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        value = meta.get("value")
        if value is None:
            value = inputs.get("in_value")
        return {"out_value": "" if value is None else value}


class OutputExecutor(Executor):
    # terminal display node: echo whatever arrived
    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        return dict(inputs)
