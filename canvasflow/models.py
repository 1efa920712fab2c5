# canvasflow/models.py
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_serializer, model_validator

# scalar values a run-scoped variable may hold
VariableValue = Union[str, int, float, bool]


class PortType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ANY = "any"


class NodeStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class UpstreamFailurePolicy(str, Enum):
    """What happens to dependents of a node that ended in error."""

    RUN_ANYWAY = "run_anyway"  # run, without the failed node's port values
    SKIP = "skip"  # mark every transitive dependent as skipped
    ABORT = "abort"  # admit nothing new once any node has failed


class PortSlot(BaseModel):
    type: PortType = PortType.ANY
    value: Optional[Any] = None


class Node(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    label: Optional[str] = None
    status: NodeStatus = NodeStatus.IDLE
    inputs: Dict[str, PortSlot] = Field(default_factory=dict)
    outputs: Dict[str, PortSlot] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    # canvas layout; carried through untouched, never read by the engine
    position: Optional[Dict[str, Any]] = None

    # set when the node arrived in canvas shape, so it serializes back that way
    _canvas: bool = PrivateAttr(default=False)

    @model_validator(mode="wrap")
    @classmethod
    def _flatten_canvas_data(cls, values: Any, handler) -> "Node":
        # canvas documents nest everything but id/type/position under "data"
        canvas = isinstance(values, dict) and isinstance(values.get("data"), dict)
        if canvas:
            flat = {k: v for k, v in values.items() if k != "data"}
            for key, val in values["data"].items():
                flat.setdefault(key, val)
            values = flat
        node = handler(values)
        if canvas:
            node._canvas = True
        return node

    @model_serializer(mode="wrap")
    def _serialize(self, handler) -> Dict[str, Any]:
        dumped = handler(self)
        if not self._canvas:
            return dumped
        canvas = {"id": dumped.pop("id"), "type": dumped.pop("type")}
        if "position" in dumped:
            position = dumped.pop("position")
            if position is not None:
                canvas["position"] = position
        canvas["data"] = dumped
        return canvas

    @property
    def is_canvas(self) -> bool:
        return self._canvas

    def output_values(self) -> Dict[str, Any]:
        return {name: slot.value for name, slot in self.outputs.items()}


class Edge(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")


class ExecutionResult(BaseModel):
    success: bool
    # post-run snapshot; None only when the run was rejected structurally
    nodes: Optional[List[Node]] = None
    error: Optional[str] = None

    def node(self, node_id: str) -> Optional[Node]:
        for n in self.nodes or []:
            if n.id == node_id:
                return n
        return None
