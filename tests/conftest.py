"""Shared fixtures and builders for canvasflow tests."""

import asyncio

import pytest

from canvasflow.executors import Executor, ExecutorRegistry
from canvasflow.models import Edge, Node, PortSlot


def make_node(node_id, node_type="step", outputs=None, inputs=None, meta=None):
    """Build a node; outputs/inputs map port name -> preset value (or None)."""
    return Node(
        id=node_id,
        type=node_type,
        outputs={k: PortSlot(type="any", value=v) for k, v in (outputs or {}).items()},
        inputs={k: PortSlot(type="any", value=v) for k, v in (inputs or {}).items()},
        meta=meta or {},
    )


def make_edge(source, target, source_handle="out", target_handle="in"):
    return Edge(
        id=f"{source}->{target}",
        source=source,
        target=target,
        sourceHandle=source_handle,
        targetHandle=target_handle,
    )


class RecordingExecutor(Executor):
    """Records every call and tracks how many invocations overlap."""

    def __init__(self, outputs=None, delay=0.01, fail_for=()):
        self.outputs = outputs or {}
        self.delay = delay
        self.fail_for = set(fail_for)
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def execute(self, inputs, meta):
        self.calls.append((dict(inputs), dict(meta)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if meta.get("name") in self.fail_for:
                raise RuntimeError(f"{meta['name']} exploded")
            return dict(self.outputs)
        finally:
            self.in_flight -= 1


@pytest.fixture
def recorder():
    return RecordingExecutor(outputs={"out": "value"})


@pytest.fixture
def registry(recorder):
    reg = ExecutorRegistry()
    reg.register("step", recorder)
    return reg
