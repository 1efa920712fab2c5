# canvasflow/engine.py
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from .errors import CycleError, EmptyWorkflowError, StructuralError
from .executors import ExecutorRegistry, default_registry
from .graph import DependencyGraph
from .models import (
    Edge,
    ExecutionResult,
    Node,
    NodeStatus,
    UpstreamFailurePolicy,
    VariableValue,
)
from .variables import substitute_in_object

logger = logging.getLogger(__name__)


def _check_limit(limit: int) -> int:
    if limit < 1:
        raise ValueError("concurrency_limit must be at least 1")
    return limit


class _Run:
    """State of one execute() call.

    Workers pull ready node ids from a queue. A node becomes ready once every
    edge into it has had its source reach a terminal state; the worker that
    finishes a node is the only writer of that node's slot in `outputs`, and
    the slot is written before any successor can be queued.
    """

    def __init__(
        self,
        run_id: str,
        nodes: Sequence[Node],
        graph: DependencyGraph,
        registry: ExecutorRegistry,
        variables: Mapping[str, VariableValue],
        limit: int,
        policy: UpstreamFailurePolicy,
    ):
        self.run_id = run_id
        self.graph = graph
        self.registry = registry
        self.variables = variables
        self.limit = limit
        self.policy = policy

        self.nodes: Dict[str, Node] = {}
        for node in nodes:
            snapshot = node.model_copy(deep=True)
            snapshot.status = NodeStatus.IDLE
            snapshot.error = None
            self.nodes[node.id] = snapshot

        self.remaining: Dict[str, int] = dict(graph.in_degree)
        self.pending: Set[str] = set(self.nodes)
        self.completed: Set[str] = set()
        self.outputs: Dict[str, Dict[str, Any]] = {}
        self.in_flight = 0
        self.peak_in_flight = 0
        self.aborted = False
        self.queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
        self.workers = 0

    async def drive(self):
        for node_id in self.graph.topological_sort():
            if self.remaining[node_id] == 0:
                self.queue.put_nowait(node_id)
        self.workers = min(self.limit, len(self.nodes))
        if self.queue.empty():
            self._stop()
        tasks = [asyncio.ensure_future(self._worker()) for _ in range(self.workers)]
        try:
            await asyncio.gather(*tasks)
        finally:
            # a worker that raised leaves its siblings parked on the queue
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _worker(self):
        while True:
            node_id = await self.queue.get()
            if node_id is None:
                return
            if node_id in self.pending and not self.aborted:
                self.pending.discard(node_id)
                self.in_flight += 1
                self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
                try:
                    await self._run_node(node_id)
                finally:
                    self.in_flight -= 1
                self.completed.add(node_id)
                self._release(node_id)
            if self.in_flight == 0 and self.queue.empty():
                self._stop()

    def _stop(self):
        if self.pending and not self.aborted:
            # unreachable after structural validation unless nodes were skipped
            stuck = [n for n in self.pending if self.nodes[n].status is NodeStatus.IDLE]
            if stuck:
                logger.warning("run %s stopped with %d node(s) never ready: %s", self.run_id, len(stuck), sorted(stuck))
        for _ in range(self.workers):
            self.queue.put_nowait(None)

    def _release(self, node_id: str):
        if self.aborted:
            return
        for succ in self.graph.get_successors(node_id):
            self.remaining[succ] -= 1
            if self.remaining[succ] == 0:
                self.queue.put_nowait(succ)

    def _gather_inputs(self, node_id: str) -> Dict[str, Any]:
        inputs: Dict[str, Any] = {}
        for edge in self.graph.get_incoming_edges(node_id):
            source_outputs = self.outputs.get(edge.source)
            # failed sources publish nothing; their consumers see the port as absent
            if source_outputs is None or not edge.source_handle or not edge.target_handle:
                continue
            inputs[edge.target_handle] = source_outputs.get(edge.source_handle)
        return inputs

    async def _run_node(self, node_id: str):
        node = self.nodes[node_id]
        node.status = NodeStatus.RUNNING
        inputs = self._gather_inputs(node_id)
        executor = self.registry.get(node.type)
        logger.debug("run %s: node %s (%s) running with %s", self.run_id, node_id, node.type, type(executor).__name__)
        try:
            meta = substitute_in_object(node.meta, self.variables)
            produced = await executor.execute(inputs, meta)
            if not isinstance(produced, dict):
                raise TypeError(f"executor returned {type(produced).__name__}, expected dict")
        except Exception as e:
            logger.exception("run %s: node %s (%s) failed; inputs=%r", self.run_id, node_id, node.type, inputs)
            node.status = NodeStatus.ERROR
            node.error = str(e) or "Execution failed"
            self._on_failure(node_id)
            return

        for port, value in produced.items():
            slot = node.outputs.get(port)
            if slot is not None:
                slot.value = value
        node.status = NodeStatus.SUCCESS
        self.outputs[node_id] = node.output_values()

    def _on_failure(self, node_id: str):
        if self.policy is UpstreamFailurePolicy.ABORT:
            self.aborted = True
            logger.info("run %s: aborting after failure of %s", self.run_id, node_id)
        elif self.policy is UpstreamFailurePolicy.SKIP:
            for dependent in self.graph.descendants(node_id):
                if dependent not in self.pending:
                    continue
                self.pending.discard(dependent)
                self.completed.add(dependent)
                skipped = self.nodes[dependent]
                skipped.status = NodeStatus.ERROR
                skipped.error = f"Skipped: upstream node '{node_id}' failed"

    def result(self) -> ExecutionResult:
        snapshot = list(self.nodes.values())
        failed = [n for n in snapshot if n.status is NodeStatus.ERROR]
        if failed:
            return ExecutionResult(
                success=False,
                nodes=snapshot,
                error=failed[0].error or "Workflow execution failed",
            )
        return ExecutionResult(success=True, nodes=snapshot)


class WorkflowEngine:
    """Runs a workflow graph with bounded concurrency.

    Holds no state between runs; every execute() call builds its own graph and
    per-run bookkeeping, so one engine may serve concurrent callers.
    """

    def __init__(
        self,
        registry: Optional[ExecutorRegistry] = None,
        concurrency_limit: int = 3,
        upstream_failure: UpstreamFailurePolicy = UpstreamFailurePolicy.RUN_ANYWAY,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.concurrency_limit = _check_limit(concurrency_limit)
        self.upstream_failure = UpstreamFailurePolicy(upstream_failure)

    def register_executor(self, node_type: str, executor):
        return self.registry.register(node_type, executor)

    def validate(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> DependencyGraph:
        """Build the dependency graph, raising StructuralError if it cannot run."""
        if not nodes:
            raise EmptyWorkflowError()
        graph = DependencyGraph([n.id for n in nodes], edges)
        cycle = graph.detect_cycle()
        if cycle:
            raise CycleError(cycle)
        return graph

    async def execute(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        variables: Optional[Mapping[str, VariableValue]] = None,
        concurrency_limit: Optional[int] = None,
    ) -> ExecutionResult:
        limit = self.concurrency_limit if concurrency_limit is None else _check_limit(concurrency_limit)
        run_id = uuid.uuid4().hex[:8]
        try:
            graph = self.validate(nodes, edges)
        except StructuralError as e:
            logger.warning("run %s rejected: %s", run_id, e)
            return ExecutionResult(success=False, error=str(e))

        logger.info("run %s: executing %d node(s), %d edge(s), limit=%d", run_id, len(nodes), len(edges), limit)
        run = _Run(run_id, nodes, graph, self.registry, dict(variables or {}), limit, self.upstream_failure)
        await run.drive()
        result = run.result()
        logger.info(
            "run %s: finished success=%s peak_concurrency=%d%s",
            run_id,
            result.success,
            run.peak_in_flight,
            f" error={result.error!r}" if result.error else "",
        )
        return result
