"""
Registration Simulator — walk the registration pipeline as a LangGraph.

Compiles the fixed five-stage pipeline into a LangGraph
``StateGraph`` and runs it for one submitted user, publishing each
stage's output under its stage name and under the id of the canvas
node it belongs to.

Topology::

    registration → validation
        ↓ [error]   → error_handling → END
        ↓ [success] → region_processing → email → END

The stage transforms themselves live in ``stages``; this module only
adds scheduling (fixed delays, which may be zero), publishing and
logging.
"""

from __future__ import annotations

import asyncio
import random
import time
import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Awaitable, Callable, Dict, List, Optional

from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from flowdesk.config import SimulatorConfig
from flowdesk.logging import RunLogger, get_run_logger
from flowdesk.simulator.simulator_state import (
    RunState,
    SimulationResult,
    SimulationState,
    StageName,
    StageRecord,
    StateTransition,
)
from flowdesk.simulator.stages import (
    UserLike,
    ValidationResult,
    as_user,
    generate_user,
    handle_error,
    process_region,
    send_email,
    validate_user,
)
from flowdesk.workflow.errors import SimulationBusyError
from flowdesk.workflow.templates import create_registration_template
from flowdesk.workflow.workflow_model import WorkflowGraph

logger = getLogger(__name__)

StageListener = Callable[[StageRecord], None]

# Stage → node type carrying its output on the canvas
_STAGE_NODE_TYPES: Dict[StageName, str] = {
    StageName.REGISTRATION: "start",
    StageName.VALIDATION: "validator",
    StageName.ERROR_HANDLING: "error",
    StageName.REGION_PROCESSING: "region",
    StageName.EMAIL: "email",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationSimulator:
    """Run simulated registrations through the reference pipeline.

    One run at a time: ``submit`` while a run is in flight raises
    ``SimulationBusyError``.

    Usage::

        sim = RegistrationSimulator(SimulatorConfig.instant(seed=7))
        result = await sim.submit()
        result.final_state        # RunState.EMAILED or ERROR_HANDLED
        sim.node_outputs["region"]
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        graph: Optional[WorkflowGraph] = None,
    ) -> None:
        self._config = config or SimulatorConfig.get_default_instance()
        self._rng = rng or random.Random(self._config.seed)
        self._clock = clock or _utc_now
        self._node_ids = self._resolve_node_ids(graph or create_registration_template())

        self._compiled: Optional[CompiledStateGraph] = None
        self._running = False
        self._listeners: List[StageListener] = []
        self._run_logger: Optional[RunLogger] = None

        self._records: Dict[str, StageRecord] = {}
        self._node_outputs: Dict[str, Dict[str, Any]] = {}
        self._transitions: List[StateTransition] = []
        self.reset()

    # ========================================================================
    # Public state
    # ========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> Optional[RunState]:
        return self._transitions[-1].state if self._transitions else None

    @property
    def records(self) -> Dict[str, StageRecord]:
        return dict(self._records)

    @property
    def node_outputs(self) -> Dict[str, Dict[str, Any]]:
        return {k: dict(v) for k, v in self._node_outputs.items()}

    @property
    def transitions(self) -> List[StateTransition]:
        return list(self._transitions)

    @property
    def run_logger(self) -> Optional[RunLogger]:
        return self._run_logger

    def node_id_for(self, stage: StageName) -> str:
        return self._node_ids[stage]

    def subscribe(self, listener: StageListener) -> Callable[[], None]:
        """Receive every published ``StageRecord``."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def reset(self) -> None:
        """Clear all published output."""
        if self._running:
            raise SimulationBusyError("Cannot reset while a simulation is running")
        self._records = {}
        self._transitions = []
        self._node_outputs = {nid: {} for nid in self._node_ids.values()}

    # ========================================================================
    # Compilation
    # ========================================================================

    def compile(self) -> CompiledStateGraph:
        """Compile the pipeline into a LangGraph StateGraph."""
        builder = StateGraph(SimulationState)

        builder.add_node(StageName.REGISTRATION.value, self._wrap(StageName.REGISTRATION, self._register))
        builder.add_node(StageName.VALIDATION.value, self._wrap(StageName.VALIDATION, self._validate))
        builder.add_node(StageName.ERROR_HANDLING.value, self._wrap(StageName.ERROR_HANDLING, self._handle_error))
        builder.add_node(StageName.REGION_PROCESSING.value, self._wrap(StageName.REGION_PROCESSING, self._process_region))
        builder.add_node(StageName.EMAIL.value, self._wrap(StageName.EMAIL, self._send_email))

        builder.add_edge(START, StageName.REGISTRATION.value)
        builder.add_edge(StageName.REGISTRATION.value, StageName.VALIDATION.value)
        builder.add_conditional_edges(
            StageName.VALIDATION.value,
            self._route_validation,
            {
                "error": StageName.ERROR_HANDLING.value,
                "success": StageName.REGION_PROCESSING.value,
            },
        )
        builder.add_edge(StageName.ERROR_HANDLING.value, END)
        builder.add_edge(StageName.REGION_PROCESSING.value, StageName.EMAIL.value)
        builder.add_edge(StageName.EMAIL.value, END)

        self._compiled = builder.compile()
        logger.info("Registration pipeline compiled: 5 stages")
        return self._compiled

    # ========================================================================
    # Execution
    # ========================================================================

    async def submit(self, user: Optional[UserLike] = None) -> SimulationResult:
        """Run one registration through the pipeline.

        Args:
            user: The registration to process. Generated from the
                injected RNG when omitted.

        Raises:
            SimulationBusyError: If a run is already in flight.
        """
        if self._running:
            raise SimulationBusyError("A simulation run is already in progress")
        self._running = True
        try:
            if self._compiled is None:
                self.compile()

            record = as_user(user) if user is not None else generate_user(self._rng, self._clock())
            run_id = uuid.uuid4().hex[:8]
            self._run_logger = get_run_logger(run_id)
            self._records = {}
            self._transitions = []
            self._node_outputs = {nid: {} for nid in self._node_ids.values()}

            logger.info(f"[{run_id}] Simulation submitted for {record.name or 'anonymous'}")
            initial: SimulationState = {"user": record.to_output()}
            final_state = await self._compiled.ainvoke(initial)

            validation = final_state.get("validation_result") or {}
            result = SimulationResult(
                run_id=run_id,
                final_state=RunState(final_state["run_state"]),
                user=final_state["user"],
                errors=list(validation.get("errors", [])),
                records=dict(self._records),
                transitions=list(self._transitions),
            )
            logger.info(f"[{run_id}] Simulation finished: {result.final_state.value}")
            return result
        finally:
            self._running = False

    # ========================================================================
    # Stages
    # ========================================================================

    async def _register(self, state: SimulationState) -> Dict[str, Any]:
        user = state["user"]
        self._transition(RunState.REGISTERED)
        self._publish(StageName.REGISTRATION, user, {"user": user})
        await self._delay(self._config.submit_delay)
        self._transition(RunState.VALIDATING)
        return {"run_state": RunState.VALIDATING.value}

    async def _validate(self, state: SimulationState) -> Dict[str, Any]:
        user = state["user"]
        validation = validate_user(user)
        data = validation.model_dump(mode="json")
        self._publish(
            StageName.VALIDATION,
            {**user, "validation": data},
            {"user": user, "validation": data},
        )
        outcome = RunState.VALID if validation.is_valid else RunState.INVALID
        self._transition(outcome)
        await self._delay(self._config.validation_delay)
        return {"validation_result": data, "run_state": outcome.value}

    async def _handle_error(self, state: SimulationState) -> Dict[str, Any]:
        validation = ValidationResult.model_validate(state["validation_result"])
        out = handle_error(state["user"], validation).model_dump(mode="json", by_alias=True)
        self._publish(
            StageName.ERROR_HANDLING, out,
            {"validation": validation.model_dump(mode="json")},
        )
        # The success branch shows nothing for a failed run
        for stage in (StageName.REGION_PROCESSING, StageName.EMAIL):
            self._node_outputs[self._node_ids[stage]] = {}
        self._transition(RunState.ERROR_HANDLED)
        return {"error_result": out, "run_state": RunState.ERROR_HANDLED.value}

    async def _process_region(self, state: SimulationState) -> Dict[str, Any]:
        user = state["user"]
        out = process_region(user).model_dump(mode="json", by_alias=True)
        self._publish(
            StageName.REGION_PROCESSING, out,
            {"user": user, "regionPolicy": out["regionPolicy"]},
        )
        self._transition(RunState.REGION_PROCESSED)
        await self._delay(self._config.region_delay)
        return {"region_result": out, "run_state": RunState.REGION_PROCESSED.value}

    async def _send_email(self, state: SimulationState) -> Dict[str, Any]:
        out = send_email(state["region_result"]).model_dump(mode="json", by_alias=True)
        self._publish(StageName.EMAIL, out, {"user": out})
        self._transition(RunState.EMAILED)
        return {"email_result": out, "run_state": RunState.EMAILED.value}

    def _route_validation(self, state: SimulationState) -> str:
        errors = (state.get("validation_result") or {}).get("errors") or []
        decision = "error" if errors else "success"
        if self._run_logger:
            target = StageName.ERROR_HANDLING if errors else StageName.REGION_PROCESSING
            self._run_logger.log_edge_decision(
                StageName.VALIDATION.value, decision, target.value,
            )
        return decision

    # ========================================================================
    # Internal helpers
    # ========================================================================

    def _wrap(
        self,
        stage: StageName,
        fn: Callable[[SimulationState], Awaitable[Dict[str, Any]]],
    ):
        """Add per-stage enter/exit/error logging around a stage."""
        node_id = self._node_ids[stage]

        async def _stage_fn(state: SimulationState) -> Dict[str, Any]:
            run_logger = self._run_logger
            if run_logger:
                run_logger.log_stage_enter(stage.value, node_id)
            start = time.time()
            try:
                result = await fn(state)
            except Exception as e:
                duration_ms = int((time.time() - start) * 1000)
                logger.error(
                    f"Stage '{stage.value}' ({node_id}) failed after {duration_ms}ms: {e}"
                )
                if run_logger:
                    run_logger.log_error(str(e)[:500], stage.value, type(e).__name__)
                raise
            if run_logger:
                run_logger.log_stage_exit(
                    stage.value, node_id,
                    int((time.time() - start) * 1000),
                    result.get("run_state"),
                )
            return result

        _stage_fn.__name__ = f"stage_{stage.value}"
        _stage_fn.__qualname__ = _stage_fn.__name__
        return _stage_fn

    def _publish(
        self,
        stage: StageName,
        data: Dict[str, Any],
        node_output: Dict[str, Any],
    ) -> None:
        node_id = self._node_ids[stage]
        record = StageRecord(
            stage=stage,
            node_id=node_id,
            data=data,
            timestamp=self._clock().isoformat(),
        )
        self._records[stage.value] = record
        self._node_outputs[node_id] = node_output
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                logger.error(f"Stage listener failed on {stage.value}: {e}")

    def _transition(self, state: RunState) -> None:
        self._transitions.append(
            StateTransition(state=state, timestamp=self._clock().isoformat())
        )
        if self._run_logger:
            self._run_logger.log_state(state.value)

    @staticmethod
    async def _delay(seconds: float) -> None:
        if seconds and seconds > 0:
            await asyncio.sleep(seconds)

    @staticmethod
    def _resolve_node_ids(graph: WorkflowGraph) -> Dict[StageName, str]:
        """Map each stage to the first node of its type in ``graph``."""
        node_ids: Dict[StageName, str] = {}
        missing: List[str] = []
        for stage, node_type in _STAGE_NODE_TYPES.items():
            node = next((n for n in graph.nodes if n.type == node_type), None)
            if node is None:
                missing.append(node_type)
            else:
                node_ids[stage] = node.id
        if missing:
            raise ValueError(
                f"Graph is missing pipeline node types: {', '.join(missing)}"
            )
        return node_ids
