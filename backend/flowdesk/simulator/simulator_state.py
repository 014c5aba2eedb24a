"""
Simulator state — run states, stage names and published records.

``SimulationState`` is the LangGraph state flowing through the
compiled pipeline; the pydantic models are what the simulator
publishes to observers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel, Field


class RunState(str, Enum):
    """Position of a run in the pipeline state machine."""
    REGISTERED = "registered"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    REGION_PROCESSED = "region_processed"
    EMAILED = "emailed"
    ERROR_HANDLED = "error_handled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.EMAILED, RunState.ERROR_HANDLED)


class StageName(str, Enum):
    REGISTRATION = "registration"
    VALIDATION = "validation"
    ERROR_HANDLING = "error_handling"
    REGION_PROCESSING = "region_processing"
    EMAIL = "email"


class SimulationState(TypedDict, total=False):
    """LangGraph state. Values are plain JSON-ready dicts."""
    user: Dict[str, Any]
    validation_result: Dict[str, Any]
    error_result: Dict[str, Any]
    region_result: Dict[str, Any]
    email_result: Dict[str, Any]
    run_state: str


class StageRecord(BaseModel):
    """Output of one completed stage."""
    stage: StageName
    node_id: str
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str


class StateTransition(BaseModel):
    state: RunState
    timestamp: str


class SimulationResult(BaseModel):
    """Summary of a finished run."""
    run_id: str
    final_state: RunState
    user: Dict[str, Any]
    errors: List[str] = Field(default_factory=list)
    records: Dict[str, StageRecord] = Field(default_factory=dict)
    transitions: List[StateTransition] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.final_state == RunState.EMAILED

    def record(self, stage: StageName) -> Optional[StageRecord]:
        return self.records.get(stage.value)
