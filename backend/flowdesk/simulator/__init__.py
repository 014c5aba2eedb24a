"""
Execution Simulator — the registration pipeline.

    stages           — Pure stage transforms and their records
    simulator_state  — Run states, stage names, published records
    simulator        — LangGraph driver (RegistrationSimulator)
"""

from flowdesk.simulator.simulator_state import (
    RunState,
    SimulationResult,
    StageName,
    StageRecord,
    StateTransition,
)
from flowdesk.simulator.stages import (
    EmailResult,
    ErrorResult,
    RegionResult,
    UserRecord,
    ValidationResult,
    generate_user,
    handle_error,
    process_region,
    send_email,
    validate_user,
)
from flowdesk.simulator.simulator import RegistrationSimulator

__all__ = [
    "RunState",
    "SimulationResult",
    "StageName",
    "StageRecord",
    "StateTransition",
    "EmailResult",
    "ErrorResult",
    "RegionResult",
    "UserRecord",
    "ValidationResult",
    "generate_user",
    "handle_error",
    "process_region",
    "send_email",
    "validate_user",
    "RegistrationSimulator",
]
