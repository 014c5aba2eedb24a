"""
Workflow Errors.

Exceptions raised by the workflow editor, codec, store and simulator.
None of them is fatal: the editor turns ``UnknownNodeReference`` into a
logged no-op, the codec and store surface ``InvalidDocumentError`` to
the caller, and the simulator rejects overlapping runs.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for all workflow errors."""


class InvalidDocumentError(WorkflowError):
    """A workflow document could not be parsed or is incomplete."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownNodeReference(WorkflowError):
    """A mutation referenced a node id that is not in the graph."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Unknown node: {node_id}")
        self.node_id = node_id


class SimulationBusyError(WorkflowError):
    """A simulation was submitted while another run is still in flight."""
