"""
Workflow Engine — graph model, editing and document interchange.

Architecture:
    node_types       — Closed table of node types and their fields
    workflow_model   — Node / edge / graph data models
    workflow_editor  — Graph mutations and the per-session GraphStore
    workflow_events  — Events emitted by the GraphStore
    workflow_codec   — Graph ⇄ workflow document (JSON)
    workflow_store   — JSON-file persistence of workflow documents
    templates        — Pre-built graphs (registration pipeline)
"""

from flowdesk.workflow.errors import (
    InvalidDocumentError,
    SimulationBusyError,
    UnknownNodeReference,
    WorkflowError,
)
from flowdesk.workflow.node_types import (
    FieldType,
    NodeCategory,
    NodeFieldDef,
    NodeTypeDef,
    default_fields_for,
    get_node_type,
    is_known_type,
    list_node_types,
    output_handles_for,
    title_for,
)
from flowdesk.workflow.workflow_model import (
    NodeAction,
    NodeData,
    NodePosition,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
)
from flowdesk.workflow.workflow_events import GraphEvent, GraphEventKind
from flowdesk.workflow.workflow_editor import GraphStore
from flowdesk.workflow.workflow_codec import (
    WorkflowDocument,
    dumps_document,
    export_document,
    import_document,
    import_into,
    loads_document,
)
from flowdesk.workflow.workflow_store import WorkflowStore, get_workflow_store
from flowdesk.workflow.templates import create_registration_template

__all__ = [
    "InvalidDocumentError",
    "SimulationBusyError",
    "UnknownNodeReference",
    "WorkflowError",
    "FieldType",
    "NodeCategory",
    "NodeFieldDef",
    "NodeTypeDef",
    "default_fields_for",
    "get_node_type",
    "is_known_type",
    "list_node_types",
    "output_handles_for",
    "title_for",
    "NodeAction",
    "NodeData",
    "NodePosition",
    "WorkflowEdge",
    "WorkflowGraph",
    "WorkflowNode",
    "GraphEvent",
    "GraphEventKind",
    "GraphStore",
    "WorkflowDocument",
    "dumps_document",
    "export_document",
    "import_document",
    "import_into",
    "loads_document",
    "WorkflowStore",
    "get_workflow_store",
    "create_registration_template",
]
