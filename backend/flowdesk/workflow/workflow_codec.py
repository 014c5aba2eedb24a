"""
Workflow Document Codec — graph ⇄ portable JSON workflow document.

The document shape is an external contract consumed by the execution
backend and intentionally differs from the editor's working model::

    {
      "startNodeId": "n1",
      "variables": {"nodes": [{"className", "label", "type": "1", "nType"}]},
      "flowChart": {
        "nodes": [{"nodeId", "name", "nType", "className", "nodeType",
                   "positionX", "positionY", "actions", "metadata"}],
        "connections": [{"connectionId", "pageSourceId", "pageTargetId",
                         "label", "sourceHandle", "targetHandle"}]
      }
    }

``sourceHandle`` / ``targetHandle`` are optional on input and default
to the single-port names.
"""

from __future__ import annotations

import json
import math
from logging import getLogger
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from flowdesk.workflow.errors import InvalidDocumentError
from flowdesk.workflow.workflow_model import (
    NodeAction,
    NodeData,
    NodePosition,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
)

if TYPE_CHECKING:
    from flowdesk.workflow.workflow_editor import GraphStore

logger = getLogger(__name__)

PLACEHOLDER_START_ID = "n1"
VARIABLE_NODE_TYPE = "1"

DocumentSource = Union[str, bytes, Mapping[str, Any], "WorkflowDocument"]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from -inf (2.5 → 3)."""
    return int(math.floor(value + 0.5))


# ============================================================================
# Document Models
# ============================================================================


class DocumentNode(BaseModel):
    """One ``flowChart.nodes[]`` record."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    node_id: str = Field(..., alias="nodeId")
    name: str = ""
    label: Optional[str] = Field(None, exclude=True)
    n_type: str = Field("", alias="nType")
    class_name: str = Field("actionNode", alias="className")
    node_type: int = Field(1, alias="nodeType")
    position_x: int = Field(0, alias="positionX")
    position_y: int = Field(0, alias="positionY")
    actions: List[NodeAction] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("position_x", "position_y", mode="before")
    @classmethod
    def _round_position(cls, value: Any) -> Any:
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"position must be a finite number, got {value}")
            return round_half_up(value)
        return value

    @field_validator("name", "n_type", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("class_name", mode="before")
    @classmethod
    def _default_class_name(cls, value: Any) -> Any:
        return value or "actionNode"

    @field_validator("node_type", mode="before")
    @classmethod
    def _default_node_type(cls, value: Any) -> Any:
        return 1 if value is None or value == "" else value

    @field_validator("actions", mode="before")
    @classmethod
    def _default_actions(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value


class DocumentConnection(BaseModel):
    """One ``flowChart.connections[]`` record."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    connection_id: str = Field(..., alias="connectionId")
    page_source_id: str = Field(..., alias="pageSourceId")
    page_target_id: str = Field(..., alias="pageTargetId")
    label: str = ""
    source_handle: Optional[str] = Field(None, alias="sourceHandle")
    target_handle: Optional[str] = Field(None, alias="targetHandle")

    @field_validator("label", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class FlowChart(BaseModel):
    model_config = ConfigDict(extra="allow")

    nodes: List[DocumentNode] = Field(default_factory=list)
    connections: List[DocumentConnection] = Field(default_factory=list)


class VariableNode(BaseModel):
    """Denormalized per-node summary for consumers that only need
    type and label."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field("actionNode", alias="className")
    label: str = ""
    type: str = VARIABLE_NODE_TYPE
    n_type: str = Field("", alias="nType")


class WorkflowVariables(BaseModel):
    model_config = ConfigDict(extra="allow")

    nodes: List[VariableNode] = Field(default_factory=list)


class WorkflowDocument(BaseModel):
    """The persisted / exchanged form of a workflow graph."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    start_node_id: str = Field(PLACEHOLDER_START_ID, alias="startNodeId")
    variables: WorkflowVariables = Field(default_factory=WorkflowVariables)
    flow_chart: FlowChart = Field(..., alias="flowChart")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ============================================================================
# Export
# ============================================================================


def export_document(graph: WorkflowGraph) -> WorkflowDocument:
    """Map the in-memory graph to a workflow document."""
    start = graph.find_start_node()
    start_id = start.id if start is not None else PLACEHOLDER_START_ID

    doc_nodes: List[DocumentNode] = []
    variables: List[VariableNode] = []
    for node in graph.nodes:
        data = node.data
        # type is fixed for the node's lifetime
        n_type = node.type
        class_name = data.class_name or "actionNode"
        doc_nodes.append(DocumentNode(
            nodeId=node.id,
            name=data.name or data.label,
            nType=n_type,
            className=class_name,
            nodeType=data.node_type or 1,
            positionX=round_half_up(node.position.x),
            positionY=round_half_up(node.position.y),
            actions=[a.model_copy() for a in data.actions],
            metadata=dict(data.metadata),
        ))
        variables.append(VariableNode(
            className=class_name,
            label=data.label,
            nType=n_type,
        ))

    connections = [
        DocumentConnection(
            connectionId=edge.id,
            pageSourceId=edge.source,
            pageTargetId=edge.target,
            label=edge.label or "",
            sourceHandle=edge.source_handle,
            targetHandle=edge.target_handle,
        )
        for edge in graph.edges
    ]

    document = WorkflowDocument(
        startNodeId=start_id,
        variables=WorkflowVariables(nodes=variables),
        flowChart=FlowChart(nodes=doc_nodes, connections=connections),
    )
    logger.debug(
        f"Exported workflow: {len(doc_nodes)} nodes, "
        f"{len(connections)} connections, start={start_id}"
    )
    return document


def dumps_document(graph: WorkflowGraph, indent: Optional[int] = 2) -> str:
    """Export ``graph`` straight to a JSON string."""
    return export_document(graph).to_json(indent=indent)


# ============================================================================
# Import
# ============================================================================


def parse_document(source: DocumentSource) -> WorkflowDocument:
    """Parse and validate a workflow document.

    Raises:
        InvalidDocumentError: On malformed JSON, a non-object root,
            a missing ``flowChart`` or any schema violation.
    """
    if isinstance(source, WorkflowDocument):
        return source

    if isinstance(source, (str, bytes, bytearray)):
        try:
            payload = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidDocumentError(f"Invalid JSON format: {e}") from e
    else:
        payload = source

    if not isinstance(payload, Mapping):
        raise InvalidDocumentError(
            f"Workflow document must be a JSON object, got {type(payload).__name__}"
        )
    if "flowChart" not in payload:
        raise InvalidDocumentError("Workflow document is missing 'flowChart'")

    try:
        return WorkflowDocument.model_validate(dict(payload))
    except ValidationError as e:
        raise InvalidDocumentError(f"Invalid workflow document: {_summarize(e)}") from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors()[:5]:
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg', '')}")
    more = error.error_count() - len(parts)
    if more > 0:
        parts.append(f"(+{more} more)")
    return "; ".join(parts)


def import_document(source: DocumentSource) -> WorkflowGraph:
    """Map a workflow document back to an in-memory graph.

    The returned graph is complete and valid; nothing is applied
    anywhere until the caller loads it.
    """
    document = parse_document(source)
    chart = document.flow_chart

    nodes: List[WorkflowNode] = []
    seen: Set[str] = set()
    for doc_node in chart.nodes:
        if doc_node.node_id in seen:
            raise InvalidDocumentError(f"Duplicate nodeId in document: {doc_node.node_id}")
        seen.add(doc_node.node_id)

        label = doc_node.label if doc_node.label is not None else doc_node.name
        nodes.append(WorkflowNode(
            id=doc_node.node_id,
            type=doc_node.n_type,
            position=NodePosition(x=doc_node.position_x, y=doc_node.position_y),
            data=NodeData(
                label=label,
                nType=doc_node.n_type,
                className=doc_node.class_name,
                nodeType=doc_node.node_type,
                actions=[a.model_copy() for a in doc_node.actions],
                metadata=dict(doc_node.metadata),
            ),
        ))

    edges: List[WorkflowEdge] = []
    for conn in chart.connections:
        if conn.page_source_id not in seen or conn.page_target_id not in seen:
            logger.warning(
                f"Skipping connection {conn.connection_id}: "
                f"{conn.page_source_id} → {conn.page_target_id} references a missing node"
            )
            continue
        edges.append(WorkflowEdge(
            id=conn.connection_id,
            source=conn.page_source_id,
            target=conn.page_target_id,
            source_handle=conn.source_handle or "source",
            target_handle=conn.target_handle or "target",
            label=conn.label,
        ))

    logger.info(f"Imported workflow: {len(nodes)} nodes, {len(edges)} edges")
    return WorkflowGraph(nodes=nodes, edges=edges)


def loads_document(text: Union[str, bytes]) -> WorkflowGraph:
    return import_document(text)


def import_into(store: "GraphStore", source: DocumentSource) -> WorkflowGraph:
    """Import ``source`` and swap it into ``store``.

    The store is only touched once the whole document has been
    converted, so a failed import leaves the live graph as it was.
    """
    graph = import_document(source)
    store.load(graph)
    return graph
