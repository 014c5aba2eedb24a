"""
Workflow Data Models — node instances, edges and the graph value type.

These are the in-memory structures the editor works on. They are
mutated (by replacement, never in place) by ``workflow_editor``,
mapped to and from the persisted document by ``workflow_codec`` and
read by the simulator for node identity.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NodePosition(BaseModel):
    """Canvas coordinates. Layout only, but must round-trip."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0
    y: float = 0


class NodeAction(BaseModel):
    """One entry of a node's ordered action list."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    formula: str = ""


class NodeData(BaseModel):
    """The full data record of a node.

    ``label`` and ``name`` are aliases of each other (``name`` is the
    document spelling) and are kept equal by the validator below.
    Unknown keys are preserved.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    label: str = ""
    name: str = ""
    n_type: str = Field("", alias="nType")
    class_name: str = Field("actionNode", alias="className")
    node_type: int = Field(1, alias="nodeType")
    actions: List[NodeAction] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _sync_label_and_name(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        label = values.get("label")
        if label is not None:
            values["name"] = label
        elif values.get("name") is not None:
            values["label"] = values["name"]
        # ``config`` is the demo editor's spelling of ``metadata``
        if "metadata" not in values and isinstance(values.get("config"), dict):
            values["metadata"] = values.pop("config")
        for key in ("actions", "metadata"):
            if values.get(key) is None:
                values.pop(key, None)
        return values


class WorkflowNode(BaseModel):
    """A single node placed on the workflow canvas.

    ``type`` references an entry of the node type table; unknown
    types are carried through unchanged.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    position: NodePosition = Field(default_factory=NodePosition)
    data: NodeData = Field(default_factory=NodeData)

    @property
    def label(self) -> str:
        return self.data.label


class WorkflowEdge(BaseModel):
    """A directed edge between two node ports.

    Handles default to the single-port names; branching nodes use
    ``success`` / ``error``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    source: str
    target: str
    source_handle: str = "source"
    target_handle: str = "target"
    label: str = ""


class WorkflowGraph(BaseModel):
    """The canvas contents: nodes and edges.

    Treated as a value: editor operations return a new graph and
    never modify the one they were given.
    """

    model_config = ConfigDict(frozen=True)

    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edges_from(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges originating from a node."""
        return [e for e in self.edges if e.source == node_id]

    def get_edges_to(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target == node_id]

    def find_start_node(self) -> Optional[WorkflowNode]:
        """First node without an incoming edge, else the first node."""
        targets = {e.target for e in self.edges}
        for n in self.nodes:
            if n.id not in targets:
                return n
        return self.nodes[0] if self.nodes else None

    def find_dangling_edges(self) -> List[WorkflowEdge]:
        """Edges whose source or target is not in the graph."""
        ids = self.node_ids()
        return [
            e for e in self.edges
            if e.source not in ids or e.target not in ids
        ]

    def validate_graph(self) -> List[str]:
        """Check the structural invariants.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []

        seen: Set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                errors.append(f"Duplicate node id: {node.id}")
            seen.add(node.id)

        for edge in self.find_dangling_edges():
            if edge.source not in seen:
                errors.append(f"Edge {edge.id} references unknown source node: {edge.source}")
            if edge.target not in seen:
                errors.append(f"Edge {edge.id} references unknown target node: {edge.target}")

        for node in self.nodes:
            if node.data.label != node.data.name:
                errors.append(f"Node {node.id} label and name differ")

        return errors
