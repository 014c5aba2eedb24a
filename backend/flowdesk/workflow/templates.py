"""
Pre-built Workflow Templates.

Provides factory functions that return ready-made ``WorkflowGraph``
objects. The registration template is the fixed pipeline walked by
``RegistrationSimulator``; its node ids are the ones the simulator
publishes output under.
"""

from __future__ import annotations

from typing import List

from flowdesk.workflow.node_types import get_node_type
from flowdesk.workflow.workflow_model import (
    NodeData,
    NodePosition,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
)

START_NODE_ID = "start"
VALIDATOR_NODE_ID = "validator"
ERROR_NODE_ID = "error"
REGION_NODE_ID = "region"
EMAIL_NODE_ID = "email"


# ============================================================================
# Registration Workflow Template
# ============================================================================


def create_registration_template() -> WorkflowGraph:
    """Build the user-registration pipeline.

    Topology::
        start → validator
          ↓ [error]   → error
          ↓ [success] → region → email

    Node ids double as node types. Positions are hand-tuned for the
    visual editor.
    """
    nodes: List[WorkflowNode] = []
    edges: List[WorkflowEdge] = []

    def _add(nid: str, x: float, y: float):
        definition = get_node_type(nid)
        label = definition.label if definition else nid
        nodes.append(WorkflowNode(
            id=nid, type=nid,
            position=NodePosition(x=x, y=y),
            data=NodeData(label=label, nType=nid),
        ))

    def _edge(eid: str, src: str, tgt: str, port: str = "out"):
        edges.append(WorkflowEdge(
            id=eid, source=src, target=tgt,
            source_handle=port, target_handle="in",
        ))

    _add(START_NODE_ID,     10, 210)
    _add(VALIDATOR_NODE_ID, 260, 200)
    _add(ERROR_NODE_ID,     540, 90)
    _add(REGION_NODE_ID,    550, 320)
    _add(EMAIL_NODE_ID,     800, 320)

    _edge("e1", START_NODE_ID, VALIDATOR_NODE_ID)
    _edge("e2", VALIDATOR_NODE_ID, ERROR_NODE_ID, port="error")
    _edge("e3", VALIDATOR_NODE_ID, REGION_NODE_ID, port="success")
    _edge("e4", REGION_NODE_ID, EMAIL_NODE_ID)

    return WorkflowGraph(nodes=nodes, edges=edges)
