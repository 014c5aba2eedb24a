"""
Workflow Editor — structural mutations of the workflow graph.

Two layers:

    - Pure functions (``create_node``, ``update_node``, ``delete_node``,
      ``connect``) take a ``WorkflowGraph`` and return a new one. They
      raise ``UnknownNodeReference`` for ids that are not in the graph.
    - ``GraphStore`` holds the current graph for one editor session,
      swaps in each new graph in a single assignment, turns unknown
      references into logged no-ops and emits a ``GraphEvent`` for
      every applied mutation.

The canvas talks to the store through the editor callback interface
(``on_change``, ``on_delete``, ``on_drop``, ``on_connect``).
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from flowdesk.config import EditorConfig
from flowdesk.workflow.errors import UnknownNodeReference
from flowdesk.workflow.node_types import is_known_type, title_for
from flowdesk.workflow.workflow_events import GraphEvent, GraphEventKind, GraphListener
from flowdesk.workflow.workflow_model import (
    NodeData,
    NodePosition,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
)

logger = getLogger(__name__)

PositionLike = Union[NodePosition, Mapping[str, float], Tuple[float, float]]
DataLike = Union[NodeData, Mapping[str, Any]]


# ============================================================================
# Pure graph operations
# ============================================================================


def _coerce_position(position: Optional[PositionLike]) -> NodePosition:
    if position is None:
        return NodePosition()
    if isinstance(position, NodePosition):
        return position.model_copy()
    if isinstance(position, Mapping):
        return NodePosition(**position)
    x, y = position
    return NodePosition(x=x, y=y)


def _coerce_data(data: DataLike, node_type: str) -> NodeData:
    # Always re-validate so label/name sync runs on the new record
    if isinstance(data, NodeData):
        data = data.model_dump(by_alias=True)
    record = {k: v for k, v in dict(data).items() if k != "n_type"}
    record["nType"] = node_type
    return NodeData.model_validate(record)


def next_node_id(graph: WorkflowGraph, prefix: str = "n") -> str:
    """``<prefix><ordinal>`` with ordinal = node count + 1, bumped past
    ids already in use."""
    taken = graph.node_ids()
    ordinal = len(graph.nodes) + 1
    while f"{prefix}{ordinal}" in taken:
        ordinal += 1
    return f"{prefix}{ordinal}"


def next_edge_id(graph: WorkflowGraph, prefix: str = "e") -> str:
    taken = {e.id for e in graph.edges}
    ordinal = len(graph.edges) + 1
    while f"{prefix}{ordinal}" in taken:
        ordinal += 1
    return f"{prefix}{ordinal}"


def create_node(
    graph: WorkflowGraph,
    node_type: Optional[str],
    position: Optional[PositionLike] = None,
    node_id: Optional[str] = None,
    id_prefix: str = "n",
) -> Tuple[WorkflowGraph, Optional[WorkflowNode]]:
    """Place a new node of ``node_type``.

    An empty type (a drop without payload) leaves the graph unchanged
    and returns ``None`` as the node.
    """
    if not node_type:
        return graph, None
    if node_id is None:
        node_id = next_node_id(graph, id_prefix)
    elif node_id in graph.node_ids():
        raise ValueError(f"Node id already in use: {node_id}")

    title = title_for(node_type)
    node = WorkflowNode(
        id=node_id,
        type=node_type,
        position=_coerce_position(position),
        data=NodeData(label=title, nType=node_type),
    )
    new_graph = WorkflowGraph(nodes=[*graph.nodes, node], edges=list(graph.edges))
    return new_graph, node


def update_node(
    graph: WorkflowGraph,
    node_id: str,
    data: DataLike,
) -> Tuple[WorkflowGraph, WorkflowNode]:
    """Replace the whole data record of ``node_id``.

    ``nType`` always follows the node's ``type``.
    """
    current = graph.get_node(node_id)
    if current is None:
        raise UnknownNodeReference(node_id)

    new_data = _coerce_data(data, current.type)
    updated = current.model_copy(update={"data": new_data})
    nodes = [updated if n.id == node_id else n for n in graph.nodes]
    return WorkflowGraph(nodes=nodes, edges=list(graph.edges)), updated


def delete_node(
    graph: WorkflowGraph,
    node_id: str,
) -> Tuple[WorkflowGraph, List[str]]:
    """Remove a node and every edge touching it.

    Returns the new graph and the ids of the removed edges.
    """
    if graph.get_node(node_id) is None:
        raise UnknownNodeReference(node_id)

    nodes = [n for n in graph.nodes if n.id != node_id]
    kept: List[WorkflowEdge] = []
    removed: List[str] = []
    for edge in graph.edges:
        if edge.source == node_id or edge.target == node_id:
            removed.append(edge.id)
        else:
            kept.append(edge)
    return WorkflowGraph(nodes=nodes, edges=kept), removed


def connect(
    graph: WorkflowGraph,
    source: str,
    target: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
    label: str = "",
    edge_id: Optional[str] = None,
    id_prefix: str = "e",
) -> Tuple[WorkflowGraph, WorkflowEdge]:
    """Append an edge from ``source`` to ``target``.

    Cycles and duplicate edges are allowed.
    """
    ids = graph.node_ids()
    for endpoint in (source, target):
        if endpoint not in ids:
            raise UnknownNodeReference(endpoint)

    edge = WorkflowEdge(
        id=edge_id or next_edge_id(graph, id_prefix),
        source=source,
        target=target,
        source_handle=source_handle or "source",
        target_handle=target_handle or "target",
        label=label,
    )
    return WorkflowGraph(nodes=list(graph.nodes), edges=[*graph.edges, edge]), edge


def drop_dangling_edges(graph: WorkflowGraph) -> WorkflowGraph:
    """Return ``graph`` without edges whose endpoints are missing."""
    dangling = graph.find_dangling_edges()
    if not dangling:
        return graph
    for edge in dangling:
        logger.warning(
            f"Dropping dangling edge {edge.id} ({edge.source} → {edge.target})"
        )
    ids = graph.node_ids()
    edges = [e for e in graph.edges if e.source in ids and e.target in ids]
    return WorkflowGraph(nodes=list(graph.nodes), edges=edges)


# ============================================================================
# Graph Store
# ============================================================================


class GraphStore:
    """Holds the current graph of one editor session.

    Every mutation computes a new ``WorkflowGraph`` and replaces the
    current one in a single assignment, so readers never observe a
    half-applied change.

    Usage::

        store = GraphStore()
        store.subscribe(print)
        node = store.on_drop("kafka", {"x": 100, "y": 50})
        store.on_change(node.id, {**node.data.model_dump(), "label": "Orders"})
    """

    def __init__(
        self,
        graph: Optional[WorkflowGraph] = None,
        config: Optional[EditorConfig] = None,
    ) -> None:
        self._graph = graph or WorkflowGraph()
        self._config = config or EditorConfig.get_default_instance()
        self._listeners: List[GraphListener] = []

    @property
    def graph(self) -> WorkflowGraph:
        return self._graph

    @property
    def nodes(self) -> List[WorkflowNode]:
        return list(self._graph.nodes)

    @property
    def edges(self) -> List[WorkflowEdge]:
        return list(self._graph.edges)

    # ── Events ──

    def subscribe(self, listener: GraphListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, graph: WorkflowGraph, event: GraphEvent) -> None:
        self._graph = graph
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Graph listener failed on {event.kind.value}: {e}")

    # ── Mutations ──

    def create_node(
        self,
        node_type: Optional[str],
        position: Optional[PositionLike] = None,
    ) -> Optional[WorkflowNode]:
        """Place a node; a missing type is ignored."""
        if not node_type:
            logger.debug("Ignoring node drop without a type")
            return None
        if not is_known_type(node_type):
            logger.warning(f"Placing node of unknown type '{node_type}'")

        graph, node = create_node(
            self._graph, node_type, position,
            id_prefix=self._config.node_id_prefix,
        )
        self._commit(graph, GraphEvent(
            kind=GraphEventKind.CREATE,
            node_id=node.id,
            payload=node.model_dump(mode="json"),
        ))
        logger.info(f"Node created: {node.id} ({node_type})")
        return node

    def update_node(self, node_id: str, data: DataLike) -> Optional[WorkflowNode]:
        """Replace a node's data record; unknown ids are a no-op."""
        try:
            graph, node = update_node(self._graph, node_id, data)
        except UnknownNodeReference as e:
            logger.warning(f"Update ignored: {e}")
            return None
        self._commit(graph, GraphEvent(
            kind=GraphEventKind.UPDATE,
            node_id=node_id,
            payload=node.data.model_dump(mode="json", by_alias=True),
        ))
        return node

    def delete_node(self, node_id: str) -> bool:
        """Delete a node and its edges; unknown ids are a no-op."""
        try:
            graph, removed = delete_node(self._graph, node_id)
        except UnknownNodeReference as e:
            logger.warning(f"Delete ignored: {e}")
            return False
        self._commit(graph, GraphEvent(
            kind=GraphEventKind.DELETE,
            node_id=node_id,
            payload={"removed_edges": removed},
        ))
        logger.info(f"Node deleted: {node_id} ({len(removed)} edges removed)")
        return True

    def connect(
        self,
        source: str,
        target: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
        label: str = "",
    ) -> Optional[WorkflowEdge]:
        """Connect two nodes; unknown endpoints are a no-op."""
        try:
            graph, edge = connect(
                self._graph, source, target, source_handle, target_handle,
                label=label, id_prefix=self._config.edge_id_prefix,
            )
        except UnknownNodeReference as e:
            logger.warning(f"Connect ignored: {e}")
            return None
        self._commit(graph, GraphEvent(
            kind=GraphEventKind.CONNECT,
            node_id=source,
            payload=edge.model_dump(mode="json"),
        ))
        return edge

    def clear(self) -> None:
        self._commit(WorkflowGraph(), GraphEvent(kind=GraphEventKind.CLEAR))
        logger.info("Graph cleared")

    def load(self, graph: WorkflowGraph) -> None:
        """Replace the whole graph (used by document import)."""
        duplicates = [e for e in graph.validate_graph() if e.startswith("Duplicate")]
        if duplicates:
            raise ValueError("; ".join(duplicates))
        graph = drop_dangling_edges(graph)
        self._commit(graph, GraphEvent(
            kind=GraphEventKind.LOAD,
            payload={"nodes": len(graph.nodes), "edges": len(graph.edges)},
        ))
        logger.info(f"Graph loaded: {len(graph.nodes)} nodes, {len(graph.edges)} edges")

    # ── Record edits (read-modify-write over update_node) ──

    def _data_of(self, node_id: str) -> Optional[Dict[str, Any]]:
        node = self._graph.get_node(node_id)
        if node is None:
            logger.warning(f"Edit ignored: Unknown node: {node_id}")
            return None
        return node.data.model_dump(by_alias=True)

    def rename_node(self, node_id: str, label: str) -> Optional[WorkflowNode]:
        data = self._data_of(node_id)
        if data is None:
            return None
        data["label"] = label
        data["name"] = label
        return self.update_node(node_id, data)

    def set_metadata_field(self, node_id: str, key: str, value: Any) -> Optional[WorkflowNode]:
        data = self._data_of(node_id)
        if data is None:
            return None
        data["metadata"] = {**data["metadata"], key: value}
        return self.update_node(node_id, data)

    def add_action(self, node_id: str, label: str = "", formula: str = "") -> Optional[WorkflowNode]:
        data = self._data_of(node_id)
        if data is None:
            return None
        data["actions"] = [*data["actions"], {"label": label, "formula": formula}]
        return self.update_node(node_id, data)

    def update_action(
        self, node_id: str, index: int, field: str, value: str,
    ) -> Optional[WorkflowNode]:
        """Set ``label`` or ``formula`` of the action at ``index``."""
        if field not in ("label", "formula"):
            raise ValueError(f"Unknown action field: {field}")
        data = self._data_of(node_id)
        if data is None:
            return None
        actions = [dict(a) for a in data["actions"]]
        if not 0 <= index < len(actions):
            logger.warning(f"Action index {index} out of range for node {node_id}")
            return None
        actions[index][field] = value
        data["actions"] = actions
        return self.update_node(node_id, data)

    def remove_action(self, node_id: str, index: int) -> Optional[WorkflowNode]:
        data = self._data_of(node_id)
        if data is None:
            return None
        actions = data["actions"]
        if not 0 <= index < len(actions):
            logger.warning(f"Action index {index} out of range for node {node_id}")
            return None
        data["actions"] = [a for i, a in enumerate(actions) if i != index]
        return self.update_node(node_id, data)

    # ── Editor callback interface ──

    def on_change(self, node_id: str, data: DataLike) -> Optional[WorkflowNode]:
        return self.update_node(node_id, data)

    def on_delete(self, node_id: str) -> bool:
        return self.delete_node(node_id)

    def on_drop(
        self, node_type: Optional[str], position: Optional[PositionLike] = None,
    ) -> Optional[WorkflowNode]:
        return self.create_node(node_type, position)

    def on_connect(
        self,
        source: str,
        target: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
    ) -> Optional[WorkflowEdge]:
        return self.connect(source, target, source_handle, target_handle)
