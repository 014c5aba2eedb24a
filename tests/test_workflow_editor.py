"""Tests for graph mutations and the GraphStore."""

import pytest
from pydantic import ValidationError

from flowdesk.workflow import (
    GraphEventKind,
    GraphStore,
    UnknownNodeReference,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
)
from flowdesk.workflow import workflow_editor


class TestPureOperations:
    """The module-level functions never modify their input graph."""

    def test_create_node_returns_new_graph(self):
        graph = WorkflowGraph()
        new_graph, node = workflow_editor.create_node(graph, "kafka", (100, 50))
        assert graph.nodes == []
        assert new_graph.nodes == [node]
        assert node.id == "n1"

    def test_create_without_type_is_noop(self):
        graph = WorkflowGraph()
        new_graph, node = workflow_editor.create_node(graph, "", (0, 0))
        assert node is None
        assert new_graph is graph

    def test_create_with_taken_id_fails(self, sample_graph):
        with pytest.raises(ValueError):
            workflow_editor.create_node(sample_graph, "actor", node_id="n1")

    def test_update_unknown_raises(self, sample_graph):
        with pytest.raises(UnknownNodeReference) as exc:
            workflow_editor.update_node(sample_graph, "ghost", {"label": "x"})
        assert exc.value.node_id == "ghost"

    def test_delete_returns_removed_edges(self, sample_graph):
        new_graph, removed = workflow_editor.delete_node(sample_graph, "n1")
        assert removed == ["c1", "c3"]
        assert len(sample_graph.edges) == 3

    def test_connect_unknown_endpoint_raises(self, sample_graph):
        with pytest.raises(UnknownNodeReference):
            workflow_editor.connect(sample_graph, "n1", "ghost")

    def test_next_node_id_skips_taken(self):
        graph = WorkflowGraph(nodes=[
            WorkflowNode(id="n2", type="actor"),
        ])
        assert workflow_editor.next_node_id(graph) == "n3"

    def test_drop_dangling_edges(self):
        graph = WorkflowGraph(
            nodes=[WorkflowNode(id="a", type="actor")],
            edges=[
                WorkflowEdge(id="x", source="a", target="a"),
                WorkflowEdge(id="y", source="a", target="gone"),
            ],
        )
        cleaned = workflow_editor.drop_dangling_edges(graph)
        assert [e.id for e in cleaned.edges] == ["x"]


class TestCreateNode:
    def test_new_node_defaults(self, store):
        node = store.create_node("kafka", {"x": 100, "y": 50})
        assert node.id == "n1"
        assert node.type == "kafka"
        assert (node.position.x, node.position.y) == (100, 50)
        assert node.data.label == "Kafka"
        assert node.data.name == "Kafka"
        assert node.data.n_type == "kafka"
        assert node.data.class_name == "actionNode"
        assert node.data.node_type == 1
        assert node.data.actions == []
        assert node.data.metadata == {}

    def test_title_cases_camel_types(self, store):
        node = store.create_node("persistenceShard", (0, 0))
        assert node.data.label == "PersistenceShard"

    def test_missing_type_is_ignored(self, store):
        events = []
        store.subscribe(events.append)
        assert store.create_node(None, (1, 1)) is None
        assert store.create_node("", (1, 1)) is None
        assert store.nodes == []
        assert events == []

    def test_unknown_type_is_placed(self, store):
        node = store.create_node("quantumRouter", (0, 0))
        assert node.type == "quantumRouter"

    def test_ids_stay_unique_after_delete(self, store):
        for _ in range(3):
            store.create_node("actor", (0, 0))
        store.delete_node("n2")
        node = store.create_node("actor", (0, 0))
        assert node.id == "n4"
        ids = [n.id for n in store.nodes]
        assert len(ids) == len(set(ids))


class TestUpdateNode:
    def test_label_edit_updates_name(self, store):
        node = store.create_node("kafka", (0, 0))
        record = node.data.model_dump(by_alias=True)
        record["label"] = "Orders"
        updated = store.update_node(node.id, record)
        assert updated.data.label == "Orders"
        assert updated.data.name == "Orders"
        assert store.graph.get_node(node.id).data.name == "Orders"

    def test_replaces_whole_record(self, store):
        node = store.create_node("kafka", (0, 0))
        store.set_metadata_field(node.id, "kafkaTopics", "a,b")
        updated = store.update_node(node.id, {"label": "Bare"})
        assert updated.data.metadata == {}
        assert updated.data.n_type == "kafka"

    def test_type_cannot_be_patched(self, store):
        node = store.create_node("kafka", (0, 0))
        updated = store.on_change(node.id, {"label": "K", "nType": "gateway"})
        assert updated.type == "kafka"
        assert updated.data.n_type == "kafka"

    def test_published_nodes_are_read_only(self, store):
        node = store.create_node("kafka", (0, 0))
        with pytest.raises(ValidationError):
            store.nodes[0].data.label = "x"
        with pytest.raises(ValidationError):
            store.graph.get_node(node.id).position.x = 5
        assert store.graph.get_node(node.id).data.label == "Kafka"

    def test_unknown_id_is_noop(self, store, sample_graph):
        store.load(sample_graph)
        before = store.graph
        events = []
        store.subscribe(events.append)
        assert store.update_node("ghost", {"label": "x"}) is None
        assert store.graph is before
        assert events == []

    def test_previous_graph_is_not_modified(self, store):
        node = store.create_node("kafka", (0, 0))
        before = store.graph
        store.rename_node(node.id, "Renamed")
        assert before.get_node(node.id).data.label == "Kafka"
        assert store.graph.get_node(node.id).data.label == "Renamed"


class TestDeleteNode:
    def test_cascade_removes_incident_edges(self, store, sample_graph):
        store.load(sample_graph)
        incident = [e for e in store.edges if "n1" in (e.source, e.target)]
        assert store.delete_node("n1")
        assert len(store.edges) == len(sample_graph.edges) - len(incident)
        assert all("n1" not in (e.source, e.target) for e in store.edges)
        assert store.graph.get_node("n1") is None

    def test_delete_target_node(self, store, sample_graph):
        store.load(sample_graph)
        store.delete_node("n3")
        assert [e.id for e in store.edges] == ["c1"]

    def test_unknown_id_is_noop(self, store, sample_graph):
        store.load(sample_graph)
        assert store.delete_node("ghost") is False
        assert len(store.nodes) == 3
        assert len(store.edges) == 3


class TestConnect:
    def test_generated_edge(self, store):
        a = store.create_node("gateway", (0, 0))
        b = store.create_node("kafka", (100, 0))
        edge = store.connect(a.id, b.id)
        assert edge.id == "e1"
        assert (edge.source, edge.target) == ("n1", "n2")
        assert (edge.source_handle, edge.target_handle) == ("source", "target")

    def test_branch_handles(self, store):
        v = store.create_node("validator", (0, 0))
        r = store.create_node("region", (100, 0))
        edge = store.connect(v.id, r.id, "success", "in")
        assert edge.source_handle == "success"
        assert edge.target_handle == "in"

    def test_duplicates_are_allowed(self, store):
        a = store.create_node("gateway", (0, 0))
        b = store.create_node("kafka", (100, 0))
        first = store.connect(a.id, b.id)
        second = store.connect(a.id, b.id)
        assert first.id != second.id
        assert len(store.edges) == 2

    def test_self_loop_allowed(self, store):
        a = store.create_node("actor", (0, 0))
        assert store.connect(a.id, a.id) is not None

    def test_unknown_endpoint_is_noop(self, store):
        a = store.create_node("gateway", (0, 0))
        assert store.connect(a.id, "ghost") is None
        assert store.connect("ghost", a.id) is None
        assert store.edges == []


class TestClearAndLoad:
    def test_clear(self, store, sample_graph):
        store.load(sample_graph)
        store.clear()
        assert store.nodes == []
        assert store.edges == []

    def test_load_rejects_duplicate_ids(self, store):
        graph = WorkflowGraph(nodes=[
            WorkflowNode(id="a", type="actor"),
            WorkflowNode(id="a", type="actor"),
        ])
        with pytest.raises(ValueError):
            store.load(graph)
        assert store.nodes == []

    def test_load_drops_dangling_edges(self, store):
        graph = WorkflowGraph(
            nodes=[WorkflowNode(id="a", type="actor")],
            edges=[WorkflowEdge(id="x", source="a", target="gone")],
        )
        store.load(graph)
        assert store.edges == []


class TestRecordEdits:
    def test_actions_by_index(self, store):
        node = store.create_node("gateway", (0, 0))
        store.add_action(node.id)
        store.add_action(node.id, label="second")
        store.update_action(node.id, 0, "formula", "x + 1")
        store.update_action(node.id, 0, "label", "first")
        actions = store.graph.get_node(node.id).data.actions
        assert [(a.label, a.formula) for a in actions] == [("first", "x + 1"), ("second", "")]

        store.remove_action(node.id, 0)
        actions = store.graph.get_node(node.id).data.actions
        assert [a.label for a in actions] == ["second"]

    def test_action_index_out_of_range(self, store):
        node = store.create_node("gateway", (0, 0))
        assert store.update_action(node.id, 3, "label", "x") is None
        assert store.remove_action(node.id, -1) is None

    def test_unknown_action_field(self, store):
        node = store.create_node("gateway", (0, 0))
        store.add_action(node.id)
        with pytest.raises(ValueError):
            store.update_action(node.id, 0, "color", "red")

    def test_metadata_field(self, store):
        node = store.create_node("genericActor", (0, 0))
        store.set_metadata_field(node.id, "totalInstances", "4")
        store.set_metadata_field(node.id, "allowLocalRoutees", "true")
        assert store.graph.get_node(node.id).data.metadata == {
            "totalInstances": "4",
            "allowLocalRoutees": "true",
        }

    def test_edits_on_unknown_node(self, store):
        assert store.rename_node("ghost", "x") is None
        assert store.add_action("ghost") is None
        assert store.set_metadata_field("ghost", "k", "v") is None


class TestEvents:
    def test_event_sequence(self, store):
        events = []
        store.subscribe(events.append)
        a = store.on_drop("gateway", (0, 0))
        b = store.on_drop("kafka", (10, 0))
        store.on_connect(a.id, b.id, "source", "target")
        store.on_change(a.id, {"label": "Edge"})
        store.on_delete(b.id)
        store.clear()
        assert [e.kind for e in events] == [
            GraphEventKind.CREATE,
            GraphEventKind.CREATE,
            GraphEventKind.CONNECT,
            GraphEventKind.UPDATE,
            GraphEventKind.DELETE,
            GraphEventKind.CLEAR,
        ]
        update = events[3]
        assert update.node_id == a.id
        assert update.payload["label"] == "Edge"
        assert update.payload["name"] == "Edge"
        assert events[4].payload == {"removed_edges": ["e1"]}

    def test_unsubscribe(self, store):
        events = []
        unsubscribe = store.subscribe(events.append)
        store.create_node("actor", (0, 0))
        unsubscribe()
        store.create_node("actor", (0, 0))
        assert len(events) == 1

    def test_failing_listener_does_not_block_mutation(self, store):
        def _boom(event):
            raise RuntimeError("view gone")

        store.subscribe(_boom)
        node = store.create_node("actor", (0, 0))
        assert store.graph.get_node(node.id) is not None


def test_store_starts_from_given_graph(sample_graph, editor_config):
    store = GraphStore(sample_graph, config=editor_config)
    assert len(store.nodes) == 3
