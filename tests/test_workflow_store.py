"""Tests for JSON-file persistence of workflow documents."""

import json

import pytest

from flowdesk.workflow import InvalidDocumentError, WorkflowStore


@pytest.fixture
def workflow_store(tmp_path):
    return WorkflowStore(tmp_path / "workflows")


class TestWorkflowStore:
    def test_creates_directory(self, tmp_path):
        store = WorkflowStore(tmp_path / "a" / "b")
        assert store.directory.is_dir()

    def test_save_writes_document(self, workflow_store, sample_graph):
        path = workflow_store.save("orders", sample_graph)
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["startNodeId"] == "n1"
        assert [n["nodeId"] for n in document["flowChart"]["nodes"]] == ["n1", "n2", "n3"]

    def test_save_and_load(self, workflow_store, sample_graph):
        workflow_store.save("orders", sample_graph)
        loaded = workflow_store.load("orders")
        assert [n.id for n in loaded.nodes] == ["n1", "n2", "n3"]
        assert [e.id for e in loaded.edges] == ["c1", "c2", "c3"]

    def test_load_missing_returns_none(self, workflow_store):
        assert workflow_store.load("nothing") is None

    def test_load_malformed_raises(self, workflow_store):
        (workflow_store.directory / "broken.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(InvalidDocumentError):
            workflow_store.load("broken")

    def test_list_skips_malformed(self, workflow_store, sample_graph):
        workflow_store.save("good", sample_graph)
        (workflow_store.directory / "bad.json").write_text('{"variables": {}}', encoding="utf-8")
        assert workflow_store.list_ids() == ["bad", "good"]
        assert list(workflow_store.list_all()) == ["good"]

    @pytest.mark.parametrize("raw", [b"\xff\xfe", b'{"flowChart": "\xff"}'])
    def test_list_skips_undecodable(self, workflow_store, sample_graph, raw):
        workflow_store.save("good", sample_graph)
        (workflow_store.directory / "bad.json").write_bytes(raw)
        assert list(workflow_store.list_all()) == ["good"]

    def test_load_undecodable_raises(self, workflow_store):
        (workflow_store.directory / "binary.json").write_bytes(b'{"flowChart": "\xff"}')
        with pytest.raises(InvalidDocumentError):
            workflow_store.load("binary")

    def test_delete_and_exists(self, workflow_store, sample_graph):
        workflow_store.save("temp", sample_graph)
        assert workflow_store.exists("temp")
        assert workflow_store.delete("temp")
        assert not workflow_store.exists("temp")
        assert workflow_store.delete("temp") is False

    def test_ids_are_sanitized(self, workflow_store, sample_graph):
        path = workflow_store.save("../escape", sample_graph)
        assert path.parent == workflow_store.directory
        assert path.name == "escape.json"

    def test_empty_id_rejected(self, workflow_store, sample_graph):
        with pytest.raises(ValueError):
            workflow_store.save("../", sample_graph)

    def test_indent_from_argument(self, tmp_path, sample_graph):
        store = WorkflowStore(tmp_path, indent=4)
        text = store.save("wide", sample_graph).read_text(encoding="utf-8")
        assert text.startswith('{\n    "startNodeId"')
