"""
Workflow Store — JSON-file persistence for workflow documents.

Stores each workflow as an individual workflow document (the codec's
interchange format) under a configurable directory. Single local
user; there is no locking between processes.
"""

from __future__ import annotations

import re
from logging import getLogger
from pathlib import Path
from typing import Dict, List, Optional, Union

from flowdesk.config import EditorConfig
from flowdesk.workflow.errors import InvalidDocumentError
from flowdesk.workflow.workflow_codec import export_document, import_document
from flowdesk.workflow.workflow_model import WorkflowGraph

logger = getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class WorkflowStore:
    """Persist and load workflow graphs as workflow document files."""

    def __init__(
        self,
        storage_dir: Optional[Union[str, Path]] = None,
        indent: Optional[int] = None,
    ) -> None:
        config = EditorConfig.get_default_instance()
        self._dir = Path(storage_dir or config.workflow_dir)
        self._indent = config.json_indent if indent is None else indent
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"WorkflowStore initialized at {self._dir}")

    @property
    def directory(self) -> Path:
        return self._dir

    # ── CRUD ──

    def save(self, workflow_id: str, graph: WorkflowGraph) -> Path:
        """Save (create or overwrite) a workflow document."""
        path = self._path_for(workflow_id)
        path.write_text(
            export_document(graph).to_json(indent=self._indent),
            encoding="utf-8",
        )
        logger.info(f"Workflow saved: {workflow_id} ({len(graph.nodes)} nodes)")
        return path

    def load(self, workflow_id: str) -> Optional[WorkflowGraph]:
        """Load a single workflow by ID.

        Returns None if no such workflow exists.

        Raises:
            InvalidDocumentError: If the stored file is not a valid document.
        """
        path = self._path_for(workflow_id)
        if not path.is_file():
            return None
        try:
            return self._read(path)
        except InvalidDocumentError as e:
            logger.error(f"Failed to load workflow {workflow_id}: {e.message}")
            raise

    def delete(self, workflow_id: str) -> bool:
        """Remove a stored document; False when there was none."""
        try:
            self._path_for(workflow_id).unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Workflow deleted: {workflow_id}")
        return True

    def list_ids(self) -> List[str]:
        return [p.stem for p in sorted(self._dir.glob("*.json"))]

    def list_all(self) -> Dict[str, WorkflowGraph]:
        """Load every stored workflow, skipping malformed files."""
        workflows: Dict[str, WorkflowGraph] = {}
        for path in sorted(self._dir.glob("*.json")):
            try:
                workflows[path.stem] = self._read(path)
            except InvalidDocumentError as e:
                logger.warning(f"Skipping malformed workflow file {path.name}: {e.message}")
        return workflows

    def exists(self, workflow_id: str) -> bool:
        return self._path_for(workflow_id).is_file()

    # ── Internals ──

    @staticmethod
    def _read(path: Path) -> WorkflowGraph:
        # Bytes go straight to the codec, which reports bad encodings
        # as InvalidDocumentError
        return import_document(path.read_bytes())

    def _path_for(self, workflow_id: str) -> Path:
        name = _UNSAFE_ID_CHARS.sub("", workflow_id)
        if not name:
            raise ValueError(f"Invalid workflow id: {workflow_id!r}")
        return self._dir / f"{name}.json"


_default_store: Optional[WorkflowStore] = None


def get_workflow_store() -> WorkflowStore:
    """Shared store rooted at ``EditorConfig.workflow_dir``."""
    global _default_store
    if _default_store is None:
        _default_store = WorkflowStore()
    return _default_store
