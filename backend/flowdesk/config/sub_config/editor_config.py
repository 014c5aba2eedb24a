"""
Editor Configuration.

Controls where workflow documents are stored, how the editor names
new nodes and edges, and how documents are pretty-printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from flowdesk.config.base import BaseConfig, ConfigField, FieldType, register_config

_DEFAULT_WORKFLOW_DIR = str(Path.home() / ".flowdesk" / "workflows")


@register_config
@dataclass
class EditorConfig(BaseConfig):
    """Workflow editor and document settings."""

    workflow_dir: str = _DEFAULT_WORKFLOW_DIR
    node_id_prefix: str = "n"
    edge_id_prefix: str = "e"
    json_indent: int = 2

    _ENV_MAP = {
        "workflow_dir": "FLOWDESK_WORKFLOW_DIR",
        "node_id_prefix": "FLOWDESK_NODE_ID_PREFIX",
        "edge_id_prefix": "FLOWDESK_EDGE_ID_PREFIX",
        "json_indent": "FLOWDESK_JSON_INDENT",
    }

    @classmethod
    def get_config_name(cls) -> str:
        return "editor"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflow Editor"

    @classmethod
    def get_description(cls) -> str:
        return "Document storage directory, id prefixes and JSON formatting."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="workflow_dir",
                field_type=FieldType.PATH,
                label="Workflow Directory",
                description="Directory holding saved workflow documents",
                default=_DEFAULT_WORKFLOW_DIR,
                group="storage",
            ),
            ConfigField(
                name="node_id_prefix",
                field_type=FieldType.STRING,
                label="Node ID Prefix",
                description="Prefix of ids assigned to dropped nodes (n1, n2, …)",
                default="n",
                group="ids",
            ),
            ConfigField(
                name="edge_id_prefix",
                field_type=FieldType.STRING,
                label="Edge ID Prefix",
                description="Prefix of ids assigned to new connections",
                default="e",
                group="ids",
            ),
            ConfigField(
                name="json_indent",
                field_type=FieldType.NUMBER,
                label="JSON Indent",
                description="Indentation used when writing workflow documents",
                default=2,
                min_value=0,
                max_value=8,
                group="storage",
            ),
        ]
