"""
Node Type Registry — the closed table of step kinds and their fields.

Defines every node type the editor can place on the canvas, enriched
with the metadata the presentation layer needs to render it:

    - Which configuration fields are legal for the type, in order
    - Field widget type (text, number, select, json, actions)
    - Display label, icon, color and palette category
    - Output handles (branching nodes expose more than one)

The table is a pure lookup; nothing here mutates a graph. Node metadata
is *not* validated against it: unknown keys and unknown types are
tolerated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================================
# Field Metadata
# ============================================================================


class FieldType(str, Enum):
    """Widget type used to edit a configuration field."""
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    JSON = "json"
    ACTIONS = "actions"


class NodeCategory(str, Enum):
    """Palette grouping for node types."""
    ACTOR = "actor"                   # Actor-system building blocks
    DEMO = "demo"                     # Simple automation demo set
    PIPELINE = "pipeline"             # Registration reference pipeline


@dataclass(frozen=True)
class NodeFieldDef:
    """A single configuration field of a node type."""
    key: str
    label: str
    type: FieldType = FieldType.TEXT
    options: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the frontend."""
        result: Dict[str, Any] = {
            "key": self.key,
            "label": self.label,
            "type": self.type.value,
        }
        if self.options:
            result["options"] = list(self.options)
        return result


@dataclass(frozen=True)
class NodeTypeDef:
    """Metadata for a single node type."""
    node_type: str
    label: str
    category: NodeCategory
    icon: str = ""
    color: str = ""
    fields: tuple = ()
    output_handles: tuple = ("source",)
    input_handles: tuple = ("target",)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type,
            "label": self.label,
            "category": self.category.value,
            "icon": self.icon,
            "color": self.color,
            "fields": [f.to_dict() for f in self.fields],
            "output_handles": list(self.output_handles),
            "input_handles": list(self.input_handles),
        }


_ACTIONS = NodeFieldDef("actions", "Actions", FieldType.ACTIONS)
_BOOL_OPTIONS = ("true", "false")


# ============================================================================
# Built-in Node Types
# ============================================================================

BUILT_IN_NODE_TYPES: List[NodeTypeDef] = [
    # ── Actor set ──
    NodeTypeDef(
        node_type="gateway",
        label="Gateway",
        category=NodeCategory.ACTOR,
        icon="🚪",
        color="#3b82f6",
        fields=(_ACTIONS,),
    ),
    NodeTypeDef(
        node_type="persistenceShard",
        label="Persistence Shard",
        category=NodeCategory.ACTOR,
        icon="💾",
        color="#22c55e",
        fields=(
            NodeFieldDef("gpType", "GP Type"),
            NodeFieldDef("shardName", "Shard Name"),
            NodeFieldDef("shardRole", "Shard Role"),
            NodeFieldDef("numberOfShards", "Number of Shards", FieldType.NUMBER),
            NodeFieldDef("shardKey", "Shard Key"),
            NodeFieldDef("copyKeys", "Copy Keys"),
            NodeFieldDef("enrichKeys", "Enrich Keys"),
            NodeFieldDef("filterKeys", "Filter Keys"),
            _ACTIONS,
        ),
    ),
    NodeTypeDef(
        node_type="kafka",
        label="Kafka",
        category=NodeCategory.ACTOR,
        icon="📨",
        color="#a855f7",
        fields=(
            NodeFieldDef("kafkaTopics", "Kafka Topics"),
            _ACTIONS,
        ),
    ),
    NodeTypeDef(
        node_type="genericActor",
        label="Generic Actor",
        category=NodeCategory.ACTOR,
        icon="⚡",
        color="#eab308",
        fields=(
            NodeFieldDef("gpType", "GP Type"),
            NodeFieldDef("totalInstances", "Total Instances", FieldType.NUMBER),
            NodeFieldDef("routeesPaths", "Routees Paths"),
            NodeFieldDef(
                "allowLocalRoutees", "Allow Local Routees",
                FieldType.SELECT, _BOOL_OPTIONS,
            ),
            NodeFieldDef("userRoles", "User Roles"),
            _ACTIONS,
        ),
    ),
    NodeTypeDef(
        node_type="rtShard",
        label="Realtime Shard",
        category=NodeCategory.ACTOR,
        icon="⚡",
        color="#ef4444",
        fields=(
            NodeFieldDef("gpType", "GP Type"),
            NodeFieldDef("shardName", "Shard Name"),
            NodeFieldDef("shardRole", "Shard Role"),
            NodeFieldDef("numberOfShards", "Number of Shards", FieldType.NUMBER),
            _ACTIONS,
        ),
    ),
    NodeTypeDef(
        node_type="actor",
        label="Actor",
        category=NodeCategory.ACTOR,
        icon="🎭",
        color="#6b7280",
        fields=(
            NodeFieldDef("reply", "Reply", FieldType.SELECT, _BOOL_OPTIONS),
            _ACTIONS,
        ),
    ),

    # ── Demo set ──
    NodeTypeDef(
        node_type="http",
        label="HTTP Request",
        category=NodeCategory.DEMO,
        icon="🌐",
        fields=(
            NodeFieldDef("url", "URL"),
            NodeFieldDef(
                "method", "Method", FieldType.SELECT,
                ("GET", "POST", "PUT", "DELETE"),
            ),
            NodeFieldDef("headers", "Headers", FieldType.JSON),
        ),
    ),
    NodeTypeDef(
        node_type="if",
        label="If",
        category=NodeCategory.DEMO,
        icon="🔀",
        fields=(NodeFieldDef("condition", "Condition"),),
    ),
    NodeTypeDef(
        node_type="delay",
        label="Delay",
        category=NodeCategory.DEMO,
        icon="⏱️",
        fields=(NodeFieldDef("delayTime", "Delay (ms)", FieldType.NUMBER),),
    ),
    NodeTypeDef(
        node_type="function",
        label="Function",
        category=NodeCategory.DEMO,
        icon="ƒ",
        fields=(NodeFieldDef("expression", "Expression"),),
    ),
    NodeTypeDef(
        node_type="set",
        label="Set",
        category=NodeCategory.DEMO,
        icon="📝",
        fields=(NodeFieldDef("fields", "Fields", FieldType.JSON),),
    ),

    # ── Registration pipeline ──
    NodeTypeDef(
        node_type="start",
        label="User Registration",
        category=NodeCategory.PIPELINE,
        icon="👤",
        color="#397bee",
        output_handles=("out",),
        input_handles=(),
    ),
    NodeTypeDef(
        node_type="validator",
        label="Validator",
        category=NodeCategory.PIPELINE,
        icon="🛡️",
        color="#fd9222",
        output_handles=("success", "error"),
        input_handles=("in",),
    ),
    NodeTypeDef(
        node_type="error",
        label="Error Handler",
        category=NodeCategory.PIPELINE,
        icon="⛔",
        color="#ee406e",
        output_handles=(),
        input_handles=("in",),
    ),
    NodeTypeDef(
        node_type="region",
        label="Region Process",
        category=NodeCategory.PIPELINE,
        icon="🌍",
        color="#6c47ec",
        output_handles=("out",),
        input_handles=("in",),
    ),
    NodeTypeDef(
        node_type="email",
        label="Welcome Email",
        category=NodeCategory.PIPELINE,
        icon="✉️",
        color="#33c967",
        output_handles=(),
        input_handles=("in",),
    ),
]

_NODE_TYPE_MAP: Dict[str, NodeTypeDef] = {
    t.node_type: t for t in BUILT_IN_NODE_TYPES
}


# ============================================================================
# Lookup API
# ============================================================================


def is_known_type(node_type: Optional[str]) -> bool:
    """Return True if ``node_type`` is in the built-in table."""
    return bool(node_type) and node_type in _NODE_TYPE_MAP


def get_node_type(node_type: str) -> Optional[NodeTypeDef]:
    """Look up a node type definition by name."""
    return _NODE_TYPE_MAP.get(node_type)


def default_fields_for(node_type: str) -> List[NodeFieldDef]:
    """Return the ordered configuration fields for a node type.

    Unknown types have no fields.
    """
    definition = _NODE_TYPE_MAP.get(node_type)
    if definition is None:
        return []
    return list(definition.fields)


def list_node_types(category: Optional[NodeCategory] = None) -> List[NodeTypeDef]:
    """List node types, optionally filtered by palette category."""
    if category is None:
        return list(BUILT_IN_NODE_TYPES)
    return [t for t in BUILT_IN_NODE_TYPES if t.category == category]


def output_handles_for(node_type: str) -> List[str]:
    """Output handles of a node type (``["source"]`` for unknown types)."""
    definition = _NODE_TYPE_MAP.get(node_type)
    if definition is None:
        return ["source"]
    return list(definition.output_handles)


def title_for(node_type: str) -> str:
    """Default label for a freshly placed node: the type with its first
    letter upper-cased (``persistenceShard`` → ``PersistenceShard``)."""
    if not node_type:
        return ""
    return node_type[0].upper() + node_type[1:]
