"""
Graph events emitted by ``GraphStore`` after every applied mutation.

The host (canvas, API, test) subscribes and interprets them; the core
never holds a reference back into the view.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field


class GraphEventKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CONNECT = "connect"
    CLEAR = "clear"
    LOAD = "load"


class GraphEvent(BaseModel):
    """A single applied mutation.

    ``payload`` is the node's new data record for ``update``, the new
    node or edge for ``create`` / ``connect``, the removed edge ids for
    ``delete`` and the graph size for ``load``.
    """

    kind: GraphEventKind
    node_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


GraphListener = Callable[[GraphEvent], None]
