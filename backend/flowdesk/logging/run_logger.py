"""
Run Logger — per-run structured log of a simulated pipeline execution.

Every simulator run gets its own ``RunLogger``. Entries are kept in
memory (so a UI can replay what happened) and mirrored to the stdlib
``flowdesk.run`` logger.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List, Optional

logger = getLogger("flowdesk.run")


@dataclass
class RunLogEntry:
    timestamp: str
    level: str
    event: str
    message: str
    stage: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RunLogger:
    """Collects the events of one simulator run."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        self._entries: List[RunLogEntry] = []

    @property
    def entries(self) -> List[RunLogEntry]:
        return list(self._entries)

    def _log(
        self,
        level: int,
        event: str,
        message: str,
        stage: Optional[str] = None,
        **data: Any,
    ) -> None:
        self._entries.append(RunLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=logging.getLevelName(level),
            event=event,
            message=message,
            stage=stage,
            data=data,
        ))
        logger.log(level, f"[{self.run_id}] {message}")

    def log_stage_enter(self, stage: str, node_id: str) -> None:
        self._log(logging.DEBUG, "stage_enter", f"→ {stage} ({node_id})", stage, node_id=node_id)

    def log_stage_exit(
        self,
        stage: str,
        node_id: str,
        duration_ms: int,
        output_preview: Optional[str] = None,
    ) -> None:
        self._log(
            logging.INFO, "stage_exit",
            f"✓ {stage} ({node_id}) in {duration_ms}ms"
            + (f": {output_preview}" if output_preview else ""),
            stage, node_id=node_id, duration_ms=duration_ms,
        )

    def log_edge_decision(self, from_stage: str, decision: str, target: str) -> None:
        self._log(
            logging.INFO, "edge_decision",
            f"{from_stage} → [{decision}] → {target}",
            from_stage, decision=decision, target=target,
        )

    def log_state(self, state: str) -> None:
        self._log(logging.DEBUG, "state", f"state = {state}", state=state)

    def log_error(self, message: str, stage: Optional[str] = None, error_type: str = "") -> None:
        self._log(logging.ERROR, "error", message, stage, error_type=error_type)

    def events(self, event: str) -> List[RunLogEntry]:
        return [e for e in self._entries if e.event == event]


# ── Registry ──

_run_loggers: Dict[str, RunLogger] = {}
_MAX_RUN_LOGGERS = 100


def get_run_logger(run_id: str) -> RunLogger:
    """Return the logger of ``run_id``, creating it on first use.

    Only the most recent runs are kept.
    """
    run_logger = _run_loggers.get(run_id)
    if run_logger is None:
        run_logger = RunLogger(run_id)
        _run_loggers[run_id] = run_logger
        while len(_run_loggers) > _MAX_RUN_LOGGERS:
            _run_loggers.pop(next(iter(_run_loggers)))
    return run_logger
